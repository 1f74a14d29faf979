"""Fix applier — rewrites flagged lines, validating every proposed edit."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from pathlib import PurePath

from aisast.fixes.models import BatchFixResult, FixChange, FixResult, FixSource
from aisast.scanner.catalog import entries_for, lookup, normalize_language
from aisast.scanner.engine import split_lines
from aisast.scanner.models import Finding, FindingStatus
from aisast.scanner.patterns import Pattern

logger = logging.getLogger(__name__)

MARKER_CONFIDENCE = 50
MIN_LENGTH_DELTA = 40

# Files under the generic catalog that comment with # rather than //
_HASH_COMMENT_SUFFIXES = {
    ".py", ".pyw", ".rb", ".sh", ".bash", ".zsh", ".pl", ".pm", ".r",
    ".ps1", ".yaml", ".yml", ".toml", ".cfg", ".conf", ".tf",
}

# Advice rather than code ("Use parameterized queries ...")
_PROSE_START = re.compile(
    r"^(?:use|replace|avoid|consider|validate|sanitize|ensure|switch|change|"
    r"remove|never|always|do not|don't|instead|you should)\s",
    re.IGNORECASE,
)
_CODE_CHARS = re.compile(r"[=(){}\[\];:.'\"<>`]")


def comment_prefix(language: str, file_name: str = "") -> str:
    """Line comment token for a marker; // unless the file is known to use #."""
    if normalize_language(language) == "python":
        return "#"
    if PurePath(file_name).suffix.lower() in _HASH_COMMENT_SUFFIXES:
        return "#"
    return "//"


def _indent(line: str) -> str:
    return line[: len(line) - len(line.lstrip())]


def _strip_cr(line: str) -> str:
    return line[:-1] if line.endswith("\r") else line


def is_usable_fix(suggestion: str | None, language: str) -> bool:
    """Whether an externally suggested replacement may be applied as code."""
    if not suggestion or not suggestion.strip():
        return False
    text = suggestion.strip()
    if "```" in text:
        return False
    if _PROSE_START.match(text) or not _CODE_CHARS.search(text):
        return False
    return not any(
        p.matches(_strip_cr(line)) for p in entries_for(language) for line in text.split("\n")
    )


def rule_fix_for(finding: Finding, line: str) -> str | None:
    """The catalog fix for a finding's line, or None when it has none or changes nothing."""
    pattern = lookup(finding.rule_id)
    if pattern is None or not pattern.has_fix:
        return None
    fixed = pattern.apply_fix(line)
    return None if fixed == line else fixed


def _rejection(predicates: tuple[Pattern, ...], original: str, proposed: str) -> str | None:
    """Reason a proposed replacement fails validation, or None when it passes."""
    proposed_lines = proposed.split("\n")
    if any(p.matches(_strip_cr(line)) for p in predicates for line in proposed_lines):
        return "fix still matches the vulnerable pattern"
    if len(proposed_lines) > 2:
        return "fix adds more than one line"
    if abs(len(proposed) - len(original)) > max(MIN_LENGTH_DELTA, len(original)):
        return "fix changes the line length disproportionately"
    return None


def _marker_line(finding: Finding, original: str, language: str) -> str:
    prefix = comment_prefix(language, finding.file_name)
    return (
        f"{_indent(original)}{prefix} AISAST: manual review needed "
        f"for {finding.type} ({finding.rule_id})"
    )


def _failed(finding: Finding, text: str, reason: str, original: str = "") -> FixResult:
    finding.status = FindingStatus.FAILED
    return FixResult(
        finding_id=finding.id,
        status=FindingStatus.FAILED,
        fixed_code=text,
        original_line=original,
        reason=reason,
    )


def _apply(
    finding: Finding,
    text: str,
    suggested_fix: str | None,
    index: int,
    expected: str | None,
) -> FixResult:
    lines = split_lines(text)
    language = finding.language or "generic"

    if not 0 <= index < len(lines):
        logger.debug("Finding %s targets line %d outside the buffer", finding.id, finding.line)
        return _failed(finding, text, "stale: line no longer exists")

    original = lines[index]
    if expected is not None and original != expected:
        logger.debug("Finding %s is stale: line %d changed", finding.id, finding.line)
        return _failed(finding, text, "stale: line changed since scan", original)

    pattern = lookup(finding.rule_id)
    proposed = rule_fix_for(finding, original)
    if proposed is not None:
        source = FixSource.RULE
        predicates = (pattern,)
        explanation = pattern.fix_explanation
        confidence = pattern.fix_confidence
    else:
        suggestion = suggested_fix if suggested_fix is not None else finding.suggested_fix
        if not is_usable_fix(suggestion, language):
            marker = _marker_line(finding, original, language)
            lines.insert(index, marker)
            finding.status = FindingStatus.FAILED
            logger.info("No usable fix for %s on line %d; marked for review", finding.rule_id, finding.line)
            return FixResult(
                finding_id=finding.id,
                status=FindingStatus.FAILED,
                fixed_code="\n".join(lines),
                original_line=original,
                fixed_line=marker,
                source=FixSource.MARKER,
                explanation="No automatic fix available; marked for manual review",
                confidence=MARKER_CONFIDENCE,
                reason="no applicable fix",
                changes=[FixChange(finding.line, "", marker, "manual review marker")],
            )
        source = FixSource.AI
        body = suggestion.strip("\n")
        proposed = _indent(original) + body.lstrip()
        if original.endswith("\r") and not proposed.endswith("\r"):
            proposed += "\r"
        predicates = entries_for(language)
        if pattern is not None and pattern not in predicates:
            predicates = predicates + (pattern,)
        explanation = finding.explanation or "Applied suggested fix"
        confidence = finding.confidence

    reason = _rejection(predicates, original, proposed)
    if reason is not None:
        logger.info("Rejected %s fix for %s: %s", source.value, finding.rule_id, reason)
        finding.attempted_fix = proposed
        result = _failed(finding, text, reason, original)
        result.fixed_line = proposed
        result.source = source
        return result

    lines[index] = proposed
    finding.status = FindingStatus.FIXED
    return FixResult(
        finding_id=finding.id,
        status=FindingStatus.FIXED,
        fixed_code="\n".join(lines),
        original_line=original,
        fixed_line=proposed,
        source=source,
        explanation=explanation,
        confidence=confidence,
        changes=[FixChange(finding.line, original, proposed, explanation)],
    )


def apply_fix(finding: Finding, text: str, suggested_fix: str | None = None) -> FixResult:
    """Fix one finding against ``text``.

    Order of preference: the catalog fix, then a usable suggestion (the
    argument or ``finding.suggested_fix``), then a review marker comment
    inserted above the line. A replacement that still matches a detect
    predicate, or grows the line disproportionately, is rejected and kept
    on ``finding.attempted_fix``; the buffer is then returned untouched.
    """
    return _apply(finding, text, suggested_fix, finding.line - 1, finding.source_line)


def apply_fixes(
    findings: list[Finding],
    text: str,
    suggestions: Mapping[str, str] | None = None,
) -> BatchFixResult:
    """Fix many findings against one buffer, last line first.

    Descending order keeps the line numbers of pending findings valid when a
    fix or marker changes the line count. Findings on the same line are
    applied in their original order, each against the line's current text.
    Results are returned in the order of ``findings``.
    """
    suggestions = suggestions or {}
    order = sorted(range(len(findings)), key=lambda i: findings[i].line, reverse=True)
    results: list[FixResult | None] = [None] * len(findings)

    current = text
    inserted: dict[int, int] = {}  # line -> marker lines inserted above it
    rewritten: dict[int, str] = {}  # line -> text after an earlier fix in this batch

    for i in order:
        finding = findings[i]
        index = finding.line - 1 + inserted.get(finding.line, 0)
        expected = rewritten.get(finding.line, finding.source_line)
        result = _apply(finding, current, suggestions.get(finding.id), index, expected)

        if result.success:
            current = result.fixed_code
            rewritten[finding.line] = result.fixed_line
        elif result.source == FixSource.MARKER:
            current = result.fixed_code
            inserted[finding.line] = inserted.get(finding.line, 0) + 1
        results[i] = result

    batch = BatchFixResult(fixed_code=current, results=results)
    logger.debug("Batch fix: %d fixed, %d failed", batch.fixed_count, batch.failed_count)
    return batch
