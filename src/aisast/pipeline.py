"""Scan pipeline — scanner, enrichment and fix applier behind one object."""

from __future__ import annotations

import logging
import time

from aisast.analysis.bridge import AnalysisBridge
from aisast.analysis.providers import CompletionProvider, build_provider
from aisast.config import AisastConfig
from aisast.errors import InputError
from aisast.fixes.applier import apply_fix, apply_fixes, is_usable_fix, rule_fix_for
from aisast.fixes.models import BatchFixResult, FixResult
from aisast.scanner.catalog import normalize_language
from aisast.scanner.engine import scan, split_lines
from aisast.scanner.models import Finding, ScanResult

logger = logging.getLogger(__name__)

_UNSET = object()


class ScanPipeline:
    """Runs scans and fixes for one configuration.

    ``provider`` overrides the completion provider built from
    ``config.llm``; pass ``None`` explicitly to disable enrichment.
    """

    def __init__(
        self,
        config: AisastConfig | None = None,
        provider: CompletionProvider | None = _UNSET,  # type: ignore[assignment]
    ) -> None:
        self._config = config or AisastConfig()
        if provider is _UNSET:
            provider = build_provider(self._config.llm)
        self._bridge = AnalysisBridge(provider, self._config.llm)

    @property
    def config(self) -> AisastConfig:
        return self._config

    @property
    def bridge(self) -> AnalysisBridge:
        return self._bridge

    async def scan(
        self,
        text: str,
        language: str,
        file_name: str = "",
        enrich: bool = True,
        analyze_file: bool = False,
    ) -> ScanResult:
        """Scan a source text, optionally enriching findings via the provider."""
        start = time.time()
        findings = scan(text, language, file_name)
        lang = normalize_language(language)

        result = ScanResult(file_name=file_name, language=lang, findings=findings)

        if enrich and self._bridge.enabled:
            if analyze_file:
                extra = await self._bridge.analyze_file(text, file_name, lang)
                seen = {(f.line, f.type) for f in findings}
                for finding in extra:
                    if (finding.line, finding.type) not in seen:
                        findings.append(finding)
                        seen.add((finding.line, finding.type))
            result.enrichment = await self._bridge.enrich_all(findings, text, lang)
        else:
            result.enrichment.provider = self._bridge.provider_name

        result.duration = time.time() - start
        logger.info(
            "Scanned %s (%s): %d finding(s) in %.2fs",
            file_name or "<buffer>",
            lang,
            len(findings),
            result.duration,
        )
        return result

    async def fix(
        self,
        finding: Finding,
        text: str,
        language: str | None = None,
    ) -> FixResult:
        """Fix one finding: catalog fix, else enrichment suggestion, else a fresh suggestion."""
        if not isinstance(text, str):
            raise InputError("Source text must be a string")
        lang = normalize_language(language or finding.language or "generic")
        if not finding.language:
            finding.language = lang

        suggestion = None
        lines = split_lines(text)
        target = lines[finding.line - 1] if 0 < finding.line <= len(lines) else None
        if target is not None and rule_fix_for(finding, target) is None:
            if is_usable_fix(finding.suggested_fix, lang):
                suggestion = finding.suggested_fix
            else:
                suggestion = await self._bridge.suggest_fix(finding, text, lang)

        return apply_fix(finding, text, suggestion)

    async def collect_suggestions(
        self,
        findings: list[Finding],
        text: str,
        language: str,
    ) -> dict[str, str]:
        """Fresh suggestions for findings that have neither a rule fix nor a usable suggestion."""
        lang = normalize_language(language)
        lines = split_lines(text)
        suggestions: dict[str, str] = {}
        for finding in findings:
            if not 0 < finding.line <= len(lines):
                continue
            if rule_fix_for(finding, lines[finding.line - 1]) is not None:
                continue
            if is_usable_fix(finding.suggested_fix, lang):
                continue
            suggestion = await self._bridge.suggest_fix(finding, text, lang)
            if suggestion:
                suggestions[finding.id] = suggestion
        return suggestions

    def fix_all(
        self,
        findings: list[Finding],
        text: str,
        suggestions: dict[str, str] | None = None,
    ) -> BatchFixResult:
        """Fix every finding against one buffer using existing suggestions."""
        if not isinstance(text, str):
            raise InputError("Source text must be a string")
        return apply_fixes(findings, text, suggestions)
