"""Scan engine — applies the catalog line by line, and walks directories."""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path

from aisast.errors import InputError
from aisast.scanner.catalog import entries_for, language_for_path, normalize_language
from aisast.scanner.models import DirectoryScanResult, Finding, ScanResult
from aisast.scanner.patterns import Pattern

logger = logging.getLogger(__name__)

BASE_CONFIDENCE = 70
WELL_KNOWN_BONUS = 15
LONG_LINE_PENALTY = 5
LONG_LINE_LENGTH = 100
MAX_DEFAULT_CONFIDENCE = 95

# Directories to always skip
_SKIP_DIRS = {
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    "__pycache__",
    ".mypy_cache",
    ".pytest_cache",
    ".ruff_cache",
    ".venv",
    "venv",
    "env",
    "dist",
    "build",
    ".tox",
    ".eggs",
    ".next",
}

# Binary / non-text extensions to skip
_SKIP_EXTENSIONS = {
    ".pyc",
    ".pyo",
    ".so",
    ".dylib",
    ".dll",
    ".exe",
    ".bin",
    ".dat",
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".ico",
    ".svg",
    ".pdf",
    ".zip",
    ".tar",
    ".gz",
    ".whl",
    ".db",
    ".sqlite",
    ".sqlite3",
    ".lock",
    ".map",
}

# Max file size to scan (1 MB)
_MAX_FILE_SIZE = 1_048_576


def default_confidence(pattern: Pattern, line: str) -> int:
    """Scanner-assigned confidence before any enrichment."""
    confidence = BASE_CONFIDENCE
    if pattern.well_known:
        confidence += WELL_KNOWN_BONUS
    if len(line) > LONG_LINE_LENGTH:
        confidence -= LONG_LINE_PENALTY
    return min(confidence, MAX_DEFAULT_CONFIDENCE)


def split_lines(text: str) -> list[str]:
    """Split on line feeds; line N of the text is index N-1."""
    return text.split("\n")


def scan(text: str, language: str, file_name: str = "") -> list[Finding]:
    """Apply every catalog entry for ``language`` to each line of ``text``.

    A line matched by several entries yields one finding per entry, in
    catalog order. Empty text yields no findings.
    """
    if not isinstance(text, str):
        raise InputError("Source text must be a string")
    if not isinstance(language, str) or not language.strip():
        raise InputError("Language must be a non-empty string")

    if not text:
        return []

    lang = normalize_language(language)
    entries = entries_for(lang)
    findings: list[Finding] = []

    for line_num, raw in enumerate(split_lines(text), start=1):
        line = raw[:-1] if raw.endswith("\r") else raw
        for pattern in entries:
            match = pattern.search(line)
            if match is None:
                continue
            findings.append(
                Finding(
                    rule_id=pattern.rule_id,
                    type=pattern.type,
                    severity=pattern.severity,
                    line=line_num,
                    message=pattern.message,
                    confidence=default_confidence(pattern, line),
                    column=match.start() + 1,
                    matched_text=match.group(0),
                    source_line=raw,
                    language=lang,
                    file_name=file_name,
                )
            )

    return findings


class ScanEngine:
    """Scans a file or every scannable file under a directory."""

    def __init__(
        self,
        exclude_patterns: list[str] | None = None,
        max_file_size: int = _MAX_FILE_SIZE,
    ) -> None:
        self._exclude = set(exclude_patterns or [])
        self._max_file_size = max_file_size

    def scan_file(self, path: str | Path, language: str | None = None) -> ScanResult:
        path = Path(path)
        start = time.time()
        text = path.read_text(encoding="utf-8", errors="ignore")
        lang = normalize_language(language) if language else language_for_path(path)
        result = ScanResult(
            file_name=str(path),
            language=lang,
            findings=scan(text, lang, str(path)),
        )
        result.duration = time.time() - start
        return result

    def scan(self, directory: str | Path, language: str | None = None) -> DirectoryScanResult:
        """Scan a directory and return aggregated results."""
        directory = Path(directory).resolve()
        start = time.time()

        result = DirectoryScanResult(directory=str(directory))

        for file_path in self._walk(directory):
            try:
                file_result = self.scan_file(file_path, language)
            except OSError as e:
                logger.debug("Skipping %s: %s", file_path, e)
                result.files_skipped += 1
                continue

            result.files_scanned += 1
            result.files.append(file_result)

        result.duration = time.time() - start
        return result

    def _walk(self, directory: Path):
        """Walk directory yielding scannable files."""
        for root, dirs, files in os.walk(directory):
            # Prune skipped directories in-place
            dirs[:] = sorted(
                d
                for d in dirs
                if d not in _SKIP_DIRS
                and not d.endswith(".egg-info")
                and d not in self._exclude
            )

            for name in sorted(files):
                path = Path(root) / name
                if path.suffix.lower() in _SKIP_EXTENSIONS:
                    continue
                if name in self._exclude:
                    continue
                try:
                    if path.stat().st_size > self._max_file_size:
                        continue
                except OSError:
                    continue
                yield path
