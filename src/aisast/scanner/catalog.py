"""Pattern catalog — language → ordered, immutable catalog entries."""

from __future__ import annotations

from pathlib import Path

from aisast.scanner.languages.generic import GENERIC_PATTERNS
from aisast.scanner.languages.java import JAVA_PATTERNS
from aisast.scanner.languages.javascript import JAVASCRIPT_PATTERNS, TYPESCRIPT_PATTERNS
from aisast.scanner.languages.python import PYTHON_PATTERNS
from aisast.scanner.patterns import Pattern

GENERIC = "generic"

_CATALOG: dict[str, tuple[Pattern, ...]] = {
    "javascript": JAVASCRIPT_PATTERNS,
    "typescript": TYPESCRIPT_PATTERNS,
    "python": PYTHON_PATTERNS,
    "java": JAVA_PATTERNS,
    GENERIC: GENERIC_PATTERNS,
}

_ALIASES = {
    "js": "javascript",
    "jsx": "javascript",
    "javascriptreact": "javascript",
    "node": "javascript",
    "ts": "typescript",
    "tsx": "typescript",
    "typescriptreact": "typescript",
    "py": "python",
    "python3": "python",
}

# File extension → language
_EXTENSIONS = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".py": "python",
    ".java": "java",
}

_BY_RULE_ID: dict[str, Pattern] = {
    p.rule_id: p for entries in _CATALOG.values() for p in entries
}


def normalize_language(language: str) -> str:
    """Lower-case and resolve aliases; unlisted languages map to ``generic``."""
    name = language.strip().lower()
    name = _ALIASES.get(name, name)
    return name if name in _CATALOG else GENERIC


def supported_languages() -> list[str]:
    return [name for name in _CATALOG if name != GENERIC]


def language_for_path(path: str | Path) -> str:
    """Infer a language from a file extension (``generic`` when unknown)."""
    return _EXTENSIONS.get(Path(path).suffix.lower(), GENERIC)


def entries_for(language: str) -> tuple[Pattern, ...]:
    """Ordered catalog entries for a language, falling back to the generic subset."""
    return _CATALOG[normalize_language(language)]


def lookup(rule_id: str) -> Pattern | None:
    """Resolve a rule id (``javascript:eval``) to its catalog entry."""
    return _BY_RULE_ID.get(rule_id)


def rule_count() -> int:
    return len(_BY_RULE_ID)
