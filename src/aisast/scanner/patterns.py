"""Catalog entry type and the regexes shared between languages."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from aisast.scanner.models import Severity, VulnType

Replacement = str | Callable[[re.Match[str]], str]


@dataclass(frozen=True)
class Pattern:
    """A catalog entry: detection regex, metadata, optional deterministic fix."""

    rule_id: str
    vuln_type: VulnType
    severity: Severity
    message: str
    detect: re.Pattern[str]
    fix: tuple[tuple[re.Pattern[str], Replacement], ...] = ()
    fix_explanation: str = ""
    fix_confidence: int = 75
    well_known: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.vuln_type, VulnType):
            # Raises ValueError for names outside the closed set
            object.__setattr__(self, "vuln_type", VulnType(self.vuln_type))
        if not isinstance(self.severity, Severity):
            object.__setattr__(self, "severity", Severity(self.severity))

    @property
    def type(self) -> str:
        return self.vuln_type.value

    @property
    def has_fix(self) -> bool:
        return bool(self.fix)

    def search(self, line: str) -> re.Match[str] | None:
        return self.detect.search(line)

    def matches(self, line: str) -> bool:
        return self.detect.search(line) is not None

    def apply_fix(self, line: str) -> str | None:
        """Run the fix substitutions over a line, or None without a fix."""
        if not self.fix:
            return None
        for regex, replacement in self.fix:
            line = regex.sub(replacement, line)
        return line


def env_name(name: str) -> str:
    """Environment variable name for a credential identifier (dbPassword -> DB_PASSWORD)."""
    split = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", name)
    cleaned = re.sub(r"[^0-9A-Za-z]+", "_", split).strip("_")
    return cleaned.upper() or "SECRET"


def same_case_sha256(m: re.Match[str]) -> str:
    """md5( -> sha256(, MD5( -> SHA256(, keeping the call suffix."""
    name = "SHA256" if m.group(1).isupper() else "sha256"
    return name + m.group(2)


# eval( as a call token; literal_eval( and evaluate( do not match
EVAL_CALL = re.compile(r"\beval\s*\(")

# md5( / sha1( as bare calls or attributes (hashlib.md5, CryptoJS.MD5)
WEAK_HASH_CALL = re.compile(r"\b(md5|sha1)(\s*\()", re.IGNORECASE)

# password = "literal" (also :=, and : in object literals); identifier may
# carry a prefix (dbPassword, client_secret)
CREDENTIAL_LITERAL = re.compile(
    r"\b(\w*?(?:password|passwd|pwd|secret|api_?key))(\s*:?=\s*|\s*:\s*)"
    r"([\"'`])[^\"'`\n]+\3",
    re.IGNORECASE,
)

# "SELECT ... " + value  (string literal opening with a SQL verb, then +)
SQL_CONCAT = re.compile(
    r"[\"'`]\s*(?:SELECT|INSERT|UPDATE|DELETE)\b[^\"`\n]*[\"'`]\s*\+",
    re.IGNORECASE,
)

# Groups: quote, SQL text up to the hole, single concatenated operand.
# A trailing + "'" closing an inline quote is consumed; anything else
# concatenated after the operand leaves the line alone.
SQL_CONCAT_FIX = re.compile(
    r"([\"'`])((?:SELECT|INSERT|UPDATE|DELETE)\b[^\"'`\n]*?)\s*'?\1"
    r"\s*\+\s*([\w.$]+(?:\[[^\]]*\])?(?:\(\))?)(?![\w.$\[(])"
    r"(?:\s*\+\s*([\"`'])'\4)?"
    r"(?!\s*\+)",
    re.IGNORECASE,
)


def sql_placeholder_fix(
    placeholder: str,
    params_open: str,
    params_close: str,
) -> Callable[[re.Match[str]], str]:
    """Turn a concatenated SQL literal into placeholder text.

    When the literal is a call argument (``execute("..." + x)``) the operand
    moves into a params literal after it. Anywhere else a trailing params
    literal would change the expression, so only the placeholder is written
    and the value has to be bound where the query runs.
    """

    def _replace(m: re.Match[str]) -> str:
        quote, sql, operand = m.group(1), m.group(2), m.group(3)
        query = f"{quote}{sql} {placeholder}{quote}"
        if m.string[: m.start()].rstrip().endswith("("):
            return f"{query}, {params_open}{operand}{params_close}"
        return query

    return _replace


def credential_env_fix(template: str) -> Callable[[re.Match[str]], str]:
    """Replace a credential literal with an env lookup; template gets {name}."""

    def _replace(m: re.Match[str]) -> str:
        return m.group(1) + m.group(2) + template.format(name=env_name(m.group(1)))

    return _replace
