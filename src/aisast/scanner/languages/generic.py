"""Language-agnostic patterns — fallback for any unlisted language."""

from __future__ import annotations

from aisast.scanner.models import Severity, VulnType
from aisast.scanner.patterns import (
    CREDENTIAL_LITERAL,
    EVAL_CALL,
    WEAK_HASH_CALL,
    Pattern,
    same_case_sha256,
)


def generic_patterns(language: str = "generic") -> tuple[Pattern, ...]:
    """Patterns that do not depend on language syntax, ids scoped to ``language``."""
    return (
        Pattern(
            rule_id=f"{language}:eval",
            vuln_type=VulnType.CODE_INJECTION,
            severity=Severity.CRITICAL,
            message="Using eval can lead to code injection vulnerabilities",
            detect=EVAL_CALL,
            well_known=True,
        ),
        Pattern(
            rule_id=f"{language}:weak-hash",
            vuln_type=VulnType.WEAK_HASH,
            severity=Severity.MEDIUM,
            message="MD5 and SHA-1 are weak cryptographic hash functions",
            detect=WEAK_HASH_CALL,
            fix=((WEAK_HASH_CALL, same_case_sha256),),
            fix_explanation="Replaced the weak hash function with SHA-256",
            fix_confidence=75,
        ),
        Pattern(
            rule_id=f"{language}:hardcoded-credentials",
            vuln_type=VulnType.HARDCODED_CREDENTIALS,
            severity=Severity.CRITICAL,
            message="Hardcoded credentials detected in source code",
            detect=CREDENTIAL_LITERAL,
        ),
    )


GENERIC_PATTERNS = generic_patterns()
