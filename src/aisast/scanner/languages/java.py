"""Java patterns."""

from __future__ import annotations

import re

from aisast.scanner.models import Severity, VulnType
from aisast.scanner.patterns import (
    CREDENTIAL_LITERAL,
    EVAL_CALL,
    SQL_CONCAT,
    Pattern,
    credential_env_fix,
)

_EXECUTE_CONCAT = re.compile(r"\.execute(?:Query|Update)?\s*\([^;]*\+")
_DESERIALIZE = re.compile(r"\bnew\s+ObjectInputStream\s*\(|\.readObject\s*\(\s*\)")
_RUNTIME_EXEC = re.compile(r"\bRuntime\.getRuntime\s*\(\s*\)\s*\.exec\s*\(")
_MESSAGE_DIGEST_WEAK = re.compile(
    r"(\bMessageDigest\.getInstance\s*\(\s*)\"(?:MD5|SHA-?1)\"",
    re.IGNORECASE,
)

JAVA_PATTERNS: tuple[Pattern, ...] = (
    Pattern(
        rule_id="java:script-eval",
        vuln_type=VulnType.CODE_INJECTION,
        severity=Severity.CRITICAL,
        message="Evaluating script text (ScriptEngine.eval) can lead to code injection",
        detect=EVAL_CALL,
        well_known=True,
    ),
    Pattern(
        rule_id="java:sql-concatenation",
        vuln_type=VulnType.SQL_INJECTION,
        severity=Severity.CRITICAL,
        message="SQL query built from user input can lead to SQL injection",
        detect=SQL_CONCAT,
    ),
    Pattern(
        rule_id="java:statement-execute",
        vuln_type=VulnType.SQL_INJECTION,
        severity=Severity.CRITICAL,
        message="Statement executed with a concatenated query; use PreparedStatement",
        detect=_EXECUTE_CONCAT,
    ),
    Pattern(
        rule_id="java:deserialization",
        vuln_type=VulnType.INSECURE_DESERIALIZATION,
        severity=Severity.CRITICAL,
        message="Deserializing untrusted data can lead to remote code execution",
        detect=_DESERIALIZE,
    ),
    Pattern(
        rule_id="java:runtime-exec",
        vuln_type=VulnType.COMMAND_INJECTION,
        severity=Severity.CRITICAL,
        message="Runtime.exec with user input can lead to command injection",
        detect=_RUNTIME_EXEC,
    ),
    Pattern(
        rule_id="java:hardcoded-credentials",
        vuln_type=VulnType.HARDCODED_CREDENTIALS,
        severity=Severity.CRITICAL,
        message="Hardcoded credentials detected in source code",
        detect=CREDENTIAL_LITERAL,
        fix=((CREDENTIAL_LITERAL, credential_env_fix('System.getenv("{name}")')),),
        fix_explanation="Replaced hardcoded credential with an environment variable",
        fix_confidence=80,
    ),
    Pattern(
        rule_id="java:weak-hash",
        vuln_type=VulnType.WEAK_HASH,
        severity=Severity.MEDIUM,
        message="MD5 and SHA-1 are weak cryptographic hash functions",
        detect=_MESSAGE_DIGEST_WEAK,
        fix=((_MESSAGE_DIGEST_WEAK, r'\1"SHA-256"'),),
        fix_explanation="Switched MessageDigest to SHA-256",
        fix_confidence=90,
    ),
)
