"""JavaScript/TypeScript patterns."""

from __future__ import annotations

import re

from aisast.scanner.models import Severity, VulnType
from aisast.scanner.patterns import (
    CREDENTIAL_LITERAL,
    EVAL_CALL,
    SQL_CONCAT,
    SQL_CONCAT_FIX,
    WEAK_HASH_CALL,
    Pattern,
    credential_env_fix,
    same_case_sha256,
    sql_placeholder_fix,
)

_FUNCTION_CTOR = re.compile(r"\bnew\s+Function\s*\(")
_HTML_SINK = re.compile(r"\.(?:innerHTML|outerHTML)\s*(?:\+?=)(?!=)")
_INNER_HTML_ASSIGN = re.compile(r"\.innerHTML(\s*)(\+?=)(?!=)")
_DOCUMENT_WRITE = re.compile(r"\bdocument\.write(?:ln)?\s*\(")
_CREATE_HASH_WEAK = re.compile(
    r"(\bcreateHash\s*\(\s*)([\"'`])(?:md5|sha1)\2",
    re.IGNORECASE,
)
_WEAK_HASH = re.compile(
    r"\b(?:md5|sha1)\s*\(|\bcreateHash\s*\(\s*[\"'`](?:md5|sha1)[\"'`]",
    re.IGNORECASE,
)
_MATH_RANDOM = re.compile(r"\bMath\.random\s*\(\s*\)")
_FETCH_HTTP = re.compile(r"(\bfetch\s*\(\s*)([\"'`])http://(?!localhost\b|127\.0\.0\.1\b)")


def _javascript_patterns(language: str) -> tuple[Pattern, ...]:
    return (
        Pattern(
            rule_id=f"{language}:eval",
            vuln_type=VulnType.CODE_INJECTION,
            severity=Severity.CRITICAL,
            message="Using eval can lead to code injection vulnerabilities",
            detect=EVAL_CALL,
            fix=((EVAL_CALL, "JSON.parse("),),
            fix_explanation="Replaced eval() with JSON.parse() to prevent code injection",
            fix_confidence=85,
            well_known=True,
        ),
        Pattern(
            rule_id=f"{language}:function-constructor",
            vuln_type=VulnType.CODE_INJECTION,
            severity=Severity.CRITICAL,
            message="The Function constructor compiles code from strings like eval",
            detect=_FUNCTION_CTOR,
        ),
        Pattern(
            rule_id=f"{language}:inner-html",
            vuln_type=VulnType.XSS,
            severity=Severity.HIGH,
            message=(
                "Using innerHTML can expose the application to "
                "Cross-Site Scripting (XSS) attacks"
            ),
            detect=_HTML_SINK,
            fix=((_INNER_HTML_ASSIGN, r".textContent\1\2"),),
            fix_explanation="Replaced innerHTML with textContent to prevent XSS",
            fix_confidence=90,
            well_known=True,
        ),
        Pattern(
            rule_id=f"{language}:document-write",
            vuln_type=VulnType.DOM_XSS,
            severity=Severity.HIGH,
            message="document.write can lead to DOM-based XSS vulnerabilities",
            detect=_DOCUMENT_WRITE,
        ),
        Pattern(
            rule_id=f"{language}:hardcoded-credentials",
            vuln_type=VulnType.HARDCODED_CREDENTIALS,
            severity=Severity.CRITICAL,
            message="Hardcoded credentials detected in source code",
            detect=CREDENTIAL_LITERAL,
            fix=((CREDENTIAL_LITERAL, credential_env_fix("process.env.{name}")),),
            fix_explanation="Replaced hardcoded credential with an environment variable",
            fix_confidence=80,
        ),
        Pattern(
            rule_id=f"{language}:sql-concatenation",
            vuln_type=VulnType.SQL_INJECTION,
            severity=Severity.CRITICAL,
            message="SQL query built from user input can lead to SQL injection",
            detect=SQL_CONCAT,
            fix=((SQL_CONCAT_FIX, sql_placeholder_fix("?", "[", "]")),),
            fix_explanation=(
                "Replaced string concatenation with a parameterized query; "
                "bind the value where the query runs if it is not passed alongside"
            ),
            fix_confidence=85,
        ),
        Pattern(
            rule_id=f"{language}:weak-hash",
            vuln_type=VulnType.WEAK_HASH,
            severity=Severity.MEDIUM,
            message="MD5 and SHA-1 are weak cryptographic hash functions",
            detect=_WEAK_HASH,
            fix=(
                (_CREATE_HASH_WEAK, r"\1\2sha256\2"),
                (WEAK_HASH_CALL, same_case_sha256),
            ),
            fix_explanation="Replaced the weak hash function with SHA-256",
            fix_confidence=85,
        ),
        Pattern(
            rule_id=f"{language}:math-random",
            vuln_type=VulnType.WEAK_RANDOM,
            severity=Severity.LOW,
            message="Math.random is not cryptographically secure",
            detect=_MATH_RANDOM,
        ),
        Pattern(
            rule_id=f"{language}:insecure-fetch",
            vuln_type=VulnType.INSECURE_HTTP,
            severity=Severity.MEDIUM,
            message="HTTP request over an unencrypted connection",
            detect=_FETCH_HTTP,
            fix=((_FETCH_HTTP, r"\1\2https://"),),
            fix_explanation="Switched the request to HTTPS",
            fix_confidence=80,
        ),
    )


JAVASCRIPT_PATTERNS = _javascript_patterns("javascript")
TYPESCRIPT_PATTERNS = _javascript_patterns("typescript")
