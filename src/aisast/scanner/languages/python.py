"""Python patterns."""

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

_EXEC_CALL = re.compile(r"(?<![\w.])exec\s*\(")
_FSTRING_SQL = re.compile(
    r"\b[fF][rR]?([\"'])\s*(?:SELECT|INSERT|UPDATE|DELETE)\b[^\"'\n]*\{",
    re.IGNORECASE,
)
_OS_SYSTEM = re.compile(r"\bos\.(?:system|popen)\s*\(")
_SHELL_TRUE = re.compile(r"\bsubprocess\.\w+\s*\(.*\bshell\s*=\s*True\b")
_SHELL_TRUE_ARG = re.compile(r"\bshell(\s*)=(\s*)True\b")
_PICKLE_LOAD = re.compile(r"\b(?:c?[pP]ickle)\.(loads?)\s*\(")
_YAML_LOAD = re.compile(r"\byaml\.load\s*\((?![^)]*Loader\s*=)")
_YAML_LOAD_NAME = re.compile(r"\byaml\.load(\s*\()")

PYTHON_PATTERNS: tuple[Pattern, ...] = (
    Pattern(
        rule_id="python:eval",
        vuln_type=VulnType.CODE_INJECTION,
        severity=Severity.CRITICAL,
        message="Using eval can lead to code injection vulnerabilities",
        detect=EVAL_CALL,
        fix=((EVAL_CALL, "ast.literal_eval("),),
        fix_explanation="Replaced eval() with ast.literal_eval() which only evaluates literals",
        fix_confidence=85,
        well_known=True,
    ),
    Pattern(
        rule_id="python:exec",
        vuln_type=VulnType.CODE_INJECTION,
        severity=Severity.CRITICAL,
        message="exec() runs arbitrary Python code",
        detect=_EXEC_CALL,
    ),
    Pattern(
        rule_id="python:hardcoded-credentials",
        vuln_type=VulnType.HARDCODED_CREDENTIALS,
        severity=Severity.CRITICAL,
        message="Hardcoded credentials detected in source code",
        detect=CREDENTIAL_LITERAL,
        fix=((CREDENTIAL_LITERAL, credential_env_fix('os.environ["{name}"]')),),
        fix_explanation="Replaced hardcoded credential with an environment variable",
        fix_confidence=80,
    ),
    Pattern(
        rule_id="python:sql-concatenation",
        vuln_type=VulnType.SQL_INJECTION,
        severity=Severity.CRITICAL,
        message="SQL query built from user input can lead to SQL injection",
        detect=SQL_CONCAT,
        fix=((SQL_CONCAT_FIX, sql_placeholder_fix("%s", "(", ",)")),),
        fix_explanation=(
            "Replaced string concatenation with a parameterized query; "
            "bind the value where the query runs if it is not passed alongside"
        ),
        fix_confidence=85,
    ),
    Pattern(
        rule_id="python:sql-fstring",
        vuln_type=VulnType.SQL_INJECTION,
        severity=Severity.CRITICAL,
        message="f-string used to build a SQL query with embedded values",
        detect=_FSTRING_SQL,
    ),
    Pattern(
        rule_id="python:os-system",
        vuln_type=VulnType.COMMAND_INJECTION,
        severity=Severity.CRITICAL,
        message="Executing shell commands with user input can lead to command injection",
        detect=_OS_SYSTEM,
    ),
    Pattern(
        rule_id="python:subprocess-shell",
        vuln_type=VulnType.COMMAND_INJECTION,
        severity=Severity.HIGH,
        message="subprocess call with shell=True passes input through the shell",
        detect=_SHELL_TRUE,
        fix=((_SHELL_TRUE_ARG, r"shell\1=\2False"),),
        fix_explanation="Disabled shell interpretation for the subprocess call",
        fix_confidence=75,
    ),
    Pattern(
        rule_id="python:pickle",
        vuln_type=VulnType.INSECURE_DESERIALIZATION,
        severity=Severity.HIGH,
        message="Unsafe pickle usage can lead to code execution",
        detect=_PICKLE_LOAD,
        fix=((_PICKLE_LOAD, r"json.\1("),),
        fix_explanation="Replaced pickle with JSON deserialization",
        fix_confidence=75,
    ),
    Pattern(
        rule_id="python:yaml-load",
        vuln_type=VulnType.INSECURE_DESERIALIZATION,
        severity=Severity.MEDIUM,
        message="yaml.load without an explicit Loader can construct arbitrary objects",
        detect=_YAML_LOAD,
        fix=((_YAML_LOAD_NAME, r"yaml.safe_load\1"),),
        fix_explanation="Replaced yaml.load with yaml.safe_load",
        fix_confidence=90,
    ),
    Pattern(
        rule_id="python:weak-hash",
        vuln_type=VulnType.WEAK_HASH,
        severity=Severity.MEDIUM,
        message="MD5 and SHA-1 are weak cryptographic hash functions",
        detect=WEAK_HASH_CALL,
        fix=((WEAK_HASH_CALL, same_case_sha256),),
        fix_explanation="Replaced the weak hash function with SHA-256",
        fix_confidence=85,
    ),
)
