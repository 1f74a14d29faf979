"""Prompt text sent to the completion provider."""

from __future__ import annotations

from aisast.scanner.models import Finding

ANALYSIS_SYSTEM = (
    "You are a cybersecurity expert specializing in static code analysis and "
    "vulnerability remediation. Reply with JSON only."
)

FIX_SYSTEM = (
    "You are a senior security engineer specializing in secure code "
    "remediation. Reply with JSON only."
)

FILE_SYSTEM = (
    "You are an expert security analyst. Analyze code for security "
    "vulnerabilities and reply with a JSON array only."
)


def finding_prompt(finding: Finding, context: str, target_line: str, language: str) -> str:
    """Ask for an explanation, a replacement line and a confidence score."""
    return f"""Analyze this security finding.

Finding:
- Type: {finding.type}
- Severity: {finding.severity.value}
- Line: {finding.line}
- Message: {finding.message}

Code context:
```{language}
{context}
```

Flagged line ({finding.line}):
```{language}
{target_line}
```

Respond in JSON:
{{
  "explanation": "Why this is a security risk",
  "suggestedFix": "The flagged line rewritten securely, code only",
  "confidence": 85
}}
"""


def fix_prompt(finding: Finding, context: str, target_line: str, language: str) -> str:
    """Ask for a single secure replacement for the flagged line."""
    previous = finding.suggested_fix or "None provided"
    return f"""Generate a secure replacement for the flagged line.

Finding:
- Type: {finding.type}
- Severity: {finding.severity.value}
- Line: {finding.line}
- Description: {finding.message}
- Suggested fix: {previous}

Code context:
```{language}
{context}
```

Flagged line ({finding.line}):
```{language}
{target_line}
```

Keep the original behaviour and indentation. Replace only this line.

Respond in JSON:
{{
  "fixedLine": "The replacement line",
  "explanation": "Why the replacement removes the vulnerability",
  "confidence": 90
}}
"""


def file_prompt(text: str, file_name: str, language: str) -> str:
    """Whole-file pass for issues the catalog does not cover."""
    return f"""Perform a security analysis of this {language} file.

File: {file_name}

```{language}
{text}
```

Report injection, XSS, authentication, sensitive data exposure,
cryptographic weaknesses, insecure deserialization and SSRF issues.

Respond with a JSON array (empty when nothing is found):
[
  {{
    "line": 10,
    "type": "SQL Injection",
    "severity": "critical",
    "description": "SQL query built with user input",
    "confidence": 90,
    "suggestedFix": "Use parameterized queries"
  }}
]
"""
