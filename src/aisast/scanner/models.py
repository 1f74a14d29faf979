"""Scanner data models — findings and scan results."""

from __future__ import annotations

import enum
import time
import uuid
from dataclasses import dataclass, field


class Severity(enum.Enum):
    """Finding severity level, most severe first."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """0 for critical through 3 for low."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.CRITICAL: 0,
    Severity.HIGH: 1,
    Severity.MEDIUM: 2,
    Severity.LOW: 3,
}


class FindingStatus(enum.Enum):
    """Lifecycle state of a finding."""

    DETECTED = "detected"
    ANALYZING = "analyzing"
    FIXED = "fixed"
    FAILED = "failed"


class VulnType(enum.Enum):
    """Closed set of vulnerability classes the catalog can report."""

    CODE_INJECTION = "Code Injection"
    SQL_INJECTION = "SQL Injection"
    XSS = "Cross-Site Scripting (XSS)"
    DOM_XSS = "DOM-based XSS"
    HARDCODED_CREDENTIALS = "Hardcoded Credentials"
    WEAK_HASH = "Weak Cryptographic Hash"
    WEAK_RANDOM = "Weak Random Number Generation"
    INSECURE_HTTP = "Insecure HTTP Request"
    COMMAND_INJECTION = "Command Injection"
    INSECURE_DESERIALIZATION = "Insecure Deserialization"


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass
class Finding:
    """A single detected candidate vulnerability tied to a line and rule."""

    rule_id: str
    type: str
    severity: Severity
    line: int
    message: str
    confidence: int = 70
    status: FindingStatus = FindingStatus.DETECTED
    column: int = 1
    matched_text: str = ""
    source_line: str | None = None
    language: str = ""
    file_name: str = ""
    origin: str = "rule"
    suggested_fix: str | None = None
    explanation: str | None = None
    attempted_fix: str | None = None
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> dict:
        """Wire representation used by the CLI and the web API."""
        return {
            "id": self.id,
            "ruleId": self.rule_id,
            "type": self.type,
            "severity": self.severity.value,
            "line": self.line,
            "column": self.column,
            "message": self.message,
            "description": self.message,
            "confidence": self.confidence,
            "status": self.status.value,
            "file": self.file_name,
            "language": self.language,
            "origin": self.origin,
            "code": self.source_line,
            "suggestedFix": self.suggested_fix,
            "explanation": self.explanation,
            "attemptedFix": self.attempted_fix,
        }


@dataclass
class EnrichmentSummary:
    """How the enrichment pass over one scan went."""

    provider: str = ""
    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    timed_out: int = 0

    def to_dict(self) -> dict:
        return {
            "provider": self.provider,
            "attempted": self.attempted,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "timedOut": self.timed_out,
        }


@dataclass
class ScanResult:
    """Result of scanning one source text."""

    file_name: str
    language: str
    findings: list[Finding] = field(default_factory=list)
    enrichment: EnrichmentSummary = field(default_factory=EnrichmentSummary)
    duration: float = 0.0
    timestamp: float = field(default_factory=time.time)

    @property
    def critical_count(self) -> int:
        return sum(1 for f in self.findings if f.severity == Severity.CRITICAL)


@dataclass
class DirectoryScanResult:
    """Aggregate result of a directory scan."""

    directory: str
    files: list[ScanResult] = field(default_factory=list)
    files_scanned: int = 0
    files_skipped: int = 0
    duration: float = 0.0
    timestamp: float = field(default_factory=time.time)

    @property
    def findings(self) -> list[Finding]:
        return [f for result in self.files for f in result.findings]
