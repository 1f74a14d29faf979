"""Session data models — scan sessions and fix history."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field

from aisast.fixes.models import FixResult
from aisast.scanner.models import EnrichmentSummary, Finding


@dataclass
class FixRecord:
    """A single fix attempt, kept for history and metrics."""

    finding_id: str
    type: str
    severity: str
    success: bool
    source: str
    confidence: int
    file_name: str = ""
    reason: str | None = None
    timestamp: float = field(default_factory=time.time)
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])

    @classmethod
    def from_result(cls, finding: Finding, result: FixResult) -> FixRecord:
        return cls(
            finding_id=finding.id,
            type=finding.type,
            severity=finding.severity.value,
            success=result.success,
            source=result.source.value if result.source else "none",
            confidence=result.confidence,
            file_name=finding.file_name,
            reason=result.reason,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "findingId": self.finding_id,
            "type": self.type,
            "severity": self.severity,
            "success": self.success,
            "source": self.source,
            "confidence": self.confidence,
            "file": self.file_name,
            "reason": self.reason,
            "timestamp": self.timestamp,
        }


@dataclass
class ScanSession:
    """One scanned buffer with its findings and the fixes applied to it."""

    file_name: str
    language: str
    findings: list[Finding] = field(default_factory=list)
    fixes: list[FixRecord] = field(default_factory=list)
    enrichment: EnrichmentSummary = field(default_factory=EnrichmentSummary)
    created_at: float = field(default_factory=time.time)
    updated_at: float = field(default_factory=time.time)
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])

    def find(self, finding_id: str) -> Finding | None:
        for finding in self.findings:
            if finding.id == finding_id:
                return finding
        return None

    def to_dict(self, include_findings: bool = True) -> dict:
        data = {
            "id": self.id,
            "fileName": self.file_name,
            "language": self.language,
            "findingCount": len(self.findings),
            "fixCount": len(self.fixes),
            "enrichment": self.enrichment.to_dict(),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if include_findings:
            data["vulnerabilities"] = [f.to_dict() for f in self.findings]
            data["fixes"] = [r.to_dict() for r in self.fixes]
        return data
