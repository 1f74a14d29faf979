"""Fix data models — per-finding outcomes and batch results."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from aisast.scanner.models import FindingStatus


class FixSource(enum.Enum):
    """Where a proposed replacement came from."""

    RULE = "rule"
    AI = "ai"
    MARKER = "marker"


@dataclass
class FixChange:
    """One line-level edit made (or attempted) by a fix."""

    line: int
    original: str
    fixed: str
    reason: str = ""

    def to_dict(self) -> dict:
        return {
            "line": self.line,
            "original": self.original,
            "fixed": self.fixed,
            "reason": self.reason,
        }


@dataclass
class FixResult:
    """Outcome of applying a fix for one finding."""

    finding_id: str
    status: FindingStatus
    fixed_code: str
    original_line: str = ""
    fixed_line: str | None = None
    source: FixSource | None = None
    explanation: str = ""
    confidence: int = 0
    reason: str | None = None
    changes: list[FixChange] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.status == FindingStatus.FIXED

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "findingId": self.finding_id,
            "status": self.status.value,
            "fixedCode": self.fixed_code,
            "originalLine": self.original_line,
            "fixedLine": self.fixed_line,
            "source": self.source.value if self.source else None,
            "explanation": self.explanation,
            "confidence": self.confidence,
            "reason": self.reason,
            "changes": [c.to_dict() for c in self.changes],
        }


@dataclass
class BatchFixResult:
    """Outcome of fixing many findings against one buffer."""

    fixed_code: str
    results: list[FixResult] = field(default_factory=list)

    @property
    def fixed_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed_count(self) -> int:
        return sum(1 for r in self.results if not r.success)

    def to_dict(self) -> dict:
        return {
            "success": True,
            "fixedCode": self.fixed_code,
            "fixed": self.fixed_count,
            "failed": self.failed_count,
            "results": [r.to_dict() for r in self.results],
        }
