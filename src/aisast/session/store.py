"""In-memory session store shared by the web API handlers."""

from __future__ import annotations

import threading
import time
from collections import Counter, OrderedDict

from aisast import __version__
from aisast.config import LLMConfig
from aisast.fixes.models import FixResult
from aisast.scanner.catalog import rule_count, supported_languages
from aisast.scanner.models import Finding, ScanResult
from aisast.session.models import FixRecord, ScanSession


class SessionStore:
    """Thread-safe, bounded store of recent scan sessions and fix history.

    Sessions are evicted oldest first once ``max_sessions`` is reached.
    Fix history is kept separately so metrics survive eviction.
    """

    def __init__(self, max_sessions: int = 100, max_history: int = 1000) -> None:
        self._max_sessions = max(1, max_sessions)
        self._max_history = max(1, max_history)
        self._sessions: OrderedDict[str, ScanSession] = OrderedDict()
        self._history: list[FixRecord] = []
        self._lock = threading.Lock()

    def add_scan(self, result: ScanResult) -> ScanSession:
        session = ScanSession(
            file_name=result.file_name,
            language=result.language,
            findings=list(result.findings),
            enrichment=result.enrichment,
        )
        with self._lock:
            self._sessions[session.id] = session
            while len(self._sessions) > self._max_sessions:
                self._sessions.popitem(last=False)
        return session

    def get(self, session_id: str) -> ScanSession | None:
        with self._lock:
            return self._sessions.get(session_id)

    def list_sessions(self) -> list[ScanSession]:
        """All sessions, most recent first."""
        with self._lock:
            return list(reversed(self._sessions.values()))

    def find_finding(self, finding_id: str) -> tuple[ScanSession, Finding] | None:
        with self._lock:
            for session in reversed(self._sessions.values()):
                finding = session.find(finding_id)
                if finding is not None:
                    return session, finding
        return None

    def record_fix(
        self,
        finding: Finding,
        result: FixResult,
        session_id: str | None = None,
    ) -> FixRecord:
        record = FixRecord.from_result(finding, result)
        with self._lock:
            self._history.append(record)
            if len(self._history) > self._max_history:
                del self._history[: len(self._history) - self._max_history]
            session = self._sessions.get(session_id) if session_id else None
            if session is not None:
                session.fixes.append(record)
                session.updated_at = time.time()
        return record

    def history(self) -> list[FixRecord]:
        """Fix history, most recent first."""
        with self._lock:
            return list(reversed(self._history))

    def fix_metrics(self) -> dict:
        """Aggregate statistics over the recorded fix history."""
        with self._lock:
            records = list(self._history)

        total = len(records)
        fixed = sum(1 for r in records if r.success)
        return {
            "totalFixes": total,
            "successfulFixes": fixed,
            "successRate": round(fixed / total * 100, 1) if total else 0.0,
            "averageConfidence": (
                round(sum(r.confidence for r in records) / total, 1) if total else 0.0
            ),
            "fixesByType": dict(Counter(r.type for r in records)),
            "fixesBySeverity": dict(Counter(r.severity for r in records)),
        }

    def model_status(self, llm: LLMConfig, enrichment_enabled: bool) -> dict:
        """Read-only description of the detection model.

        The catalog is static: nothing is trained, and accuracy is the
        fix success rate from history (None until a fix has been recorded).
        """
        metrics = self.fix_metrics()
        return {
            "version": __version__,
            "staticCatalog": True,
            "lastTraining": None,
            "languages": supported_languages(),
            "ruleCount": rule_count(),
            "provider": llm.provider if enrichment_enabled else None,
            "model": llm.resolved_model if enrichment_enabled else None,
            "enrichmentEnabled": enrichment_enabled,
            "accuracy": metrics["successRate"] if metrics["totalFixes"] else None,
            "totalFixes": metrics["totalFixes"],
        }
