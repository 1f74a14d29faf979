"""Pattern catalog and line scanner."""

from aisast.scanner.catalog import entries_for, lookup, normalize_language
from aisast.scanner.engine import ScanEngine, scan
from aisast.scanner.models import Finding, FindingStatus, ScanResult, Severity, VulnType

__all__ = [
    "Finding",
    "FindingStatus",
    "ScanEngine",
    "ScanResult",
    "Severity",
    "VulnType",
    "entries_for",
    "lookup",
    "normalize_language",
    "scan",
]
