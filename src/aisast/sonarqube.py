"""SonarQube adapter — pulls issues for a file, with an explicit local fallback."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import httpx

from aisast.config import SonarQubeConfig
from aisast.errors import SonarQubeError
from aisast.scanner.catalog import normalize_language
from aisast.scanner.engine import scan, split_lines
from aisast.scanner.models import Finding, Severity

logger = logging.getLogger(__name__)

SOURCE_SONARQUBE = "sonarqube"
SOURCE_FALLBACK = "local-fallback"

_SEVERITY_MAP = {
    "BLOCKER": Severity.CRITICAL,
    "CRITICAL": Severity.CRITICAL,
    "MAJOR": Severity.HIGH,
    "MINOR": Severity.MEDIUM,
    "INFO": Severity.LOW,
}

_TYPE_NAMES = {
    "VULNERABILITY": "Vulnerability",
    "SECURITY_HOTSPOT": "Security Hotspot",
    "BUG": "Bug",
    "CODE_SMELL": "Code Smell",
}


def map_severity(severity: str | None) -> Severity:
    """SonarQube severity to ours; anything unrecognised is medium."""
    return _SEVERITY_MAP.get((severity or "").upper(), Severity.MEDIUM)


@dataclass
class SonarFetchResult:
    """Findings for one file and where they came from."""

    findings: list[Finding] = field(default_factory=list)
    source: str = SOURCE_SONARQUBE
    error: str | None = None

    @property
    def fell_back(self) -> bool:
        return self.source == SOURCE_FALLBACK


class SonarQubeClient:
    """Minimal SonarQube Web API client over httpx."""

    def __init__(
        self,
        config: SonarQubeConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or SonarQubeConfig()
        self._client = client

    @property
    def project_key(self) -> str:
        return self._config.project_key

    def _auth(self) -> tuple[str, str] | None:
        # Tokens are sent as the basic-auth user with an empty password
        return (self._config.token, "") if self._config.token else None

    async def _get(self, path: str, params: dict | None = None) -> httpx.Response:
        url = f"{self._config.url.rstrip('/')}{path}"
        try:
            if self._client is not None:
                resp = await self._client.get(url, params=params, auth=self._auth())
            else:
                async with httpx.AsyncClient(timeout=self._config.timeout) as client:
                    resp = await client.get(url, params=params, auth=self._auth())
            resp.raise_for_status()
            return resp
        except httpx.HTTPStatusError as e:
            raise SonarQubeError(
                f"SonarQube returned HTTP {e.response.status_code} for {path}"
            ) from e
        except httpx.HTTPError as e:
            raise SonarQubeError(f"SonarQube request failed: {e}") from e

    async def test_connection(self) -> bool:
        try:
            await self._get("/api/system/status")
        except SonarQubeError as e:
            logger.debug("SonarQube connection test failed: %s", e)
            return False
        return True

    async def file_issues(self, component: str) -> list[dict]:
        """Unresolved issues for a component key. Raises SonarQubeError."""
        resp = await self._get(
            "/api/issues/search",
            {"componentKeys": component, "resolved": "false"},
        )
        try:
            issues = resp.json()["issues"]
        except (ValueError, KeyError, TypeError) as e:
            raise SonarQubeError("SonarQube issue search returned an unexpected body") from e
        if not isinstance(issues, list):
            raise SonarQubeError("SonarQube issue list is not an array")
        return issues


def _issue_to_finding(
    issue: dict,
    lines: list[str],
    language: str,
    file_name: str,
) -> Finding | None:
    line = issue.get("line") or 1
    if not isinstance(line, int) or not 0 < line <= max(len(lines), 1):
        return None
    finding = Finding(
        rule_id=str(issue.get("rule") or "sonarqube:issue"),
        type=_TYPE_NAMES.get(str(issue.get("type", "")).upper(), "Vulnerability"),
        severity=map_severity(issue.get("severity")),
        line=line,
        message=str(issue.get("message") or ""),
        source_line=lines[line - 1] if lines else "",
        language=language,
        file_name=file_name,
        origin="sonarqube",
    )
    if issue.get("key"):
        finding.id = str(issue["key"])
    return finding


async def fetch_findings(
    client: SonarQubeClient,
    text: str,
    language: str,
    file_name: str,
    component: str | None = None,
) -> SonarFetchResult:
    """Fetch SonarQube findings for a file, falling back to the local catalog.

    The fallback is reported through ``source`` and ``error`` and logged at
    WARNING; it is never silent.
    """
    lang = normalize_language(language)
    component = component or f"{client.project_key}:{file_name}"
    try:
        issues = await client.file_issues(component)
    except SonarQubeError as e:
        logger.warning("SonarQube unavailable, using local catalog for %s: %s", file_name, e)
        return SonarFetchResult(
            findings=scan(text, language, file_name),
            source=SOURCE_FALLBACK,
            error=str(e),
        )

    lines = split_lines(text)
    findings = []
    for issue in issues:
        if not isinstance(issue, dict):
            continue
        finding = _issue_to_finding(issue, lines, lang, file_name)
        if finding is not None:
            findings.append(finding)
    return SonarFetchResult(findings=findings, source=SOURCE_SONARQUBE)
