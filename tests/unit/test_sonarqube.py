"""Tests for the SonarQube adapter."""

from __future__ import annotations

import asyncio
import logging

import httpx
import pytest

from aisast.config import SonarQubeConfig
from aisast.scanner.models import Severity
from aisast.sonarqube import (
    SOURCE_FALLBACK,
    SOURCE_SONARQUBE,
    SonarQubeClient,
    fetch_findings,
    map_severity,
)

TEXT = "const a = 1;\nconst data = eval(userInput);\n"


def run_async(coro):
    """Helper to run async functions in sync tests."""
    return asyncio.run(coro)


def _sonar(handler, token: str = "") -> SonarQubeClient:
    config = SonarQubeConfig(url="http://sonar.test", token=token, project_key="proj")
    return SonarQubeClient(config, httpx.AsyncClient(transport=httpx.MockTransport(handler)))


@pytest.mark.parametrize(
    "value,expected",
    [
        ("BLOCKER", Severity.CRITICAL),
        ("CRITICAL", Severity.CRITICAL),
        ("MAJOR", Severity.HIGH),
        ("MINOR", Severity.MEDIUM),
        ("INFO", Severity.LOW),
        ("minor", Severity.MEDIUM),
        ("WHATEVER", Severity.MEDIUM),
        (None, Severity.MEDIUM),
    ],
)
def test_map_severity(value, expected):
    assert map_severity(value) == expected


def test_fetch_findings_from_server():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["component"] = request.url.params.get("componentKeys")
        seen["auth"] = request.headers.get("authorization")
        return httpx.Response(
            200,
            json={
                "issues": [
                    {
                        "key": "AX-1",
                        "rule": "javascript:S1523",
                        "severity": "BLOCKER",
                        "type": "VULNERABILITY",
                        "line": 2,
                        "message": "Make sure that this dynamic injection is safe.",
                    },
                    {"key": "AX-2", "rule": "x", "line": 400, "message": "out of range"},
                ]
            },
        )

    result = run_async(fetch_findings(_sonar(handler, token="tok"), TEXT, "javascript", "app.js"))

    assert result.source == SOURCE_SONARQUBE
    assert result.error is None
    assert seen["path"] == "/api/issues/search"
    assert seen["component"] == "proj:app.js"
    assert seen["auth"].startswith("Basic ")
    assert len(result.findings) == 1
    finding = result.findings[0]
    assert finding.id == "AX-1"
    assert finding.severity == Severity.CRITICAL
    assert finding.line == 2
    assert finding.type == "Vulnerability"
    assert finding.origin == "sonarqube"
    assert finding.source_line == "const data = eval(userInput);"


def test_fallback_is_explicit(caplog):
    def handler(request):
        return httpx.Response(401, json={"errors": [{"msg": "unauthorized"}]})

    with caplog.at_level(logging.WARNING, logger="aisast.sonarqube"):
        result = run_async(fetch_findings(_sonar(handler), TEXT, "javascript", "app.js"))

    assert result.source == SOURCE_FALLBACK
    assert result.fell_back
    assert "401" in result.error
    assert [f.rule_id for f in result.findings] == ["javascript:eval"]
    assert "local catalog" in caplog.text


def test_fallback_on_connection_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    result = run_async(fetch_findings(_sonar(handler), TEXT, "javascript", "app.js", "custom:key"))
    assert result.source == SOURCE_FALLBACK
    assert len(result.findings) == 1


def test_explicit_component():
    seen = {}

    def handler(request):
        seen["component"] = request.url.params.get("componentKeys")
        return httpx.Response(200, json={"issues": []})

    result = run_async(fetch_findings(_sonar(handler), TEXT, "javascript", "app.js", "other:file"))
    assert seen["component"] == "other:file"
    assert result.findings == []
    assert result.source == SOURCE_SONARQUBE


def test_test_connection():
    ok = _sonar(lambda request: httpx.Response(200, json={"status": "UP"}))
    down = _sonar(lambda request: httpx.Response(503))
    assert run_async(ok.test_connection()) is True
    assert run_async(down.test_connection()) is False
