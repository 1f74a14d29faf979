"""REST API for the SonarQube adapter."""

from __future__ import annotations

from fastapi import APIRouter, Request

from aisast.sonarqube import fetch_findings
from aisast.web.schemas import SonarAnalyzeRequest

router = APIRouter(tags=["sonarqube"])


@router.get("/sonarqube/status")
async def sonarqube_status(request: Request):
    client = request.app.state.sonarqube
    return {"connected": await client.test_connection()}


@router.post("/sonarqube/analyze")
async def sonarqube_analyze(body: SonarAnalyzeRequest, request: Request):
    result = await fetch_findings(
        request.app.state.sonarqube,
        body.code,
        body.language,
        body.file_name,
        body.component,
    )
    return {
        "success": True,
        "source": result.source,
        "error": result.error,
        "vulnerabilities": [f.to_dict() for f in result.findings],
    }
