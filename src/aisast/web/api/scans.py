"""REST API for scanning source text."""

from __future__ import annotations

from fastapi import APIRouter, Request

from aisast.web.schemas import ScanRequest

router = APIRouter(tags=["scans"])


@router.post("/scan")
async def scan_code(body: ScanRequest, request: Request):
    pipeline = request.app.state.pipeline
    result = await pipeline.scan(
        body.code,
        body.language,
        body.file_name,
        enrich=body.enrich,
        analyze_file=body.analyze_file,
    )
    session = request.app.state.store.add_scan(result)
    return {
        "success": True,
        "sessionId": session.id,
        "language": result.language,
        "vulnerabilities": [f.to_dict() for f in result.findings],
        "enrichment": result.enrichment.to_dict(),
        "duration": result.duration,
    }
