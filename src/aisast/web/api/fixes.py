"""REST API for applying fixes and reading fix history."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request

from aisast.scanner.catalog import normalize_language
from aisast.scanner.engine import scan
from aisast.scanner.models import Finding
from aisast.session.store import SessionStore
from aisast.web.schemas import FixAllRequest, FixRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["fixes"])


def _resolve_finding(body: FixRequest, store: SessionStore) -> tuple[str | None, Finding]:
    """Map the client's finding summary back onto a concrete finding.

    Prefers the stored finding from the scan session, then a fresh scan
    of the submitted code, then a finding built from the summary alone.
    """
    summary = body.vulnerability

    if summary.id:
        hit = store.find_finding(summary.id)
        if hit is not None and hit[1].line == summary.line:
            session, finding = hit
            return session.id, finding

    for finding in scan(body.code, body.language, body.file_name):
        if finding.line != summary.line:
            continue
        if finding.rule_id == summary.rule_id or finding.type == summary.type:
            finding.suggested_fix = summary.suggested_fix
            finding.explanation = summary.explanation
            finding.confidence = summary.confidence
            return body.session_id, finding

    logger.debug("No catalog finding matches %s on line %d", summary.type, summary.line)
    return body.session_id, Finding(
        rule_id=summary.rule_id or "external:finding",
        type=summary.type,
        severity=summary.severity,
        line=summary.line,
        message=summary.message or summary.description,
        confidence=summary.confidence,
        language=normalize_language(body.language),
        file_name=body.file_name,
        origin="ai",
        suggested_fix=summary.suggested_fix,
        explanation=summary.explanation,
    )


@router.post("/fix")
async def fix_finding(body: FixRequest, request: Request):
    store = request.app.state.store
    session_id, finding = _resolve_finding(body, store)
    result = await request.app.state.pipeline.fix(finding, body.code, body.language)
    store.record_fix(finding, result, session_id)
    return result.to_dict()


@router.post("/fix-all")
async def fix_all(body: FixAllRequest, request: Request):
    store = request.app.state.store
    session = store.get(body.session_id) if body.session_id else None
    if session is not None:
        findings = list(session.findings)
    else:
        findings = scan(body.code, body.language, body.file_name)

    batch = request.app.state.pipeline.fix_all(findings, body.code)
    for finding, result in zip(findings, batch.results):
        store.record_fix(finding, result, body.session_id)

    data = batch.to_dict()
    data["vulnerabilities"] = [f.to_dict() for f in findings]
    return data


@router.get("/fixes/history")
async def fix_history(request: Request):
    store = request.app.state.store
    return {
        "history": [r.to_dict() for r in store.history()],
        "metrics": store.fix_metrics(),
    }
