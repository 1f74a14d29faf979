"""REST API for scan sessions."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter(tags=["sessions"])


@router.get("/sessions")
async def list_sessions(request: Request):
    store = request.app.state.store
    return [s.to_dict(include_findings=False) for s in store.list_sessions()]


@router.get("/sessions/{session_id}")
async def get_session(session_id: str, request: Request):
    session = request.app.state.store.get(session_id)
    if not session:
        return JSONResponse(
            status_code=404,
            content={"detail": "Session not found"},
        )
    return session.to_dict()
