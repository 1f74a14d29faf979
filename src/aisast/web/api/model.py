"""REST API describing the detection model."""

from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(tags=["model"])


@router.get("/model/status")
async def model_status(request: Request):
    state = request.app.state
    return state.store.model_status(state.config.llm, state.pipeline.bridge.enabled)
