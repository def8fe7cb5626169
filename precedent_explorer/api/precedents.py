"""Precedent explorer API endpoints."""

import json
import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from .. import config
from ..dependencies import get_controller
from ..pipeline import PipelineController

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/precedents", tags=["precedents"])


class StartRunRequest(BaseModel):
    query: str
    language: str = config.DEFAULT_LANGUAGE


class StartRunResponse(BaseModel):
    run_id: str
    status: str


@router.post("/runs", status_code=status.HTTP_202_ACCEPTED, response_model=StartRunResponse)
async def start_run(
    request: StartRunRequest,
    controller: PipelineController = Depends(get_controller),
) -> StartRunResponse:
    """
    Start a precedent analysis run.

    Any run already in flight is cancelled and its state discarded. The
    run continues in the background; poll ``/state`` or follow ``/stream``.

    Raises:
        HTTPException: 400 if the query is blank or the language unsupported
    """
    try:
        run_id = controller.start(request.query, request.language)
    except ValueError as e:
        logger.warning(f"Rejected run request: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error starting run: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    if run_id is None:
        raise HTTPException(status_code=400, detail="Query must not be empty")

    return StartRunResponse(run_id=run_id, status=controller.state.status.value)


@router.post("/cancel")
async def cancel_run(controller: PipelineController = Depends(get_controller)) -> Dict[str, Any]:
    """Interrupt the active run. Returns the resulting state."""
    controller.cancel()
    return controller.state.to_dict()


@router.get("/state")
async def get_state(controller: PipelineController = Depends(get_controller)) -> Dict[str, Any]:
    return controller.state.to_dict()


@router.get("/stream")
async def stream_state(controller: PipelineController = Depends(get_controller)) -> StreamingResponse:
    """
    Stream state changes as Server-Sent Events.

    Each frame is ``data: <state JSON>``. The stream starts with the
    current state and ends when the run completes, fails or is cancelled;
    with no active run it carries a single frame.
    """

    async def event_generator():
        try:
            async for state in controller.watch():
                yield f"data: {json.dumps(state.to_dict(), ensure_ascii=False)}\n\n"
        except Exception as e:
            logger.error(f"Error streaming state: {e}", exc_info=True)
            yield f"data: {json.dumps({'type': 'error', 'message': str(e)})}\n\n"

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        },
    )


@router.get("/presets")
async def list_presets() -> Dict[str, List[str]]:
    return {"presets": list(config.PRESETS)}


@router.get("/languages")
async def list_languages() -> Dict[str, Dict[str, str]]:
    return {"languages": dict(config.SUPPORTED_LANGUAGES)}
