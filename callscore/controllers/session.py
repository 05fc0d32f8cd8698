"""Session endpoints: pending upload, processing, current result and history.

The service hosts a single session. Its state lives in one ``SessionState``
container; these routes are the only callers of its mutation methods.
"""

import logging
from typing import Any

from fastapi import APIRouter, File, UploadFile
from pydantic import BaseModel

from callscore.controllers.dependencies import GenerativeClientDep, SessionStateDep
from callscore.domain.errors import BoundaryInputError
from callscore.pipelines.scoring import ScoringPipeline, read_audio_bytes, resolve_content_type
from callscore.services.session_state import ActiveView
from callscore.telemetry import set_history_size

router = APIRouter(prefix="/session", tags=["session"])

logger = logging.getLogger(__name__)
transcript_logger = logging.getLogger("callscore.logs.transcript")

_AUDIO_FILE_UPLOAD = File(None)


class ViewUpdate(BaseModel):
    view: ActiveView


@router.get("")
async def get_session(state: SessionStateDep) -> dict[str, Any]:
    """Return the pending upload, current result and active view."""

    return state.snapshot()


@router.post("/file")
async def select_file(
    state: SessionStateDep,
    audio_file: UploadFile | None = _AUDIO_FILE_UPLOAD,
) -> dict[str, Any]:
    """Store a recording as the pending upload without processing it."""
    content_type = resolve_content_type(audio_file) if audio_file is not None else None
    audio_bytes = await read_audio_bytes(audio_file)
    state.select_file(audio_file.filename or "Unknown", content_type, audio_bytes)
    return state.snapshot()


@router.delete("/file")
async def reset_selection(state: SessionStateDep) -> dict[str, Any]:
    """Abandon the pending upload; history and the last result stay."""

    state.reset_selection()
    return state.snapshot()


@router.post("/process")
async def process_pending(
    state: SessionStateDep,
    client: GenerativeClientDep,
) -> dict[str, Any]:
    """Run the pipeline on the pending upload and record the result."""

    pending = state.pending_upload
    if pending is None:
        raise BoundaryInputError("No file selected for processing.")

    async with state.run_slot():
        outcome = await ScoringPipeline(client).run(pending.audio_bytes, pending.content_type)
        if outcome.transcript:
            transcript_logger.info("file=%s | text=%s", pending.file_name, outcome.transcript)
        if not outcome.succeeded:
            # The pending upload is kept so the user can retry.
            raise outcome.error
        record = await state.record_result(outcome.result, pending)

    set_history_size(len(state.history))
    logger.info("Recorded result file=%s total=%s", pending.file_name, record.total_score)
    return {
        "record": record.model_dump(by_alias=True),
        "breakdown": record.breakdown(),
        "activeView": state.active_view.value,
    }


@router.put("/view")
async def set_view(update: ViewUpdate, state: SessionStateDep) -> dict[str, Any]:
    state.set_active_view(update.view)
    return state.snapshot()


@router.get("/history")
async def get_history(state: SessionStateDep) -> dict[str, Any]:
    """Return the retained runs, oldest first."""

    entries = state.history.entries()
    return {
        "capacity": state.history.capacity,
        "entries": [entry.to_wire() for entry in entries],
    }


__all__ = ["router"]
