"""Stateless call analysis endpoint.

For a stage-by-stage map see `callscore.pipelines.scoring.flow.ScoringPipeline`.
POST `/api/analyze-call` performs:

1. Boundary checks on the uploaded recording (presence, MIME allow-list).
2. Transcription with Agent/Customer speaker labels.
3. Catalog-driven structured scoring request.
4. Validation of the model output against the scoring contract.

Failures are raised as classified ``ScoringPipelineError`` instances and
rendered by the application-level exception handler.
"""

import logging
from typing import Any

from fastapi import APIRouter, File, UploadFile

from callscore.controllers.dependencies import GenerativeClientDep
from callscore.domain.catalog import get_catalog
from callscore.pipelines.scoring import (
    ScoringPipeline,
    read_audio_bytes,
    resolve_content_type,
)

router = APIRouter(tags=["analysis"])

logger = logging.getLogger(__name__)
transcript_logger = logging.getLogger("callscore.logs.transcript")

PIPELINE_STAGES = tuple(ScoringPipeline.describe())
"""Ordered pipeline metadata used for quick reference and debugging."""

_AUDIO_FILE_UPLOAD = File(None)


@router.post("/api/analyze-call")
async def analyze_call(
    client: GenerativeClientDep,
    audio_file: UploadFile | None = _AUDIO_FILE_UPLOAD,
) -> dict[str, Any]:
    """Score an uploaded MP3 or WAV call recording."""
    content_type = resolve_content_type(audio_file) if audio_file is not None else None
    audio_bytes = await read_audio_bytes(audio_file)
    file_name = audio_file.filename or "Unknown"
    logger.info("Analyzing call file=%s type=%s bytes=%s", file_name, content_type, len(audio_bytes))

    outcome = await ScoringPipeline(client).run(audio_bytes, content_type)
    if outcome.transcript:
        transcript_logger.info("file=%s | text=%s", file_name, outcome.transcript)
    if not outcome.succeeded:
        raise outcome.error

    logger.info("Analysis complete file=%s", file_name)
    return outcome.result.to_wire()


@router.get("/scoring/catalog")
async def scoring_catalog() -> dict[str, Any]:
    """List the weighted scoring parameters."""

    return {
        "parameters": [
            {
                "key": parameter.key,
                "name": parameter.name,
                "weight": parameter.weight,
                "description": parameter.description,
                "mode": parameter.mode.value,
            }
            for parameter in get_catalog()
        ]
    }


__all__ = ["router", "PIPELINE_STAGES"]
