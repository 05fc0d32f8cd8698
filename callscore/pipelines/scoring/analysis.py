"""Analysis LLM stage for the scoring pipeline (Stage 03)."""

from __future__ import annotations

import logging
from typing import Sequence

from callscore.config.settings import settings
from callscore.domain.catalog import ScoringParameter

from .prompts import analysis_json_schema, build_analysis_prompt
from .types import GenerativeClient

logger = logging.getLogger("callscore.pipeline")


def _truncate(value: str, max_length: int = 500) -> str:
    if len(value) <= max_length:
        return value
    return value[: max_length - 3] + "..."


async def analyze(
    client: GenerativeClient,
    transcript: str,
    catalog: Sequence[ScoringParameter],
) -> str:
    """Request the structured score and return the model's raw text unchanged."""

    prompt = build_analysis_prompt(transcript, catalog)
    logger.info("Analysis prompt generated\nUSER> %s", _truncate(prompt))

    raw_response = await client.generate_from_text(
        prompt,
        structured_output=True,
        temperature=settings.bedrock.analysis_temperature,
        json_schema=analysis_json_schema(catalog),
    )
    logger.info("Raw analysis response: %s", _truncate(raw_response or ""))
    return raw_response


__all__ = ["analyze"]
