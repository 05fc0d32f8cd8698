"""Transcription stage (Stage 02) of the scoring pipeline."""

from __future__ import annotations

import logging

from callscore.config.settings import settings
from callscore.domain.errors import EmptyTranscription

from .types import GenerativeClient

logger = logging.getLogger("callscore.pipeline")


def build_transcription_instruction(
    language: str | None = None,
    agent_label: str | None = None,
    customer_label: str | None = None,
) -> str:
    """Fixed instruction: spoken language, two speaker roles, one line per utterance."""

    language = language or settings.scoring.transcription_language
    agent = agent_label or settings.scoring.agent_label
    customer = customer_label or settings.scoring.customer_label
    return (
        f"Transcribe this audio accurately in {language}, the language spoken in the call.\n"
        f"Identify and label each speaker as '{agent}' and '{customer}'; use no other labels.\n"
        "Write one utterance per line, in the form '<Role>: <utterance>'.\n"
        "Example:\n"
        f"{agent}: Hello, how can I help you?\n"
        f"{customer}: I want to know about my bill.\n"
        "Return only the transcription."
    )


async def transcribe(
    client: GenerativeClient,
    audio_bytes: bytes,
    mime_type: str,
) -> str:
    """Return the speaker-labelled transcript exactly as the model produced it."""

    transcript = await client.generate_from_audio(
        audio_bytes,
        mime_type,
        build_transcription_instruction(),
    )
    if not transcript or not transcript.strip():
        logger.warning("Empty transcription mime=%s bytes=%s", mime_type, len(audio_bytes))
        raise EmptyTranscription()

    logger.info("Transcription complete. Length: %s", len(transcript))
    return transcript


__all__ = ["build_transcription_instruction", "transcribe"]
