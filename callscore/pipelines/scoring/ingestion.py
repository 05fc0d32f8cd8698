"""Request ingestion helpers (Stage 01 of the scoring pipeline)."""

from __future__ import annotations

import mimetypes
from typing import Final

from fastapi import UploadFile

from callscore.config.settings import settings
from callscore.domain.errors import BoundaryInputError

ALLOWED_CONTENT_TYPES: Final[frozenset[str]] = frozenset({
    "audio/mpeg",
    "audio/wav",
})

# mimetypes reports WAV under legacy names depending on the platform table.
_GUESSED_ALIASES: Final[dict[str, str]] = {
    "audio/x-wav": "audio/wav",
    "audio/wave": "audio/wav",
    "audio/vnd.wave": "audio/wav",
}


def guess_content_type(file_name: str) -> str | None:
    """Guess an allow-list MIME type from a file extension."""

    guessed_type, _ = mimetypes.guess_type(file_name)
    return _GUESSED_ALIASES.get(guessed_type, guessed_type) if guessed_type else None


def resolve_content_type(audio_file: UploadFile) -> str | None:
    """Return the declared MIME type, guessing from the filename when absent."""

    content_type = audio_file.content_type
    if not content_type and audio_file.filename:
        content_type = guess_content_type(audio_file.filename)
    return content_type


def check_boundary(audio_bytes: bytes | None, content_type: str | None) -> str:
    """Reject absent payloads and MIME types outside the allow-list."""

    if not audio_bytes:
        raise BoundaryInputError("No audio file provided in the request.")
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise BoundaryInputError("Invalid file type. Only MP3, WAV are allowed.")
    return content_type


async def read_audio_bytes(audio_file: UploadFile | None) -> bytes:
    """Load the upload fully into memory, rejecting empty or oversized payloads."""

    if audio_file is None:
        raise BoundaryInputError("No audio file provided in the request.")

    audio_bytes = await audio_file.read()
    await audio_file.close()

    if not audio_bytes:
        raise BoundaryInputError("Uploaded audio file is empty.")
    if len(audio_bytes) > settings.scoring.max_upload_bytes:
        raise BoundaryInputError(
            f"Uploaded audio file exceeds {settings.scoring.max_upload_bytes} bytes."
        )
    return audio_bytes


__all__ = [
    "ALLOWED_CONTENT_TYPES",
    "check_boundary",
    "guess_content_type",
    "resolve_content_type",
    "read_audio_bytes",
]
