"""Failure taxonomy for a scoring pipeline run.

Every terminal failure carries a ``category`` code and the HTTP status the
boundary answers with, so controllers never have to pattern-match messages.
"""

from __future__ import annotations

from typing import Any, ClassVar

from fastapi import status


class ScoringPipelineError(RuntimeError):
    """Base class for every classified pipeline failure."""

    category: ClassVar[str] = "pipeline"
    status_code: ClassVar[int] = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, Any]:
        """Serialize the failure into the boundary error body."""

        return {"error": self.message, "category": self.category}


class BoundaryInputError(ScoringPipelineError):
    """Raised for absent/empty uploads or unsupported MIME types."""

    category = "boundary_input"
    status_code = status.HTTP_400_BAD_REQUEST


class CapabilityError(ScoringPipelineError):
    """Raised when the generative capability itself fails."""

    category = "capability"
    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        super().__init__(message)
        self.stage = stage

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        if self.stage:
            payload["stage"] = self.stage
        return payload


class EmptyTranscription(ScoringPipelineError):
    """Raised when transcription produced no usable content."""

    category = "empty_transcription"
    status_code = 422

    def __init__(self, message: str = "Could not transcribe audio. Transcription is empty.") -> None:
        super().__init__(message)


class MalformedAnalysis(ScoringPipelineError):
    """Raised when the analysis output violates the scoring contract."""

    category = "malformed_analysis"
    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, raw_text: str, details: str) -> None:
        super().__init__("Failed to parse AI analysis response.")
        self.raw_text = raw_text
        self.details = details

    def __str__(self) -> str:
        return f"{self.message} ({self.details})"

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["raw_ai_output"] = self.raw_text
        payload["details"] = self.details
        return payload


__all__ = [
    "ScoringPipelineError",
    "BoundaryInputError",
    "CapabilityError",
    "EmptyTranscription",
    "MalformedAnalysis",
]
