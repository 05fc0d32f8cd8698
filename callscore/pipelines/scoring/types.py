"""Typed containers shared across the scoring pipeline.

These live in their own module so the stages (`transcription`, `analysis`,
`flow`) can import them without creating circular dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Protocol

from callscore.domain.errors import ScoringPipelineError
from callscore.services.response_contract import AnalysisResult


class GenerativeClient(Protocol):
    """The external generative capability consumed by the pipeline."""

    async def generate_from_audio(
        self,
        audio_bytes: bytes,
        mime_type: str,
        instruction: str,
    ) -> str: ...

    async def generate_from_text(
        self,
        prompt: str,
        *,
        structured_output: bool = False,
        temperature: float | None = None,
        json_schema: Mapping[str, Any] | None = None,
    ) -> str: ...


class PipelineState(str, Enum):
    IDLE = "idle"
    TRANSCRIBING = "transcribing"
    ANALYZING = "analyzing"
    VALIDATING = "validating"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class StageTiming:
    """Wall-clock duration of one completed or failed stage."""

    state: PipelineState
    duration_seconds: float


@dataclass(frozen=True)
class PipelineOutcome:
    """Terminal result of one pipeline run."""

    state: PipelineState
    result: AnalysisResult | None = None
    error: ScoringPipelineError | None = None
    transcript: str | None = None
    timings: tuple[StageTiming, ...] = field(default_factory=tuple)

    @property
    def succeeded(self) -> bool:
        return self.state is PipelineState.SUCCEEDED
