"""Orchestration of one scoring pipeline run.

Execution order:

1. ``ingestion`` – reject absent payloads and unsupported MIME types.
2. ``transcription`` – audio + instruction -> speaker-labelled transcript.
3. ``analysis`` – transcript + catalog prompt -> raw JSON text.
4. ``validation`` – raw text -> ``AnalysisResult`` (``response_contract``).

Stages run strictly in sequence. The first failure ends the run in ``FAILED``
with a classified error; nothing is retried. Boundary errors are raised before
the run starts and never reach the generative client.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Iterable, List, Sequence, TypeVar

from callscore.domain.catalog import ScoringParameter, get_catalog
from callscore.domain.errors import CapabilityError, ScoringPipelineError
from callscore.services.response_contract import AnalysisResult, validate_analysis
from callscore.telemetry import observe_pipeline_run, observe_stage

from .analysis import analyze
from .ingestion import check_boundary
from .transcription import transcribe
from .types import GenerativeClient, PipelineOutcome, PipelineState, StageTiming

logger = logging.getLogger("callscore.pipeline")

T = TypeVar("T")


@dataclass(frozen=True)
class PipelineStage:
    """Human-readable description of one stage in the scoring pipeline."""

    order: int
    name: str
    module: str
    summary: str


class ScoringPipeline:
    """Drive Transcription -> Analysis -> Validation for one recording."""

    _STAGES: List[PipelineStage] = [
        PipelineStage(
            1,
            "Ingestion",
            "callscore.pipelines.scoring.ingestion",
            "Check the payload is present and its MIME type is on the allow-list.",
        ),
        PipelineStage(
            2,
            "Transcription",
            "callscore.pipelines.scoring.transcription",
            "Send audio bytes to the generative model for an Agent/Customer transcript.",
        ),
        PipelineStage(
            3,
            "Analysis",
            "callscore.pipelines.scoring.analysis",
            "Score the transcript against the catalog with a structured JSON request.",
        ),
        PipelineStage(
            4,
            "Validation",
            "callscore.services.response_contract",
            "Parse the raw JSON and enforce the scoring contract.",
        ),
    ]

    def __init__(
        self,
        client: GenerativeClient,
        catalog: Sequence[ScoringParameter] | None = None,
    ) -> None:
        self._client = client
        self._catalog = tuple(catalog) if catalog is not None else get_catalog()
        self._state = PipelineState.IDLE
        self._timings: list[StageTiming] = []

    @classmethod
    def describe(cls) -> Iterable[PipelineStage]:
        """Expose the ordered list of stages for debugging and documentation."""

        return tuple(cls._STAGES)

    @property
    def state(self) -> PipelineState:
        return self._state

    def _enter(self, state: PipelineState) -> None:
        logger.info("Pipeline state %s -> %s", self._state.value, state.value)
        self._state = state

    def _record_timing(self, started: float) -> None:
        duration = time.perf_counter() - started
        self._timings.append(StageTiming(self._state, duration))
        observe_stage(self._state.value, duration)

    async def _capability_stage(self, state: PipelineState, call: Awaitable[T]) -> T:
        self._enter(state)
        started = time.perf_counter()
        try:
            return await call
        except ScoringPipelineError:
            raise
        except Exception as exc:
            raise CapabilityError(
                f"Generative capability failed during {state.value}: {exc}",
                stage=state.value,
            ) from exc
        finally:
            self._record_timing(started)

    def _validate(self, raw_text: str) -> AnalysisResult:
        self._enter(PipelineState.VALIDATING)
        started = time.perf_counter()
        try:
            return validate_analysis(raw_text, self._catalog)
        finally:
            self._record_timing(started)

    async def run(self, audio_bytes: bytes | None, mime_type: str | None) -> PipelineOutcome:
        """Execute one run; raises ``BoundaryInputError`` for rejected input."""

        if self._state is not PipelineState.IDLE:
            raise RuntimeError("A ScoringPipeline instance runs exactly once.")
        mime_type = check_boundary(audio_bytes, mime_type)

        transcript: str | None = None
        try:
            transcript = await self._capability_stage(
                PipelineState.TRANSCRIBING,
                transcribe(self._client, audio_bytes, mime_type),
            )
            raw_text = await self._capability_stage(
                PipelineState.ANALYZING,
                analyze(self._client, transcript, self._catalog),
            )
            result = self._validate(raw_text)
        except ScoringPipelineError as exc:
            failed_in = self._state.value
            self._enter(PipelineState.FAILED)
            logger.warning("Pipeline failed stage=%s category=%s: %s", failed_in, exc.category, exc)
            observe_pipeline_run(exc.category)
            return PipelineOutcome(
                state=PipelineState.FAILED,
                error=exc,
                transcript=transcript,
                timings=tuple(self._timings),
            )

        self._enter(PipelineState.SUCCEEDED)
        observe_pipeline_run(PipelineState.SUCCEEDED.value)
        return PipelineOutcome(
            state=PipelineState.SUCCEEDED,
            result=result,
            transcript=transcript,
            timings=tuple(self._timings),
        )


__all__ = ["PipelineStage", "ScoringPipeline"]
