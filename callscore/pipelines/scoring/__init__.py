"""Call scoring pipeline package.

Modules are organised by the order in which a pipeline run executes:

1. `ingestion` – boundary checks on the uploaded recording.
2. `transcription` – speaker-labelled transcript from the audio.
3. `prompts` / `analysis` – catalog-driven scoring request to the LLM.
4. `flow` – the orchestrator that sequences the stages and classifies failures.

Validation of the model output lives in `callscore.services.response_contract`.
"""

from .analysis import analyze
from .flow import PipelineStage, ScoringPipeline
from .ingestion import (
    ALLOWED_CONTENT_TYPES,
    check_boundary,
    guess_content_type,
    read_audio_bytes,
    resolve_content_type,
)
from .prompts import analysis_json_schema, build_analysis_prompt
from .transcription import build_transcription_instruction, transcribe
from .types import GenerativeClient, PipelineOutcome, PipelineState, StageTiming

__all__ = [
    "ALLOWED_CONTENT_TYPES",
    "GenerativeClient",
    "PipelineOutcome",
    "PipelineStage",
    "PipelineState",
    "ScoringPipeline",
    "StageTiming",
    "analysis_json_schema",
    "analyze",
    "build_analysis_prompt",
    "build_transcription_instruction",
    "check_boundary",
    "guess_content_type",
    "read_audio_bytes",
    "resolve_content_type",
    "transcribe",
]
