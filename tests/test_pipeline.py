"""Orchestrator scenarios driven with a fake generative client."""

from __future__ import annotations

import asyncio

import pytest

from callscore.domain.catalog import get_catalog
from callscore.domain.errors import (
    BoundaryInputError,
    CapabilityError,
    EmptyTranscription,
    MalformedAnalysis,
)
from callscore.pipelines.scoring import PipelineState, ScoringPipeline, guess_content_type
from callscore.services.llm_client import LlmInvocationError

from conftest import SAMPLE_TRANSCRIPT, FakeGenerativeClient, analysis_json, max_scores


def _run(client, audio_bytes=b"ID3-audio", mime_type="audio/mpeg"):
    pipeline = ScoringPipeline(client)
    outcome = asyncio.run(pipeline.run(audio_bytes, mime_type))
    return pipeline, outcome


def test_successful_run_returns_validated_result(fake_client: FakeGenerativeClient) -> None:
    pipeline, outcome = _run(fake_client)

    assert outcome.succeeded
    assert pipeline.state is PipelineState.SUCCEEDED
    assert outcome.result.scores == max_scores()
    assert outcome.transcript == SAMPLE_TRANSCRIPT
    assert [t.state for t in outcome.timings] == [
        PipelineState.TRANSCRIBING,
        PipelineState.ANALYZING,
        PipelineState.VALIDATING,
    ]


def test_stages_receive_audio_then_transcript(fake_client: FakeGenerativeClient) -> None:
    _run(fake_client, b"RIFF-wave", "audio/wav")

    [audio_call] = fake_client.audio_calls
    assert audio_call["audio_bytes"] == b"RIFF-wave"
    assert audio_call["mime_type"] == "audio/wav"
    assert "'Agent'" in audio_call["instruction"]
    assert "'Customer'" in audio_call["instruction"]
    assert "<Role>: <utterance>" in audio_call["instruction"]

    [text_call] = fake_client.text_calls
    assert text_call["structured_output"] is True
    assert text_call["temperature"] <= 0.3
    assert SAMPLE_TRANSCRIPT in text_call["prompt"]
    for parameter in get_catalog():
        assert f"- {parameter.key} (Weight: {parameter.weight}, Type: {parameter.mode.value}" in text_call["prompt"]
    assert text_call["json_schema"]["properties"]["scores"]["required"] == [p.key for p in get_catalog()]


@pytest.mark.parametrize("transcript", ["", "   \n\t"])
def test_empty_transcription_stops_before_analysis(transcript: str) -> None:
    client = FakeGenerativeClient(transcript=transcript)

    pipeline, outcome = _run(client)

    assert pipeline.state is PipelineState.FAILED
    assert isinstance(outcome.error, EmptyTranscription)
    assert client.text_calls == []


@pytest.mark.parametrize("mime_type", ["audio/ogg", "audio/x-m4a", None])
def test_unsupported_mime_rejected_before_any_call(mime_type) -> None:
    client = FakeGenerativeClient()

    with pytest.raises(BoundaryInputError):
        _run(client, mime_type=mime_type)

    assert client.audio_calls == []
    assert client.text_calls == []


def test_absent_payload_rejected() -> None:
    client = FakeGenerativeClient()

    with pytest.raises(BoundaryInputError):
        _run(client, audio_bytes=b"")

    assert client.audio_calls == []


def test_capability_failure_is_classified_separately() -> None:
    client = FakeGenerativeClient(audio_error=LlmInvocationError("throttled"))

    _, outcome = _run(client)

    assert isinstance(outcome.error, CapabilityError)
    assert outcome.error.stage == "transcribing"
    assert outcome.error.to_payload()["category"] == "capability"
    assert client.text_calls == []


def test_capability_failure_during_analysis() -> None:
    client = FakeGenerativeClient(text_error=ConnectionError("socket closed"))

    _, outcome = _run(client)

    assert isinstance(outcome.error, CapabilityError)
    assert outcome.error.stage == "analyzing"
    assert outcome.transcript == SAMPLE_TRANSCRIPT


def test_malformed_analysis_keeps_raw_output() -> None:
    scores = max_scores()
    del scores["greeting"]
    raw = analysis_json(scores)
    client = FakeGenerativeClient(analysis=raw)

    pipeline, outcome = _run(client)

    assert pipeline.state is PipelineState.FAILED
    assert isinstance(outcome.error, MalformedAnalysis)
    payload = outcome.error.to_payload()
    assert payload["raw_ai_output"] == raw
    assert payload["category"] == "malformed_analysis"
    assert len(client.text_calls) == 1


def test_pipeline_instance_runs_once(fake_client: FakeGenerativeClient) -> None:
    pipeline, _ = _run(fake_client)

    with pytest.raises(RuntimeError):
        asyncio.run(pipeline.run(b"ID3", "audio/mpeg"))


def test_describe_lists_stages_in_order() -> None:
    names = [stage.name for stage in ScoringPipeline.describe()]
    assert names == ["Ingestion", "Transcription", "Analysis", "Validation"]


@pytest.mark.parametrize(
    ("file_name", "expected"),
    [
        ("call.mp3", "audio/mpeg"),
        ("call.wav", "audio/wav"),
        ("CALL.WAV", "audio/wav"),
        ("notes.txt", "text/plain"),
        ("recording", None),
    ],
)
def test_guess_content_type_normalises_wav(file_name: str, expected) -> None:
    assert guess_content_type(file_name) == expected
