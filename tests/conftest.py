"""Shared fakes and payload builders for the scoring tests."""

from __future__ import annotations

import json
from pathlib import Path
import sys
from typing import Any

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from callscore.domain.catalog import get_catalog  # noqa: E402
from callscore.services.history_store import HistoryLog, JsonFileStore  # noqa: E402
from callscore.services.session_state import SessionState  # noqa: E402

SAMPLE_TRANSCRIPT = (
    "Agent: Good morning, this call is recorded for quality purposes.\n"
    "Customer: Okay, what is this about?"
)


def max_scores() -> dict[str, int]:
    return {p.key: p.weight for p in get_catalog()}


def analysis_payload(scores: dict[str, Any] | None = None, **fields: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "scores": max_scores() if scores is None else scores,
        "overallFeedback": "ok",
        "observation": "ok",
    }
    payload.update(fields)
    return payload


def analysis_json(scores: dict[str, Any] | None = None, **fields: Any) -> str:
    return json.dumps(analysis_payload(scores, **fields))


class FakeGenerativeClient:
    """Records calls and returns canned transcription/analysis text."""

    def __init__(
        self,
        *,
        transcript: str = SAMPLE_TRANSCRIPT,
        analysis: str | None = None,
        audio_error: Exception | None = None,
        text_error: Exception | None = None,
    ) -> None:
        self.transcript = transcript
        self.analysis = analysis if analysis is not None else analysis_json()
        self.audio_error = audio_error
        self.text_error = text_error
        self.audio_calls: list[dict[str, Any]] = []
        self.text_calls: list[dict[str, Any]] = []

    async def generate_from_audio(self, audio_bytes, mime_type, instruction):
        self.audio_calls.append(
            {"audio_bytes": audio_bytes, "mime_type": mime_type, "instruction": instruction}
        )
        if self.audio_error is not None:
            raise self.audio_error
        return self.transcript

    async def generate_from_text(
        self,
        prompt,
        *,
        structured_output=False,
        temperature=None,
        json_schema=None,
    ):
        self.text_calls.append(
            {
                "prompt": prompt,
                "structured_output": structured_output,
                "temperature": temperature,
                "json_schema": json_schema,
            }
        )
        if self.text_error is not None:
            raise self.text_error
        return self.analysis


@pytest.fixture
def fake_client() -> FakeGenerativeClient:
    return FakeGenerativeClient()


@pytest.fixture
def history_path(tmp_path: Path) -> Path:
    return tmp_path / "store" / "history.json"


@pytest.fixture
def session_state(history_path: Path) -> SessionState:
    return SessionState(HistoryLog(JsonFileStore(history_path)))
