"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from callscore.config.settings import settings
from callscore.pipelines.scoring import GenerativeClient
from callscore.services.history_store import HistoryLog, JsonFileStore
from callscore.services.llm_client import BedrockLlmClient
from callscore.services.session_state import SessionState
from callscore.telemetry import set_history_size


@lru_cache(maxsize=1)
def get_generative_client() -> GenerativeClient:
    """Return the process-wide Bedrock client."""

    return BedrockLlmClient()


@lru_cache(maxsize=1)
def get_session_state() -> SessionState:
    """Return the session state, loading history from the durable store once."""

    history = HistoryLog(
        JsonFileStore(settings.history.store_path),
        key=settings.history.storage_key,
    )
    set_history_size(len(history))
    return SessionState(history)


GenerativeClientDep = Annotated[GenerativeClient, Depends(get_generative_client)]
SessionStateDep = Annotated[SessionState, Depends(get_session_state)]


__all__ = [
    "get_generative_client",
    "get_session_state",
    "GenerativeClientDep",
    "SessionStateDep",
]
