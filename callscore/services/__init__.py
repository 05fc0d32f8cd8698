"""Service layer helpers for external integrations and session storage."""

from .history_store import (
    HISTORY_CAPACITY,
    HistoryEntry,
    HistoryLog,
    JsonFileStore,
    ScoredRecord,
)
from .llm_client import BedrockLlmClient, LlmInvocationError
from .response_contract import AnalysisResult, validate_analysis
from .session_state import ActiveView, PendingUpload, PipelineBusyError, SessionState

__all__ = [
    "ActiveView",
    "AnalysisResult",
    "BedrockLlmClient",
    "HISTORY_CAPACITY",
    "HistoryEntry",
    "HistoryLog",
    "JsonFileStore",
    "LlmInvocationError",
    "PendingUpload",
    "PipelineBusyError",
    "ScoredRecord",
    "SessionState",
    "validate_analysis",
]
