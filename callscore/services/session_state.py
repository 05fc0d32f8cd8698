"""Session state container and result aggregator.

A single ``SessionState`` owns everything that changes while the user works:
the pending upload, the currently displayed result, the active view, and the
history log. It is mutated only through the methods below.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator

from fastapi import status
from fastapi.concurrency import run_in_threadpool

from callscore.domain.errors import ScoringPipelineError
from callscore.services.history_store import HistoryEntry, HistoryLog, ScoredRecord
from callscore.services.response_contract import AnalysisResult

logger = logging.getLogger(__name__)


class ActiveView(str, Enum):
    UPLOAD = "upload"
    RESULTS = "results"
    HISTORY = "history"


@dataclass(frozen=True)
class PendingUpload:
    """A selected but not yet processed recording."""

    file_name: str
    content_type: str | None
    audio_bytes: bytes

    @property
    def size(self) -> int:
        return len(self.audio_bytes)


class PipelineBusyError(ScoringPipelineError):
    """Raised when a run is requested while another one is in flight."""

    category = "busy"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self) -> None:
        super().__init__("A recording is already being processed.")


class SessionState:
    """Process-local state for the single session this service hosts."""

    def __init__(self, history: HistoryLog) -> None:
        self._history = history
        self._pending: PendingUpload | None = None
        self._result: ScoredRecord | None = None
        self._active_view = ActiveView.UPLOAD
        self._run_lock = asyncio.Lock()

    @property
    def history(self) -> HistoryLog:
        return self._history

    @property
    def pending_upload(self) -> PendingUpload | None:
        return self._pending

    @property
    def result(self) -> ScoredRecord | None:
        return self._result

    @property
    def active_view(self) -> ActiveView:
        return self._active_view

    @property
    def is_running(self) -> bool:
        return self._run_lock.locked()

    def select_file(self, file_name: str, content_type: str | None, audio_bytes: bytes) -> PendingUpload:
        """Replace the pending upload with a newly selected file."""

        self._pending = PendingUpload(
            file_name=file_name or "Unknown",
            content_type=content_type,
            audio_bytes=audio_bytes,
        )
        logger.info("File selected name=%s size=%s", self._pending.file_name, self._pending.size)
        return self._pending

    def set_active_view(self, view: ActiveView) -> None:
        self._active_view = view

    async def record_result(self, result: AnalysisResult, upload: PendingUpload) -> ScoredRecord:
        """Derive the scored record, append it to history and consume ``upload``.

        The history write runs in the threadpool. A file selected while
        ``upload`` was being processed stays pending.
        """

        record = ScoredRecord.from_analysis(result)
        entry = HistoryEntry.create(record, upload.file_name)
        await run_in_threadpool(self._history.append, entry)
        self._result = record
        if self._pending is upload:
            self._pending = None
        self._active_view = ActiveView.RESULTS
        return record

    def reset_selection(self) -> None:
        """Forget the pending upload; history and the last result are kept."""

        self._pending = None

    @asynccontextmanager
    async def run_slot(self) -> AsyncIterator[None]:
        """Single-slot admission gate for pipeline runs."""

        if self._run_lock.locked():
            raise PipelineBusyError()
        async with self._run_lock:
            yield

    def snapshot(self) -> dict[str, Any]:
        pending = self._pending
        return {
            "selectedFile": (
                {
                    "fileName": pending.file_name,
                    "contentType": pending.content_type,
                    "size": pending.size,
                }
                if pending
                else None
            ),
            "activeView": self._active_view.value,
            "result": self._result.model_dump(by_alias=True) if self._result else None,
            "historySize": len(self._history),
            "processing": self.is_running,
        }


__all__ = ["ActiveView", "PendingUpload", "PipelineBusyError", "SessionState"]
