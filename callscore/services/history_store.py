"""Bounded, persisted history of scored calls.

The log keeps the most recent ``HISTORY_CAPACITY`` runs in insertion order and
writes the whole serialized log under one key of a JSON file store after every
append. Stored entries carry a schema version; entries that cannot be read back
are dropped on load instead of failing startup.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from collections import deque
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Protocol, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from callscore.domain.catalog import ScoringParameter, get_catalog
from callscore.services.response_contract import AnalysisResult

logger = logging.getLogger(__name__)

HISTORY_CAPACITY = 10
SCHEMA_VERSION = 1


class ScoredRecord(BaseModel):
    """An ``AnalysisResult`` plus its derived total score."""

    scores: Dict[str, int]
    overall_feedback: str = Field(alias="overallFeedback")
    observation: str
    total_score: int = Field(alias="totalScore")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @classmethod
    def from_analysis(cls, result: AnalysisResult) -> "ScoredRecord":
        # Validated input: weights are not re-checked here.
        return cls(
            scores=dict(result.scores),
            overall_feedback=result.overall_feedback,
            observation=result.observation,
            total_score=sum(result.scores.values()),
        )

    def breakdown(self, catalog: Sequence[ScoringParameter] | None = None) -> list[dict[str, Any]]:
        """Per-parameter score cards in catalog order."""

        cards = []
        for parameter in catalog or get_catalog():
            score = self.scores.get(parameter.key, 0)
            cards.append(
                {
                    "key": parameter.key,
                    "name": parameter.name,
                    "score": score,
                    "maxScore": parameter.weight,
                    "percentage": round(score / parameter.weight * 100, 1),
                    "description": parameter.description,
                }
            )
        return cards


def score_band(total_score: int) -> str:
    """Traffic-light band used when listing history."""

    if total_score >= 80:
        return "green"
    if total_score >= 60:
        return "yellow"
    return "red"


class HistoryEntry(BaseModel):
    """One successful pipeline run as remembered by the session."""

    record: ScoredRecord
    file_name: str = Field(alias="fileName")
    upload_timestamp: datetime = Field(alias="uploadTimestamp")
    schema_version: int = Field(default=SCHEMA_VERSION, alias="schemaVersion")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @classmethod
    def create(cls, record: ScoredRecord, file_name: str) -> "HistoryEntry":
        return cls(
            record=record,
            file_name=file_name,
            upload_timestamp=datetime.now(timezone.utc),
        )

    @property
    def band(self) -> str:
        return score_band(self.record.total_score)

    def to_wire(self) -> dict[str, Any]:
        payload = self.model_dump(mode="json", by_alias=True)
        payload["band"] = self.band
        return payload


class KeyValueStore(Protocol):
    """Minimal durable key-value contract used by the history log."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...


class JsonFileStore:
    """Key-value store backed by a single JSON document on disk."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Unreadable history store %s; starting empty: %s", self._path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("History store %s is not a JSON object; starting empty", self._path)
            return {}
        return data

    def get(self, key: str) -> Any | None:
        return self._read_all().get(key)

    def set(self, key: str, value: Any) -> None:
        """Write ``key`` atomically: readers see the old or the new document."""

        data = self._read_all()
        data[key] = value
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, ensure_ascii=False, separators=(",", ":"))
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, self._path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


class HistoryLog:
    """Insertion-ordered FIFO log capped at ``capacity`` entries."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = "history",
        capacity: int = HISTORY_CAPACITY,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self._store = store
        self._key = key
        self._capacity = capacity
        self._lock = threading.Lock()
        self._entries: deque[HistoryEntry] = deque(self._load(), maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._entries)

    def entries(self) -> tuple[HistoryEntry, ...]:
        """Return a snapshot of the log, oldest first."""

        with self._lock:
            return tuple(self._entries)

    def append(self, entry: HistoryEntry) -> tuple[HistoryEntry, ...]:
        """Append, evict the oldest beyond capacity and persist the result."""

        with self._lock:
            candidate = deque(self._entries, maxlen=self._capacity)
            candidate.append(entry)
            self._store.set(self._key, self._serialize(candidate))
            self._entries = candidate
            logger.info(
                "History appended file=%s total=%s size=%s",
                entry.file_name,
                entry.record.total_score,
                len(candidate),
            )
            return tuple(candidate)

    @staticmethod
    def _serialize(entries: Iterable[HistoryEntry]) -> list[dict[str, Any]]:
        return [entry.model_dump(mode="json", by_alias=True) for entry in entries]

    def _load(self) -> list[HistoryEntry]:
        raw = self._store.get(self._key)
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("Discarding stored history: expected a list, got %s", type(raw).__name__)
            return []

        loaded: list[HistoryEntry] = []
        for index, item in enumerate(raw):
            if not isinstance(item, dict) or item.get("schemaVersion") != SCHEMA_VERSION:
                logger.warning("Discarding history entry %s with unsupported schema", index)
                continue
            try:
                loaded.append(HistoryEntry.model_validate(item))
            except ValidationError as exc:
                logger.warning("Discarding unreadable history entry %s: %s", index, exc)
        return loaded[-self._capacity :]


__all__ = [
    "HISTORY_CAPACITY",
    "SCHEMA_VERSION",
    "ScoredRecord",
    "HistoryEntry",
    "HistoryLog",
    "JsonFileStore",
    "KeyValueStore",
    "score_band",
]
