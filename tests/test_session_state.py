"""Result aggregation and session lifecycle."""

from __future__ import annotations

import asyncio

import pytest

from callscore.services.history_store import HistoryLog, JsonFileStore
from callscore.services.response_contract import validate_analysis
from callscore.services.session_state import ActiveView, PendingUpload, PipelineBusyError, SessionState

from conftest import analysis_json, max_scores


def _upload(name: str = "call.mp3") -> PendingUpload:
    return PendingUpload(file_name=name, content_type="audio/mpeg", audio_bytes=b"ID3")


def test_record_result_updates_state_and_history(session_state: SessionState) -> None:
    pending = session_state.select_file("call.mp3", "audio/mpeg", b"abc")
    scores = max_scores()
    scores["callEtiquette"] = 7
    result = validate_analysis(analysis_json(scores))

    record = asyncio.run(session_state.record_result(result, pending))

    assert record.total_score == 92
    assert session_state.result == record
    assert session_state.pending_upload is None
    assert session_state.active_view is ActiveView.RESULTS
    [entry] = session_state.history.entries()
    assert entry.file_name == "call.mp3"
    assert entry.record == record


def test_record_result_is_persisted(session_state: SessionState, history_path) -> None:
    asyncio.run(session_state.record_result(validate_analysis(analysis_json()), _upload()))

    reloaded = HistoryLog(JsonFileStore(history_path))
    assert reloaded.entries() == session_state.history.entries()


def test_file_selected_during_run_stays_pending(session_state: SessionState) -> None:
    first = session_state.select_file("first.mp3", "audio/mpeg", b"one")

    async def scenario():
        async with session_state.run_slot():
            session_state.select_file("second.mp3", "audio/mpeg", b"two")
            return await session_state.record_result(validate_analysis(analysis_json()), first)

    asyncio.run(scenario())

    assert session_state.pending_upload is not None
    assert session_state.pending_upload.file_name == "second.mp3"
    [entry] = session_state.history.entries()
    assert entry.file_name == "first.mp3"


def test_reset_selection_keeps_result_and_history(session_state: SessionState) -> None:
    record = asyncio.run(
        session_state.record_result(validate_analysis(analysis_json()), _upload("first.mp3"))
    )
    session_state.select_file("second.wav", "audio/wav", b"xyz")

    session_state.reset_selection()

    assert session_state.pending_upload is None
    assert session_state.result == record
    assert len(session_state.history) == 1


def test_failed_persistence_leaves_state_untouched(session_state: SessionState, monkeypatch) -> None:
    pending = session_state.select_file("call.mp3", "audio/mpeg", b"abc")

    def broken_set(key, value):
        raise OSError("disk full")

    monkeypatch.setattr(session_state.history._store, "set", broken_set)

    with pytest.raises(OSError):
        asyncio.run(session_state.record_result(validate_analysis(analysis_json()), pending))

    assert len(session_state.history) == 0
    assert session_state.result is None
    assert session_state.pending_upload is pending
    assert session_state.active_view is ActiveView.UPLOAD


def test_snapshot_describes_pending_upload(session_state: SessionState) -> None:
    session_state.select_file("", "audio/wav", b"1234")

    snapshot = session_state.snapshot()

    assert snapshot["selectedFile"] == {"fileName": "Unknown", "contentType": "audio/wav", "size": 4}
    assert snapshot["activeView"] == "upload"
    assert snapshot["result"] is None
    assert snapshot["processing"] is False


def test_run_slot_rejects_second_submission(session_state: SessionState) -> None:
    async def scenario() -> None:
        async with session_state.run_slot():
            assert session_state.is_running
            with pytest.raises(PipelineBusyError):
                async with session_state.run_slot():
                    pass
        assert not session_state.is_running

    asyncio.run(scenario())


def test_history_write_runs_in_threadpool(session_state: SessionState, monkeypatch) -> None:
    offloaded = []

    async def recording_threadpool(func, *args):
        offloaded.append(func)
        return func(*args)

    monkeypatch.setattr("callscore.services.session_state.run_in_threadpool", recording_threadpool)

    asyncio.run(session_state.record_result(validate_analysis(analysis_json()), _upload()))

    assert offloaded == [session_state.history.append]
    assert len(session_state.history) == 1
