from __future__ import annotations

import asyncio
from pathlib import Path

from posetimer.storage.history import (
    HISTORY_KEY,
    MAX_MODE_LENGTH,
    MAX_TIME_PER_SESSION_SEC,
    SessionHistory,
    SessionRecord,
    sanitize_session_entry,
)
from posetimer.storage.kv import JsonFileStore, MemoryStore


def test_append_and_load_recent_sessions(tmp_path: Path) -> None:
    async def _run() -> None:
        history = SessionHistory(JsonFileStore(tmp_path))
        r1 = SessionRecord(
            timestamp="2026-02-25T10:00:00+00:00",
            poses=20,
            time=600,
            mode="classique",
        )
        r2 = SessionRecord(
            timestamp="2026-02-26T10:00:00+00:00",
            poses=5,
            time=300,
            mode="custom",
            custom_queue=[{"type": "pose", "count": 5, "duration": 60, "id": 1}],
        )
        assert await history.append(r1) is True
        assert await history.append(r2) is True

        loaded = await history.load_recent(limit=5)

        assert len(loaded) == 2
        assert loaded[0].mode == "custom"
        assert loaded[0].custom_queue == [{"type": "pose", "count": 5, "duration": 60, "id": 1}]
        assert loaded[1].poses == 20

    asyncio.run(_run())


def test_history_is_capped() -> None:
    async def _run() -> None:
        store = MemoryStore()
        history = SessionHistory(store, max_entries=3)
        for poses in range(1, 6):
            await history.append(
                SessionRecord(timestamp="2026-03-01T09:00:00+00:00", poses=poses, time=60, mode="relax")
            )
        stored = await store.get(HISTORY_KEY)
        assert [entry["poses"] for entry in stored] == [3, 4, 5]
        assert [record.poses for record in await history.load_recent(limit=2)] == [5, 4]

    asyncio.run(_run())


def test_invalid_entries_are_skipped() -> None:
    async def _run() -> None:
        store = MemoryStore(
            {
                HISTORY_KEY: [
                    {"timestamp": "2026-03-01T09:00:00Z", "poses": 3, "time": 90, "mode": "relax"},
                    {"poses": 0, "time": 10},
                    "junk",
                ]
            }
        )
        loaded = await SessionHistory(store).load_recent()
        assert len(loaded) == 1
        assert loaded[0].poses == 3

    asyncio.run(_run())


def test_sanitize_session_entry() -> None:
    record = sanitize_session_entry(
        {
            "timestamp": "yesterday",
            "poses": "4",
            "time": 90000,
            "mode": "m" * 50,
            "memoryType": "weird",
            "images": [" /tmp/a.png ", {"id": 3, "name": "b.png", "size": 10}, {"size": 1}, 7],
        },
        now_iso=lambda: "2026-01-01T00:00:00+00:00",
    )
    assert record is not None
    assert record.timestamp == "2026-01-01T00:00:00+00:00"
    assert record.poses == 4
    assert record.time == MAX_TIME_PER_SESSION_SEC
    assert record.mode == "m" * MAX_MODE_LENGTH
    assert record.memory_type is None
    assert record.images == ["/tmp/a.png", {"id": 3, "name": "b.png"}]

    assert sanitize_session_entry({"poses": 0, "time": 10}) is None
    assert sanitize_session_entry(None) is None


def test_record_round_trips_through_replay_keys() -> None:
    record = SessionRecord(
        timestamp="2026-03-01T09:00:00+00:00",
        poses=5,
        time=50,
        mode="memory",
        memory_type="progressive",
    )
    data = record.to_dict()
    assert data["memoryType"] == "progressive"
    assert data["customQueue"] is None
    assert data["images"] == []
