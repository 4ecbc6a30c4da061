"""Completed/stopped session records kept for statistics and replay."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from posetimer.session.coerce import clamp_int, to_int
from posetimer.session.model import MemoryType
from posetimer.storage.kv import KeyValueStore


HISTORY_KEY = "session_history"
MIN_POSES = 1
MAX_TIME_PER_SESSION_SEC = 86400
MAX_MODE_LENGTH = 32
MAX_IMAGES_PER_SESSION = 1000
MAX_HISTORY_ENTRIES = 500

_IMAGE_STRING_FIELDS: tuple[tuple[str, int], ...] = (
    ("filePath", 4096),
    ("path", 4096),
    ("file", 4096),
    ("thumbnailURL", 4096),
    ("thumbnail", 4096),
    ("url", 4096),
    ("name", 256),
    ("ext", 32),
)


@dataclass(frozen=True)
class SessionRecord:
    timestamp: str
    poses: int
    time: int
    mode: str
    memory_type: MemoryType | None = None
    custom_queue: list[dict[str, Any]] | None = None
    images: list[Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        return {
            "timestamp": data["timestamp"],
            "poses": data["poses"],
            "time": data["time"],
            "mode": data["mode"],
            "memoryType": data["memory_type"],
            "customQueue": data["custom_queue"],
            "images": data["images"] or [],
        }


def now_utc_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


def _is_iso_timestamp(value: object) -> bool:
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return False
    return True


def sanitize_session_image(image: object) -> str | dict[str, Any] | None:
    if isinstance(image, str):
        value = image.strip()
        return value[:4096] or None
    if not isinstance(image, Mapping):
        return None

    out: dict[str, Any] = {}
    image_id = image.get("id")
    if isinstance(image_id, (str, int, float)) and not isinstance(image_id, bool):
        out["id"] = image_id
    for key, max_len in _IMAGE_STRING_FIELDS:
        value = image.get(key)
        if isinstance(value, str) and value.strip():
            out[key] = value.strip()[:max_len]
    return out or None


def sanitize_session_entry(
    raw: object, *, now_iso: Callable[[], str] | None = None
) -> SessionRecord | None:
    """Coerce one stored session; ``None`` when it is too small to keep."""
    if not isinstance(raw, Mapping):
        return None
    poses = max(0, to_int(raw.get("poses"), 0))
    time = clamp_int(raw.get("time"), 0, MAX_TIME_PER_SESSION_SEC, 0)
    if poses < MIN_POSES:
        return None

    timestamp_obj = raw.get("timestamp")
    timestamp = (
        timestamp_obj.strip()
        if isinstance(timestamp_obj, str) and _is_iso_timestamp(timestamp_obj)
        else (now_iso or now_utc_iso)()
    )
    mode_obj = raw.get("mode")
    mode = mode_obj[:MAX_MODE_LENGTH] if isinstance(mode_obj, str) else "classique"
    memory_obj = raw.get("memoryType")
    memory_type: MemoryType | None = (
        memory_obj if memory_obj in ("flash", "progressive") else None
    )
    queue_obj = raw.get("customQueue")
    custom_queue: list[dict[str, Any]] | None = None
    if isinstance(queue_obj, list):
        custom_queue = [dict(step) for step in queue_obj if isinstance(step, Mapping)]
    images_obj = raw.get("images")
    images: list[Any] = []
    if isinstance(images_obj, list):
        for image in images_obj:
            clean = sanitize_session_image(image)
            if clean is not None:
                images.append(clean)
            if len(images) >= MAX_IMAGES_PER_SESSION:
                break

    return SessionRecord(
        timestamp=timestamp,
        poses=poses,
        time=time,
        mode=mode,
        memory_type=memory_type,
        custom_queue=custom_queue,
        images=images,
    )


class SessionHistory:
    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = HISTORY_KEY,
        max_entries: int = MAX_HISTORY_ENTRIES,
    ) -> None:
        self._store = store
        self._key = key
        self._max_entries = max(1, max_entries)

    async def _load_raw(self) -> list[Any]:
        raw = await self._store.get(self._key)
        return raw if isinstance(raw, list) else []

    async def append(self, record: SessionRecord) -> bool:
        entries = await self._load_raw()
        entries.append(record.to_dict())
        return await self._store.set(self._key, entries[-self._max_entries :])

    async def load_recent(self, limit: int = 20) -> list[SessionRecord]:
        """Newest first; entries that do not survive sanitization are skipped."""
        out: list[SessionRecord] = []
        for raw in reversed(await self._load_raw()):
            record = sanitize_session_entry(raw)
            if record is None:
                continue
            out.append(record)
            if len(out) >= limit:
                break
        return out
