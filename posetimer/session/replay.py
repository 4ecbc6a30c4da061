"""Rebuild a playable session configuration from history or a saved plan."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass

from posetimer.session.coerce import round_half_up, to_number
from posetimer.session.model import (
    DEFAULT_DURATION_SEC,
    MemoryType,
    PauseStep,
    PoseStep,
    SessionMode,
    Step,
    normalize_memory_type,
    normalize_mode,
)


@dataclass(frozen=True)
class ReplayOptions:
    mode: SessionMode
    duration: float | None
    custom_queue: tuple[Step, ...]
    memory_type: MemoryType | None


def _field(source: object, key: str) -> object:
    if isinstance(source, Mapping):
        return source.get(key)
    return None


def _step_id(raw: object) -> float | None:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    return raw if math.isfinite(raw) else None


def sanitize_custom_queue(queue: object) -> list[Step]:
    """Coerce persisted queue entries into steps; anything not ``"pause"`` is a pose."""
    if not isinstance(queue, (list, tuple)):
        return []
    out: list[Step] = []
    for raw in queue:
        if not isinstance(raw, Mapping):
            continue
        duration = max(1, round_half_up(to_number(raw.get("duration"), DEFAULT_DURATION_SEC)))
        step_id = _step_id(raw.get("id"))
        if raw.get("type") == "pause":
            out.append(PauseStep(duration=duration, id=step_id))
        else:
            count = max(1, round_half_up(to_number(raw.get("count"), 1)))
            out.append(PoseStep(count=count, duration=duration, id=step_id))
    return out


def compute_replay_duration(record: object) -> float | None:
    """Average seconds per pose, or ``None`` when the aggregates cannot tell."""
    poses = max(0.0, to_number(_field(record, "poses"), 0))
    time = max(0.0, to_number(_field(record, "time"), 0))
    if poses <= 0 or time <= 0:
        return None
    return time / poses


def build_replay_options_from_session(record: object) -> ReplayOptions:
    mode = normalize_mode(_field(record, "mode"))
    custom_queue = sanitize_custom_queue(_field(record, "customQueue")) if mode == "custom" else []
    return ReplayOptions(
        mode=mode,
        duration=compute_replay_duration(record),
        custom_queue=tuple(custom_queue),
        memory_type=normalize_memory_type(_field(record, "memoryType"), mode),
    )


def normalize_load_session_options(options: object) -> ReplayOptions:
    mode = normalize_mode(_field(options, "mode"))
    duration_raw = to_number(_field(options, "duration"), 0)
    custom_queue = sanitize_custom_queue(_field(options, "customQueue")) if mode == "custom" else []
    return ReplayOptions(
        mode=mode,
        duration=round_half_up(duration_raw) if duration_raw > 0 else None,
        custom_queue=tuple(custom_queue),
        memory_type=normalize_memory_type(_field(options, "memoryType"), mode),
    )


def extract_image_ids_from_session(record: object) -> list[str | int | float]:
    images = _field(record, "images")
    if not isinstance(images, (list, tuple)):
        return []
    out: list[str | int | float] = []
    seen: set[str] = set()
    for image in images:
        image_id = image.get("id") if isinstance(image, Mapping) else None
        if image_id is None:
            continue
        key = str(image_id)
        if not key or key in seen:
            continue
        seen.add(key)
        out.append(image_id)
    return out
