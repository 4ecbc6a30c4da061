"""Editing operations on a custom step queue.

Steps are immutable, so every edit returns a new step or a new queue list.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Literal, Sequence

from posetimer.session.coerce import to_int, to_positive_int
from posetimer.session.model import PauseStep, PoseStep, Step
from posetimer.session.plans import Clock, epoch_ms


DurationUnit = Literal["h", "m", "s"]
DEFAULT_GROUP_COUNT = 5


@dataclass(frozen=True)
class Hms:
    hours: int
    minutes: int
    seconds: int


@dataclass(frozen=True)
class QueueDrop:
    queue: list[Step]
    changed: bool
    final_index: int
    duplicate: bool = False


def create_queue_step(
    *,
    is_pause: bool,
    duration: object,
    count: object = DEFAULT_GROUP_COUNT,
    id: float | None = None,
    now: Clock | None = None,
) -> Step | None:
    seconds = to_positive_int(duration, 0)
    if seconds <= 0:
        return None
    step_id = id if id is not None else (now or epoch_ms)()
    if is_pause:
        return PauseStep(duration=seconds, id=step_id)
    return PoseStep(count=max(1, to_int(count, DEFAULT_GROUP_COUNT)), duration=seconds, id=step_id)


def step_duration_to_hms(duration: object) -> Hms:
    safe = max(0, to_int(duration, 0))
    return Hms(hours=safe // 3600, minutes=(safe % 3600) // 60, seconds=safe % 60)


def update_step_duration_from_unit(
    step: Step,
    unit: str,
    value: object,
    min_duration: int = 1,
) -> Step | None:
    """Replace one h/m/s component of the step duration; ``None`` for an unknown unit."""
    safe_unit = unit.lower()
    if safe_unit not in ("h", "m", "s"):
        return None
    parts = step_duration_to_hms(step.duration)
    next_value = max(0, to_int(value, 0))
    hours = next_value if safe_unit == "h" else parts.hours
    minutes = next_value if safe_unit == "m" else parts.minutes
    seconds = next_value if safe_unit == "s" else parts.seconds
    total = hours * 3600 + minutes * 60 + seconds
    return replace(step, duration=max(max(0, min_duration), total))


def update_step_count(step: Step, value: object, min_value: int = 1) -> Step | None:
    """Set the repetition count of a pose step; pauses and values below the floor are rejected."""
    if not isinstance(step, PoseStep):
        return None
    next_value = to_int(value, -1)
    if next_value < max(0, min_value):
        return None
    return replace(step, count=next_value)


def resolve_drop_insert_index(source_index: int, target_index: int, is_below: bool) -> int:
    if source_index < 0 or target_index < 0:
        return -1
    return target_index + 1 if is_below else target_index


def apply_queue_drop_operation(
    queue: Sequence[Step],
    source_index: int,
    target_index: int,
    *,
    is_below: bool,
    is_duplicate: bool = False,
    clone: Callable[[Step], Step] | None = None,
    now: Clock | None = None,
) -> QueueDrop:
    """Move (or duplicate) the step at ``source_index`` next to ``target_index``.

    Without ``clone`` a duplicate gets a fresh id not used elsewhere in the queue.
    """
    items = list(queue)
    if not items or not (0 <= source_index < len(items)) or not (0 <= target_index < len(items)):
        return QueueDrop(queue=items, changed=False, final_index=-1)

    final_index = resolve_drop_insert_index(source_index, target_index, is_below)
    if source_index < final_index:
        final_index -= 1

    if is_duplicate:
        source = items[source_index]
        if clone is not None:
            copy = clone(source)
        else:
            taken = {step.id for step in items}
            new_id = (now or epoch_ms)()
            while new_id in taken:
                new_id += 1
            copy = replace(source, id=new_id)
        items.insert(final_index, copy)
        return QueueDrop(queue=items, changed=True, final_index=final_index, duplicate=True)

    if source_index == final_index:
        return QueueDrop(queue=items, changed=False, final_index=final_index)

    moved = items.pop(source_index)
    items.insert(final_index, moved)
    return QueueDrop(queue=items, changed=True, final_index=final_index)
