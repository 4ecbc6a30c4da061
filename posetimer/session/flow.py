"""Session start resolution and memory drill sequencing."""

from __future__ import annotations

from posetimer.session.coerce import round_half_up, to_int, to_number, to_positive_int
from posetimer.session.model import (
    DEFAULT_DURATION_SEC,
    RuntimeState,
    SessionConfig,
    normalize_memory_type,
    normalize_mode,
)


def resolve_classic_duration(
    hours: object,
    minutes: object,
    seconds: object,
    button_duration: object,
    fallback_duration: object = DEFAULT_DURATION_SEC,
) -> int:
    """Manual h/m/s input wins, then the active preset button, then the fallback."""
    h = max(0, to_int(hours, 0))
    m = max(0, to_int(minutes, 0))
    s = max(0, to_int(seconds, 0))
    manual_total = h * 3600 + m * 60 + s
    if manual_total > 0:
        return manual_total
    from_button = to_positive_int(button_duration, 0)
    if from_button > 0:
        return from_button
    return to_positive_int(fallback_duration, DEFAULT_DURATION_SEC)


def clamp_memory_poses_count(requested: object, images_count: object, fallback: int = 1) -> int:
    images = max(1, round_half_up(to_number(images_count, 1)))
    desired = round_half_up(to_number(requested, fallback))
    return max(1, min(desired, images))


def resolve_session_start_state(config: SessionConfig) -> RuntimeState:
    """Build the runtime state for the first image of a session.

    The returned state has ``is_valid`` set to False when a custom session
    has nothing queued; callers must not start the countdown in that case.
    """
    mode = normalize_mode(config.session_mode)
    selected_duration = to_positive_int(config.selected_duration, DEFAULT_DURATION_SEC)
    memory_type = normalize_memory_type(config.memory_type, "memory") or "flash"
    images_length = max(1, to_int(config.images_length, 1))

    state = RuntimeState(
        session_mode=mode,
        selected_duration=selected_duration,
        custom_queue=list(config.custom_queue) if mode == "custom" else [],
        memory_type=memory_type,
        memory_poses_count=clamp_memory_poses_count(config.memory_poses_count, images_length),
        current_step_index=0,
        current_pose_in_step=1,
        time_remaining=selected_duration,
        memory_hidden=False,
    )

    if mode == "custom":
        if not state.custom_queue:
            state.is_valid = False
            return state
        first_duration = to_positive_int(state.custom_queue[0].duration, selected_duration)
        state.selected_duration = first_duration
        state.time_remaining = first_duration
        return state

    if mode == "memory":
        if memory_type == "flash":
            duration = (
                selected_duration
                if config.memory_duration is None
                else to_positive_int(config.memory_duration, selected_duration)
            )
            state.selected_duration = duration
            state.time_remaining = duration
        return state

    if mode == "relax":
        state.time_remaining = 0
    return state


def should_end_memory_session(current_index: object, memory_poses_count: object) -> bool:
    index = max(0, to_int(current_index, 0))
    limit = max(1, to_int(memory_poses_count, 1))
    return index + 1 >= limit


def next_cyclic_index(index: object, length: object) -> int:
    total = max(1, to_int(length, 1))
    current = max(0, to_int(index, 0))
    return (current + 1) % total


def can_start_session(
    *,
    images_count: int,
    session_mode: str,
    custom_queue_length: int,
    selected_duration: int,
) -> bool:
    if images_count <= 0:
        return False
    mode = normalize_mode(session_mode)
    if mode == "custom":
        return custom_queue_length > 0
    if mode == "relax":
        return True
    return selected_duration > 0
