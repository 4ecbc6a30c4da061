"""Per-tick countdown decisions: tick ramp, end chime, auto-advance, memory phases."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Sequence

from posetimer.session.model import PauseStep, RuntimeState, Step


TICK_THRESHOLD_RATIO = 0.2
TICK_THRESHOLD_MAX_SEC = 15.0

MemoryPhaseEvent = Literal["hide", "advance"]


@dataclass(frozen=True)
class TickSoundDecision:
    play_tick: bool
    volume: float


def is_custom_pause_step(session_mode: str, queue: Sequence[Step], step_index: int) -> bool:
    if session_mode != "custom":
        return False
    index = max(0, step_index)
    return index < len(queue) and isinstance(queue[index], PauseStep)


def tick_threshold(selected_duration: float, threshold_override: float | None = None) -> float:
    if threshold_override is not None and threshold_override >= 0:
        return float(threshold_override)
    return min(max(0.0, selected_duration) * TICK_THRESHOLD_RATIO, TICK_THRESHOLD_MAX_SEC)


def get_tick_sound_decision(
    state: RuntimeState,
    *,
    sound_enabled: bool = True,
    threshold_override: float | None = None,
) -> TickSoundDecision:
    """Volume ramps linearly from 0 towards 1 over the last seconds of a pose."""
    if not sound_enabled:
        return TickSoundDecision(play_tick=False, volume=0.0)

    threshold = tick_threshold(state.selected_duration, threshold_override)
    remaining = state.time_remaining
    in_pause = is_custom_pause_step(
        state.session_mode, state.custom_queue, state.current_step_index
    )
    if not in_pause and threshold > 0 and 0 < remaining <= threshold:
        return TickSoundDecision(play_tick=True, volume=(threshold - remaining) / threshold)
    return TickSoundDecision(play_tick=False, volume=0.0)


def should_play_end_sound(state: RuntimeState, *, sound_enabled: bool = True) -> bool:
    # Flash drills signal their own phase changes.
    if not sound_enabled:
        return False
    return state.time_remaining == 0 and not state.is_memory_flash


def should_auto_advance_on_timer_end(state: RuntimeState) -> bool:
    return state.time_remaining <= 0 and not state.is_memory_flash


def should_enter_memory_hidden_phase(state: RuntimeState) -> bool:
    return state.is_memory_flash and state.time_remaining < 0 and not state.memory_hidden


def should_advance_from_memory_hidden_phase(state: RuntimeState) -> bool:
    return state.is_memory_flash and state.memory_hidden and state.time_remaining < 0


def apply_memory_flash_phase(state: RuntimeState, *, drawing_time: int) -> MemoryPhaseEvent | None:
    """Consume one negative-countdown signal of a flash drill.

    Entering the hidden phase re-arms ``time_remaining`` with the recall time
    in the same call, so the tick that hides the image can never also count
    as the end of the recall phase. ``drawing_time <= 0`` leaves the recall
    untimed (``time_remaining`` pinned to 0).
    """
    if should_enter_memory_hidden_phase(state):
        state.memory_hidden = True
        state.time_remaining = max(0, drawing_time)
        return "hide"
    if should_advance_from_memory_hidden_phase(state):
        return "advance"
    return None
