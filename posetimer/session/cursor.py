"""Cursor movement through a custom step queue."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from posetimer.session.model import PauseStep, PoseStep, SoundCue, Step


@dataclass(frozen=True)
class CursorAdvance:
    finished: bool
    current_step_index: int
    current_pose_in_step: int
    next_step: Step | None
    entered_new_step: bool
    sound_cue: SoundCue | None


def _step_at(queue: Sequence[Step], index: int) -> Step | None:
    if 0 <= index < len(queue):
        step = queue[index]
        if isinstance(step, (PoseStep, PauseStep)):
            return step
    return None


def advance_custom_cursor(
    queue: Sequence[Step],
    step_index: int,
    pose_in_step: int,
) -> CursorAdvance:
    """Move one pose (or one pause) forward.

    A pose step with ``count`` repetitions is walked in place: the cursor stays
    on the same step and bumps ``pose_in_step`` until the last repetition, then
    moves to the first pose of the next step.
    """
    step_index = max(0, step_index)
    pose_in_step = max(1, pose_in_step)
    current = _step_at(queue, step_index)
    if current is None:
        return CursorAdvance(
            finished=True,
            current_step_index=step_index,
            current_pose_in_step=pose_in_step,
            next_step=None,
            entered_new_step=False,
            sound_cue=None,
        )

    entered_new_step = False
    if pose_in_step < max(1, current.count):
        pose_in_step += 1
    else:
        step_index += 1
        pose_in_step = 1
        entered_new_step = True

    next_step = _step_at(queue, step_index)
    if next_step is None:
        return CursorAdvance(
            finished=True,
            current_step_index=step_index,
            current_pose_in_step=pose_in_step,
            next_step=None,
            entered_new_step=entered_new_step,
            sound_cue=None,
        )

    sound_cue: SoundCue | None = None
    if entered_new_step:
        sound_cue = "pause" if isinstance(next_step, PauseStep) else "group"

    return CursorAdvance(
        finished=False,
        current_step_index=step_index,
        current_pose_in_step=pose_in_step,
        next_step=next_step,
        entered_new_step=entered_new_step,
        sound_cue=sound_cue,
    )


def find_next_pose_step_index(queue: Sequence[Step], from_index: int) -> int:
    for index in range(max(-1, from_index) + 1, len(queue)):
        if isinstance(queue[index], PoseStep):
            return index
    return -1


def find_prev_pose_step_index(queue: Sequence[Step], from_index: int) -> int:
    for index in range(min(len(queue), from_index) - 1, -1, -1):
        if isinstance(queue[index], PoseStep):
            return index
    return -1


def find_next_pose_step(queue: Sequence[Step], from_index: int) -> PoseStep | None:
    index = find_next_pose_step_index(queue, from_index)
    if index < 0:
        return None
    step = queue[index]
    assert isinstance(step, PoseStep)
    return step


def has_next_pose_group(queue: Sequence[Step], from_index: int) -> bool:
    return find_next_pose_step_index(queue, from_index) >= 0


def has_prev_pose_group(queue: Sequence[Step], from_index: int) -> bool:
    return find_prev_pose_step_index(queue, from_index) >= 0
