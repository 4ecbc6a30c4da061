from __future__ import annotations

from posetimer.session.cursor import (
    advance_custom_cursor,
    find_next_pose_step,
    find_next_pose_step_index,
    find_prev_pose_step_index,
    has_next_pose_group,
    has_prev_pose_group,
)
from posetimer.session.model import PauseStep, PoseStep


QUEUE = [
    PoseStep(count=2, duration=30, id=1),
    PauseStep(duration=60, id=2),
    PoseStep(count=1, duration=45, id=3),
]


def test_advance_repeats_pose_within_step() -> None:
    result = advance_custom_cursor(QUEUE, 0, 1)
    assert result.finished is False
    assert (result.current_step_index, result.current_pose_in_step) == (0, 2)
    assert result.entered_new_step is False
    assert result.sound_cue is None
    assert result.next_step == QUEUE[0]


def test_advance_into_pause_and_next_group() -> None:
    into_pause = advance_custom_cursor(QUEUE, 0, 2)
    assert (into_pause.current_step_index, into_pause.current_pose_in_step) == (1, 1)
    assert into_pause.entered_new_step is True
    assert into_pause.sound_cue == "pause"

    into_group = advance_custom_cursor(QUEUE, 1, 1)
    assert (into_group.current_step_index, into_group.current_pose_in_step) == (2, 1)
    assert into_group.sound_cue == "group"


def test_advance_past_last_step_finishes() -> None:
    result = advance_custom_cursor(QUEUE, 2, 1)
    assert result.finished is True
    assert result.current_step_index == 3
    assert result.next_step is None
    assert result.sound_cue is None


def test_out_of_range_cursor_finishes() -> None:
    result = advance_custom_cursor(QUEUE, 5, 1)
    assert result.finished is True
    assert result.current_step_index == 5
    assert result.entered_new_step is False

    assert advance_custom_cursor([], 0, 1).finished is True


def test_cursor_never_goes_below_bounds() -> None:
    floored = advance_custom_cursor(QUEUE, -2, 0)
    assert (floored.current_step_index, floored.current_pose_in_step) == (0, 2)

    step_index, pose_in_step = 0, 1
    advances = 0
    while True:
        result = advance_custom_cursor(QUEUE, step_index, pose_in_step)
        assert result.current_step_index >= 0
        assert result.current_pose_in_step >= 1
        if result.finished:
            break
        advances += 1
        step_index, pose_in_step = result.current_step_index, result.current_pose_in_step

    # 2 poses + 1 pause + 1 pose = 4 units, the first one is where we start.
    assert advances == 3


def test_pose_group_navigation() -> None:
    assert find_next_pose_step_index(QUEUE, 0) == 2
    assert find_next_pose_step_index(QUEUE, -1) == 0
    assert find_next_pose_step_index(QUEUE, 2) == -1
    assert find_prev_pose_step_index(QUEUE, 2) == 0
    assert find_prev_pose_step_index(QUEUE, 0) == -1
    assert find_prev_pose_step_index(QUEUE, 10) == 2
    assert has_next_pose_group(QUEUE, 1) is True
    assert has_prev_pose_group(QUEUE, 0) is False
    assert find_next_pose_step(QUEUE, 0) == QUEUE[2]
    assert find_next_pose_step(QUEUE, 2) is None
