from __future__ import annotations

from posetimer.session.model import PauseStep, PoseStep, Step
from posetimer.session.progress import (
    PoseProgress,
    calculate_custom_total_remaining_seconds,
    calculate_memory_total_seconds,
    calculate_plan_poses,
    calculate_queue_total_seconds,
    get_custom_pose_session_progress,
    get_step_total_seconds,
)


QUEUE: list[Step] = [
    PoseStep(count=2, duration=30),
    PauseStep(duration=60),
    PoseStep(count=3, duration=45),
]


def test_single_group_progress_hides_global_counter() -> None:
    progress = get_custom_pose_session_progress([PoseStep(count=3, duration=30)], 0, 2)
    assert progress == PoseProgress(
        total_poses=3, global_pose_index=2, pose_group_count=1, show_global=False
    )


def test_multi_group_progress() -> None:
    progress = get_custom_pose_session_progress(QUEUE, 2, 2)
    assert progress.total_poses == 5
    assert progress.pose_group_count == 2
    assert progress.global_pose_index == 4
    assert progress.show_global is True

    on_pause = get_custom_pose_session_progress(QUEUE, 1, 1)
    assert on_pause.global_pose_index == 2


def test_progress_edge_cases() -> None:
    leading_pause = [PauseStep(duration=10), PoseStep(count=2, duration=30)]
    assert get_custom_pose_session_progress(leading_pause, 0, 1).global_pose_index == 1

    overshoot = get_custom_pose_session_progress([PoseStep(count=3, duration=30)], 0, 9)
    assert overshoot.global_pose_index == 3

    assert get_custom_pose_session_progress([], 0, 1) == PoseProgress(0, 0, 0, False)


def test_total_remaining_seconds() -> None:
    # 20 live + 30 for the second pose + 60 pause + 3 * 45.
    assert calculate_custom_total_remaining_seconds(QUEUE, 0, 1, 20) == 245
    assert calculate_custom_total_remaining_seconds(QUEUE, 2, 3, 10) == 10
    assert calculate_custom_total_remaining_seconds([], 0, 1, 12) == 12
    assert calculate_custom_total_remaining_seconds([], 0, 1, -5) == 0


def test_queue_total_matches_step_costs() -> None:
    queues: list[list[Step]] = [
        QUEUE,
        [PauseStep(duration=15)],
        [PoseStep(count=10, duration=30), PoseStep(count=1, duration=600)],
        [],
    ]
    for queue in queues:
        expected = sum(
            step.duration if isinstance(step, PauseStep) else step.duration * step.count
            for step in queue
        )
        assert calculate_queue_total_seconds(queue) == expected

    assert calculate_queue_total_seconds(QUEUE) == 255
    assert get_step_total_seconds("junk") == 0


def test_plan_and_memory_totals() -> None:
    assert calculate_plan_poses(QUEUE) == 5
    assert calculate_memory_total_seconds(10, 60, 5) == 650
    assert calculate_memory_total_seconds(None, 60, 5) == 0
