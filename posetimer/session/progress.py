"""Pose counters and remaining-time math for custom queues."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from posetimer.session.coerce import to_number, to_positive_int
from posetimer.session.model import PauseStep, PoseStep, Step


@dataclass(frozen=True)
class PoseProgress:
    total_poses: int
    global_pose_index: int
    pose_group_count: int
    show_global: bool


def get_step_total_seconds(step: object) -> int:
    if isinstance(step, PauseStep):
        return max(0, step.duration)
    if isinstance(step, PoseStep):
        return max(0, step.duration) * max(1, step.count)
    return 0


def calculate_queue_total_seconds(queue: Iterable[Step]) -> int:
    return sum(get_step_total_seconds(step) for step in queue)


def calculate_plan_poses(steps: Iterable[Step]) -> int:
    return sum(max(0, step.count) for step in steps if isinstance(step, PoseStep))


def calculate_memory_total_seconds(
    poses_count: object, drawing_time: object, display_time: object
) -> float:
    poses = max(0.0, to_number(poses_count, 0))
    drawing = max(0.0, to_number(drawing_time, 0))
    display = max(0.0, to_number(display_time, 0))
    return poses * (drawing + display)


def get_custom_pose_session_progress(
    queue: Sequence[Step],
    step_index: int,
    pose_in_step: int,
) -> PoseProgress:
    """Global pose counter across every pose group of the queue.

    ``show_global`` is only set when the queue holds more than one pose group,
    otherwise the per-step counter already tells the whole story.
    """
    if not queue:
        return PoseProgress(total_poses=0, global_pose_index=0, pose_group_count=0, show_global=False)

    pose_in_step = max(1, pose_in_step)
    total_poses = 0
    pose_group_count = 0
    global_pose_index = 0

    for index, step in enumerate(queue):
        if not isinstance(step, PoseStep):
            continue
        count = max(1, step.count)
        pose_group_count += 1
        total_poses += count
        if index < step_index:
            global_pose_index += count

    current = queue[step_index] if 0 <= step_index < len(queue) else None
    if isinstance(current, PoseStep):
        global_pose_index += min(max(1, current.count), pose_in_step)
    elif total_poses > 0 and global_pose_index <= 0:
        # Sitting on a leading pause still reads as "pose 1 of N".
        global_pose_index = 1

    return PoseProgress(
        total_poses=total_poses,
        global_pose_index=min(max(global_pose_index, 0), total_poses),
        pose_group_count=pose_group_count,
        show_global=pose_group_count > 1,
    )


def calculate_custom_total_remaining_seconds(
    queue: Sequence[Step],
    step_index: int,
    pose_in_step: int,
    time_remaining: object,
) -> int:
    total = to_positive_int(time_remaining, 0)
    if not queue:
        return total

    pose_in_step = max(1, pose_in_step)
    for index in range(max(0, step_index + 1), len(queue)):
        total += get_step_total_seconds(queue[index])

    current = queue[step_index] if 0 <= step_index < len(queue) else None
    if isinstance(current, PoseStep):
        poses_remaining = max(0, current.count - pose_in_step)
        total += poses_remaining * max(0, current.duration)
    return total
