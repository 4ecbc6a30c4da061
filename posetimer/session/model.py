"""Session domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Union


SessionMode = Literal["classique", "custom", "relax", "memory"]
MemoryType = Literal["flash", "progressive"]
StepType = Literal["pose", "pause"]
SoundCue = Literal["pause", "group"]

VALID_MODES: tuple[SessionMode, ...] = ("classique", "custom", "relax", "memory")
VALID_MEMORY_TYPES: tuple[MemoryType, ...] = ("flash", "progressive")

DEFAULT_DURATION_SEC = 60


@dataclass(frozen=True)
class PoseStep:
    count: int
    duration: int
    id: float | None = None

    @property
    def type(self) -> StepType:
        return "pose"

    @property
    def total_seconds(self) -> int:
        return self.duration * self.count

    def to_dict(self) -> dict[str, Any]:
        return {"type": "pose", "count": self.count, "duration": self.duration, "id": self.id}


@dataclass(frozen=True)
class PauseStep:
    duration: int
    id: float | None = None

    @property
    def type(self) -> StepType:
        return "pause"

    @property
    def count(self) -> int:
        return 1

    @property
    def total_seconds(self) -> int:
        return self.duration

    def to_dict(self) -> dict[str, Any]:
        return {"type": "pause", "count": 1, "duration": self.duration, "id": self.id}


Step = Union[PoseStep, PauseStep]


@dataclass(frozen=True)
class Plan:
    name: str
    steps: tuple[Step, ...]
    date: int

    @property
    def total_duration_sec(self) -> int:
        return sum(step.total_seconds for step in self.steps)

    @property
    def total_poses(self) -> int:
        return sum(step.count for step in self.steps if isinstance(step, PoseStep))

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "steps": [step.to_dict() for step in self.steps],
            "date": self.date,
        }


@dataclass(frozen=True)
class SessionConfig:
    """Inputs chosen on the settings screen before a session starts.

    ``memory_duration`` overrides the flash display time of a memory drill;
    when it is ``None`` the drill shows each image for ``selected_duration``.
    ``memory_drawing_time`` is the recall phase length after the image is
    hidden, ``0`` meaning the learner advances manually.
    """

    session_mode: str = "classique"
    selected_duration: int = DEFAULT_DURATION_SEC
    custom_queue: tuple[Step, ...] = ()
    memory_type: str = "flash"
    memory_duration: int | None = None
    memory_drawing_time: int = 0
    images_length: int = 1
    memory_poses_count: int = 1


@dataclass
class RuntimeState:
    session_mode: SessionMode = "classique"
    selected_duration: int = DEFAULT_DURATION_SEC
    custom_queue: list[Step] = field(default_factory=list)
    memory_type: MemoryType = "flash"
    memory_poses_count: int = 1
    current_step_index: int = 0
    current_pose_in_step: int = 1
    time_remaining: int = DEFAULT_DURATION_SEC
    memory_hidden: bool = False
    is_valid: bool = True

    @property
    def is_memory_flash(self) -> bool:
        return self.session_mode == "memory" and self.memory_type == "flash"

    @property
    def current_step(self) -> Step | None:
        if self.session_mode != "custom":
            return None
        if 0 <= self.current_step_index < len(self.custom_queue):
            return self.custom_queue[self.current_step_index]
        return None


def normalize_mode(mode: object, fallback: str = "classique") -> SessionMode:
    normalized = str(mode or "").strip().lower()
    for valid in VALID_MODES:
        if normalized == valid:
            return valid
    fallback_normalized = str(fallback or "").strip().lower()
    for valid in VALID_MODES:
        if fallback_normalized == valid:
            return valid
    return "classique"


def normalize_memory_type(memory_type: object, mode: object = "classique") -> MemoryType | None:
    """Memory type only exists for memory sessions; anything unknown is a flash drill."""
    if normalize_mode(mode) != "memory":
        return None
    normalized = str(memory_type or "").strip().lower()
    return "progressive" if normalized == "progressive" else "flash"
