"""Tick-driven session execution on top of the pure scheduling helpers."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from posetimer.session.cursor import advance_custom_cursor
from posetimer.session.flow import (
    next_cyclic_index,
    resolve_session_start_state,
    should_end_memory_session,
)
from posetimer.session.model import PauseStep, PoseStep, RuntimeState, SessionConfig, SessionMode
from posetimer.session.progress import (
    calculate_custom_total_remaining_seconds,
    get_custom_pose_session_progress,
)
from posetimer.session.ticks import (
    apply_memory_flash_phase,
    get_tick_sound_decision,
    should_auto_advance_on_timer_end,
    should_play_end_sound,
)


SoundKind = Literal["tick", "end", "group", "pause"]


@dataclass(frozen=True)
class SoundEvent:
    kind: SoundKind
    volume: float = 1.0


@dataclass(frozen=True)
class SessionProgress:
    session_mode: SessionMode
    image_index: int
    time_remaining: int
    memory_hidden: bool
    step_index: int
    pose_in_step: int
    in_pause: bool
    global_pose_index: int
    total_poses: int
    total_remaining_sec: int | None
    poses_shown: int
    elapsed_sec: int


ProgressCallback = Callable[[SessionProgress], None]
FinishCallback = Callable[[bool], None]
SoundCallback = Callable[[SoundEvent], None]


class SessionRunner:
    def __init__(
        self,
        *,
        tick_interval_sec: float = 1.0,
        sound_enabled: bool = True,
        tick_threshold_override: float | None = None,
    ) -> None:
        self._tick_interval_sec = max(0.0, tick_interval_sec)
        self._sound_enabled = sound_enabled
        self._tick_threshold_override = tick_threshold_override
        self._task: Optional[asyncio.Task[None]] = None
        self._stop_event = asyncio.Event()
        self._state = RuntimeState()
        self._config = SessionConfig()
        self._image_index = 0
        self._poses_shown = 0
        self._elapsed_sec = 0
        self._finished = False
        self._on_progress: ProgressCallback = lambda _p: None
        self._on_sound: SoundCallback = lambda _e: None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def state(self) -> RuntimeState:
        return self._state

    @property
    def poses_shown(self) -> int:
        return self._poses_shown

    @property
    def elapsed_sec(self) -> int:
        return self._elapsed_sec

    async def start(
        self,
        config: SessionConfig,
        on_progress: ProgressCallback,
        on_finish: FinishCallback,
        on_sound: SoundCallback | None = None,
    ) -> None:
        if self.is_running:
            raise RuntimeError("Session already running")

        state = resolve_session_start_state(config)
        if not state.is_valid:
            raise RuntimeError("Custom session has no steps")

        self._state = state
        self._config = config
        self._image_index = 0
        self._poses_shown = 0 if isinstance(state.current_step, PauseStep) else 1
        self._elapsed_sec = 0
        self._finished = False
        self._on_progress = on_progress
        self._on_sound = on_sound or (lambda _e: None)
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run(on_finish))

    async def stop(self) -> None:
        if not self.is_running:
            return

        self._stop_event.set()
        assert self._task is not None
        await self._task
        self._task = None

    def advance(self) -> None:
        """Manual "next image" action, the only way forward in relax mode."""
        if not self.is_running or self._finished:
            return
        if self._advance():
            self._finished = True
        self._on_progress(self.snapshot())

    def snapshot(self) -> SessionProgress:
        state = self._state
        global_index = 0
        total_poses = 0
        total_remaining: int | None = None
        if state.session_mode == "custom":
            progress = get_custom_pose_session_progress(
                state.custom_queue, state.current_step_index, state.current_pose_in_step
            )
            global_index = progress.global_pose_index
            total_poses = progress.total_poses
            total_remaining = calculate_custom_total_remaining_seconds(
                state.custom_queue,
                state.current_step_index,
                state.current_pose_in_step,
                state.time_remaining,
            )
        step = state.current_step
        return SessionProgress(
            session_mode=state.session_mode,
            image_index=self._image_index,
            time_remaining=state.time_remaining,
            memory_hidden=state.memory_hidden,
            step_index=state.current_step_index,
            pose_in_step=state.current_pose_in_step,
            in_pause=isinstance(step, PauseStep),
            global_pose_index=global_index,
            total_poses=total_poses,
            total_remaining_sec=total_remaining,
            poses_shown=self._poses_shown,
            elapsed_sec=self._elapsed_sec,
        )

    async def _run(self, on_finish: FinishCallback) -> None:
        completed = False
        try:
            self._on_progress(self.snapshot())
            while not self._stop_event.is_set() and not self._finished:
                await asyncio.sleep(self._tick_interval_sec)
                if self._stop_event.is_set() or self._finished:
                    break
                if self._tick():
                    self._finished = True
                self._on_progress(self.snapshot())

            completed = self._finished and not self._stop_event.is_set()
        finally:
            on_finish(completed)

    def _tick(self) -> bool:
        state = self._state
        self._elapsed_sec += 1
        if state.session_mode == "relax":
            return False
        if state.is_memory_flash and state.memory_hidden and self._config.memory_drawing_time <= 0:
            # Untimed recall: wait for a manual advance.
            return False

        state.time_remaining -= 1

        decision = get_tick_sound_decision(
            state,
            sound_enabled=self._sound_enabled,
            threshold_override=self._tick_threshold_override,
        )
        if decision.play_tick:
            self._on_sound(SoundEvent(kind="tick", volume=decision.volume))
        if should_play_end_sound(state, sound_enabled=self._sound_enabled):
            self._on_sound(SoundEvent(kind="end"))

        if state.is_memory_flash:
            event = apply_memory_flash_phase(
                state, drawing_time=self._config.memory_drawing_time
            )
            return event == "advance" and self._advance()

        if should_auto_advance_on_timer_end(state):
            return self._advance()
        return False

    def _advance(self) -> bool:
        """Move to the next pose; True when the session is over."""
        state = self._state
        if state.session_mode == "custom":
            result = advance_custom_cursor(
                state.custom_queue, state.current_step_index, state.current_pose_in_step
            )
            if result.finished or result.next_step is None:
                return True
            state.current_step_index = result.current_step_index
            state.current_pose_in_step = result.current_pose_in_step
            state.selected_duration = result.next_step.duration
            state.time_remaining = result.next_step.duration
            if result.sound_cue is not None and self._sound_enabled:
                self._on_sound(SoundEvent(kind=result.sound_cue))
            if isinstance(result.next_step, PoseStep):
                self._show_next_image()
            return False

        if state.session_mode == "memory":
            if should_end_memory_session(self._image_index, state.memory_poses_count):
                return True
            state.memory_hidden = False
            state.time_remaining = state.selected_duration
            self._show_next_image()
            return False

        state.time_remaining = 0 if state.session_mode == "relax" else state.selected_duration
        self._show_next_image()
        return False

    def _show_next_image(self) -> None:
        self._image_index = next_cyclic_index(self._image_index, self._config.images_length)
        self._poses_shown += 1
