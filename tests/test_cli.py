from __future__ import annotations

import asyncio

import pytest

from posetimer.cli.main import build_parser, parse_step_spec, resolve_config
from posetimer.session.model import PauseStep, PoseStep
from posetimer.storage.history import SessionHistory, SessionRecord
from posetimer.storage.kv import MemoryStore
from posetimer.storage.plan_store import PlanRepository


def test_parse_step_spec() -> None:
    group = parse_step_spec("5x30")
    assert isinstance(group, PoseStep)
    assert (group.count, group.duration) == (5, 30)

    pause = parse_step_spec("Pause:60")
    assert isinstance(pause, PauseStep)
    assert pause.duration == 60

    single = parse_step_spec("45")
    assert isinstance(single, PoseStep)
    assert (single.count, single.duration) == (1, 45)

    with pytest.raises(ValueError):
        parse_step_spec("abc")
    with pytest.raises(ValueError):
        parse_step_spec("3x0")


def test_parser_defaults() -> None:
    args = build_parser().parse_args([])
    assert args.mode == "classique"
    assert args.duration == 60
    assert args.drawing_time == 0
    assert args.add_step == []
    assert args.tick_interval == 1.0


def test_added_steps_switch_to_custom_mode() -> None:
    async def _run() -> None:
        store = MemoryStore()
        args = build_parser().parse_args(["--start", "--add-step", "2x30", "--add-step", "pause:15"])
        config = await resolve_config(args, PlanRepository(store), SessionHistory(store))
        assert config.session_mode == "custom"
        assert [step.duration for step in config.custom_queue] == [30, 15]

    asyncio.run(_run())


def test_resolve_config_from_saved_plan() -> None:
    async def _run() -> None:
        store = MemoryStore()
        repo = PlanRepository(store, now=lambda: 1000)
        await repo.save_plan("Warmup", [PoseStep(count=5, duration=30), PauseStep(duration=60)])

        args = build_parser().parse_args(["--start", "--plan", "warmup"])
        config = await resolve_config(args, repo, SessionHistory(store))

        assert config.session_mode == "custom"
        assert config.custom_queue == (
            PoseStep(count=5, duration=30, id=1000),
            PauseStep(duration=60, id=1001),
        )

        with pytest.raises(ValueError):
            await resolve_config(
                build_parser().parse_args(["--start", "--plan", "missing"]), repo, SessionHistory(store)
            )

    asyncio.run(_run())


def test_resolve_config_from_history_replay() -> None:
    async def _run() -> None:
        store = MemoryStore()
        history = SessionHistory(store)
        await history.append(
            SessionRecord(
                timestamp="2026-03-01T09:00:00+00:00",
                poses=5,
                time=50,
                mode="memory",
                memory_type="progressive",
            )
        )

        args = build_parser().parse_args(["--start", "--replay", "1"])
        config = await resolve_config(args, PlanRepository(store), history)
        assert config.session_mode == "memory"
        assert config.memory_type == "progressive"
        assert config.selected_duration == 10

        with pytest.raises(ValueError):
            await resolve_config(
                build_parser().parse_args(["--start", "--replay", "3"]), PlanRepository(store), history
            )

    asyncio.run(_run())


def test_replay_duration_rounds_half_up() -> None:
    async def _run() -> None:
        store = MemoryStore()
        history = SessionHistory(store)
        await history.append(
            SessionRecord(timestamp="2026-03-01T09:00:00+00:00", poses=60, time=150, mode="classique")
        )

        args = build_parser().parse_args(["--start", "--replay", "1"])
        config = await resolve_config(args, PlanRepository(store), history)
        assert config.selected_duration == 3

    asyncio.run(_run())
