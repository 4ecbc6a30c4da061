"""Terminal CLI entrypoint for Pose Timer."""

from __future__ import annotations

import argparse
import asyncio
import sys
import threading
from pathlib import Path

from posetimer.session.formatting import format_clock_duration, format_compact_duration
from posetimer.session.coerce import round_half_up
from posetimer.session.model import VALID_MODES, SessionConfig, Step, normalize_mode
from posetimer.session.queue_edit import create_queue_step
from posetimer.session.replay import (
    build_replay_options_from_session,
    normalize_load_session_options,
)
from posetimer.session.runner import SessionProgress, SessionRunner, SoundEvent
from posetimer.storage.history import SessionHistory, SessionRecord, now_utc_iso
from posetimer.storage.kv import JsonFileStore, default_data_dir
from posetimer.storage.plan_store import PlanRepository


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pose Timer terminal drawing sessions")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help=f"Where plans and history are stored (default {default_data_dir()})",
    )
    parser.add_argument("--list-plans", action="store_true", help="List saved plans")
    parser.add_argument("--history", action="store_true", help="Show recent sessions")
    parser.add_argument("--start", action="store_true", help="Run a session in the terminal")
    parser.add_argument(
        "--mode",
        choices=VALID_MODES,
        default="classique",
        help="Session mode for --start",
    )
    parser.add_argument(
        "--duration",
        type=int,
        default=60,
        help="Seconds per pose (classique, memory progressive)",
    )
    parser.add_argument("--images", type=int, default=10, help="Number of reference images")
    parser.add_argument(
        "--memory-type",
        choices=("flash", "progressive"),
        default="flash",
        help="Memory drill variant",
    )
    parser.add_argument(
        "--memory-duration",
        type=int,
        default=None,
        help="Seconds the image is shown in a flash drill (default --duration)",
    )
    parser.add_argument(
        "--drawing-time",
        type=int,
        default=0,
        help="Recall seconds after a flash image is hidden (0 = press Enter)",
    )
    parser.add_argument("--poses", type=int, default=10, help="Images covered by a memory drill")
    parser.add_argument(
        "--add-step",
        action="append",
        default=[],
        metavar="SPEC",
        help="Custom queue step: COUNTxSECONDS for poses, pause:SECONDS for a pause",
    )
    parser.add_argument("--plan", default=None, help="Run the saved plan with this name")
    parser.add_argument("--save-plan", default=None, metavar="NAME", help="Save --add-step queue")
    parser.add_argument("--delete-plan", type=int, default=None, metavar="INDEX")
    parser.add_argument(
        "--replay",
        type=int,
        default=None,
        metavar="N",
        help="Replay the Nth most recent session (1 = latest)",
    )
    parser.add_argument("--no-sound", action="store_true", help="Disable audio cues")
    parser.add_argument(
        "--tick-interval",
        type=float,
        default=1.0,
        help="Seconds between countdown ticks",
    )
    return parser


def parse_step_spec(spec: str) -> Step:
    raw = spec.strip().lower()
    if raw.startswith("pause:"):
        step = create_queue_step(is_pause=True, duration=raw.split(":", 1)[1])
    elif "x" in raw:
        count, _, duration = raw.partition("x")
        step = create_queue_step(is_pause=False, duration=duration, count=count)
    else:
        step = create_queue_step(is_pause=False, duration=raw, count=1)
    if step is None:
        raise ValueError(f"Invalid step '{spec}'. Use COUNTxSECONDS or pause:SECONDS")
    return step


async def run_list_plans(repo: PlanRepository) -> int:
    plans = await repo.load_plans()
    if not plans:
        print("No saved plans")
        return 0
    for index, plan in enumerate(plans):
        print(
            f"{index:>3} {plan.name:<32} {format_compact_duration(plan.total_duration_sec):>10} "
            f"{plan.total_poses} poses, {len(plan.steps)} steps"
        )
    return 0


async def run_history(history: SessionHistory) -> int:
    records = await history.load_recent(limit=20)
    if not records:
        print("No sessions recorded")
        return 0
    for index, record in enumerate(records, start=1):
        print(
            f"{index:>3} {record.timestamp[:19]} {record.mode:<10} "
            f"{record.poses:>4} poses {format_compact_duration(record.time):>10}"
        )
    return 0


async def resolve_config(
    args: argparse.Namespace,
    repo: PlanRepository,
    history: SessionHistory,
) -> SessionConfig:
    mode = normalize_mode(args.mode)
    duration = max(0, args.duration)
    memory_type = args.memory_type
    queue: tuple[Step, ...] = tuple(parse_step_spec(spec) for spec in args.add_step)

    if args.replay is not None:
        records = await history.load_recent(limit=max(1, args.replay))
        if len(records) < args.replay or args.replay < 1:
            raise ValueError(f"No session #{args.replay} in history")
        options = build_replay_options_from_session(records[args.replay - 1].to_dict())
        mode = options.mode
        if options.duration is not None:
            duration = max(1, round_half_up(options.duration))
        queue = options.custom_queue
        memory_type = options.memory_type or memory_type
        print(f"[SESSION] replaying {mode} session ({format_compact_duration(duration)} per pose)")
    elif args.plan is not None:
        plan = await repo.find_plan(args.plan)
        if plan is None:
            raise ValueError(f"Unknown plan '{args.plan}'")
        options = normalize_load_session_options(
            {
                "mode": "custom",
                "duration": duration,
                "customQueue": [step.to_dict() for step in plan.steps],
            }
        )
        mode = options.mode
        queue = options.custom_queue
    elif queue:
        mode = "custom"

    return SessionConfig(
        session_mode=mode,
        selected_duration=duration,
        custom_queue=queue,
        memory_type=memory_type,
        memory_duration=args.memory_duration,
        memory_drawing_time=max(0, args.drawing_time),
        images_length=max(1, args.images),
        memory_poses_count=args.poses,
    )


def _print_progress(progress: SessionProgress) -> None:
    parts = [f"image {progress.image_index + 1}"]
    if progress.session_mode == "relax":
        parts.append(f"elapsed {format_clock_duration(progress.elapsed_sec)}")
    elif progress.memory_hidden:
        parts.append(f"recall {format_clock_duration(progress.time_remaining)}")
    else:
        parts.append(format_clock_duration(progress.time_remaining))
    if progress.in_pause:
        parts.append("pause")
    elif progress.total_poses:
        parts.append(f"pose {progress.global_pose_index}/{progress.total_poses}")
    if progress.total_remaining_sec is not None:
        parts.append(f"left {format_compact_duration(progress.total_remaining_sec)}")
    print("[SESSION] " + " | ".join(parts))


def _print_sound(event: SoundEvent) -> None:
    if event.kind == "tick":
        print(f"[SOUND] tick vol={event.volume:.2f}")
    else:
        print(f"[SOUND] {event.kind}")


def _start_enter_reader(loop: asyncio.AbstractEventLoop, runner: SessionRunner) -> None:
    def _read() -> None:
        for _line in sys.stdin:
            loop.call_soon_threadsafe(runner.advance)

    threading.Thread(target=_read, name="enter-reader", daemon=True).start()


async def run_session(
    config: SessionConfig,
    history: SessionHistory,
    sound_enabled: bool,
    tick_interval: float,
) -> int:
    runner = SessionRunner(tick_interval_sec=tick_interval, sound_enabled=sound_enabled)
    loop = asyncio.get_running_loop()
    done: asyncio.Future[bool] = loop.create_future()

    def on_finish(completed: bool) -> None:
        if not done.done():
            done.set_result(completed)

    await runner.start(
        config,
        on_progress=_print_progress,
        on_finish=on_finish,
        on_sound=_print_sound if sound_enabled else None,
    )
    print("[SESSION] started, press Enter for the next image, Ctrl+C to stop")
    _start_enter_reader(loop, runner)

    try:
        completed = await done
    except asyncio.CancelledError:
        await runner.stop()
        completed = False

    record = SessionRecord(
        timestamp=now_utc_iso(),
        poses=runner.poses_shown,
        time=runner.elapsed_sec,
        mode=runner.state.session_mode,
        memory_type=runner.state.memory_type if runner.state.session_mode == "memory" else None,
        custom_queue=[step.to_dict() for step in runner.state.custom_queue] or None,
    )
    if await history.append(record):
        print(
            f"[SESSION] {'completed' if completed else 'stopped'}: {record.poses} poses "
            f"in {format_compact_duration(record.time)}"
        )
    else:
        print("[STORE] Warning: unable to save session history")
    return 0


async def run_cli(args: argparse.Namespace) -> int:
    store = JsonFileStore(args.data_dir)
    repo = PlanRepository(store)
    history = SessionHistory(store)

    if args.list_plans:
        return await run_list_plans(repo)
    if args.history:
        return await run_history(history)
    if args.delete_plan is not None:
        removed = await repo.delete_plan(args.delete_plan)
        print(f"[PLANS] deleted '{removed.name}'")
        return 0
    if args.save_plan is not None:
        queue = [parse_step_spec(spec) for spec in args.add_step]
        plan = await repo.save_plan(args.save_plan, queue)
        print(
            f"[PLANS] saved '{plan.name}' "
            f"({format_compact_duration(plan.total_duration_sec)}, {plan.total_poses} poses)"
        )
        return 0

    config = await resolve_config(args, repo, history)
    return await run_session(config, history, not args.no_sound, args.tick_interval)


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()

    if not (
        args.list_plans
        or args.history
        or args.start
        or args.save_plan is not None
        or args.delete_plan is not None
    ):
        parser.print_help()
        return 1

    try:
        return asyncio.run(run_cli(args))
    except (ValueError, RuntimeError) as exc:
        print(f"Error: {exc}")
        return 1
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
