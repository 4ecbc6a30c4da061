"""Saved plan payload validation and repair."""

from __future__ import annotations

import math
import random
import time
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any, Callable, Literal, Sequence

from posetimer.session.coerce import clamp_int, to_number
from posetimer.session.model import PauseStep, Plan, PoseStep, Step


PLAN_SCHEMA_VERSION = 1
MAX_PLAN_NAME_LENGTH = 120
MAX_STEP_DURATION_SEC = 86400
MAX_POSE_COUNT = 10000
MAX_PLAN_DATE_MS = 4102444800000  # 2100-01-01T00:00:00Z

Clock = Callable[[], int]
PlanSaveReason = Literal["", "empty-name", "empty-queue"]


def epoch_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class PlansNormalization:
    payload: dict[str, Any]
    plans: list[Plan]
    repaired: bool


@dataclass(frozen=True)
class PlanSaveValidation:
    ok: bool
    reason: PlanSaveReason


def normalize_custom_step(raw: object, *, now: Clock | None = None) -> Step | None:
    """Return a clamped step, or ``None`` when the entry has no usable type."""
    if not isinstance(raw, Mapping):
        return None
    step_type = raw.get("type")
    if step_type not in ("pose", "pause"):
        return None

    clock = now or epoch_ms
    duration = clamp_int(raw.get("duration"), 1, MAX_STEP_DURATION_SEC, 60)
    raw_id = raw.get("id")
    id_candidate = math.nan if raw_id is None else to_number(raw_id, math.nan)
    step_id: float
    if math.isnan(id_candidate):
        step_id = clock() + random.randint(0, 9999)
    elif id_candidate.is_integer():
        step_id = int(id_candidate)
    else:
        step_id = id_candidate

    if step_type == "pause":
        return PauseStep(duration=duration, id=step_id)
    count = clamp_int(raw.get("count"), 1, MAX_POSE_COUNT, 1)
    return PoseStep(count=count, duration=duration, id=step_id)


def _step_was_coerced(raw: Mapping[str, Any], step: Step) -> bool:
    return (
        raw.get("duration") != step.duration
        or raw.get("count") != step.count
        or raw.get("id") != step.id
    )


def normalize_session_plans_payload(
    raw: object,
    *,
    schema_version: int = PLAN_SCHEMA_VERSION,
    now: Clock | None = None,
) -> PlansNormalization:
    """Repair a persisted plans payload.

    Accepts the versioned ``{"schemaVersion", "plans"}`` envelope or a bare
    list of plans. Malformed steps are dropped, plans left without steps are
    dropped, and ``repaired`` reports that the caller should write the
    corrected payload back.
    """
    clock = now or epoch_ms
    envelope_ok = (
        isinstance(raw, Mapping)
        and isinstance(raw.get("plans"), list)
        and raw.get("schemaVersion") == schema_version
    )
    if isinstance(raw, Mapping) and isinstance(raw.get("plans"), list):
        source: list[Any] = raw["plans"]
    elif isinstance(raw, list):
        source = raw
    else:
        source = []

    repaired = not envelope_ok
    plans: list[Plan] = []
    for index, entry in enumerate(source):
        if not isinstance(entry, Mapping):
            repaired = True
            continue

        name_obj = entry.get("name")
        name = "" if name_obj is None else str(name_obj).strip()
        name = name[:MAX_PLAN_NAME_LENGTH] if name else f"Plan {index + 1}"
        if name != name_obj:
            repaired = True

        date = clamp_int(entry.get("date"), 0, MAX_PLAN_DATE_MS, clock())
        if date != entry.get("date"):
            repaired = True

        raw_steps = entry.get("steps")
        if not isinstance(raw_steps, list):
            repaired = True
            raw_steps = []

        steps: list[Step] = []
        for raw_step in raw_steps:
            step = normalize_custom_step(raw_step, now=clock)
            if step is None:
                repaired = True
                continue
            if _step_was_coerced(raw_step, step):
                repaired = True
            steps.append(step)

        if not steps:
            repaired = True
            continue
        plans.append(Plan(name=name, steps=tuple(steps), date=date))

    payload = {
        "schemaVersion": schema_version,
        "plans": [plan.to_dict() for plan in plans],
    }
    return PlansNormalization(payload=payload, plans=plans, repaired=repaired)


def get_plan_save_validation(name: str | None, queue_length: int) -> PlanSaveValidation:
    if not (name or "").strip():
        return PlanSaveValidation(ok=False, reason="empty-name")
    if queue_length <= 0:
        return PlanSaveValidation(ok=False, reason="empty-queue")
    return PlanSaveValidation(ok=True, reason="")


def create_plan_entry(
    name: str,
    queue: Sequence[Step],
    date: int | None = None,
    *,
    now: Clock | None = None,
) -> Plan:
    """Snapshot a queue as a plan; steps without an id get one derived from the date."""
    stamp = date if date is not None and date > 0 else (now or epoch_ms)()
    steps = tuple(
        step if step.id is not None else replace(step, id=stamp + offset)
        for offset, step in enumerate(queue)
    )
    return Plan(name=name.strip(), steps=steps, date=stamp)
