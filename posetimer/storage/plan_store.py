"""User-defined session plans stored in the key-value store."""

from __future__ import annotations

from typing import Sequence

from posetimer.session.model import Plan, Step
from posetimer.session.plans import (
    PLAN_SCHEMA_VERSION,
    Clock,
    create_plan_entry,
    get_plan_save_validation,
    normalize_session_plans_payload,
)
from posetimer.storage.kv import KeyValueStore


PLANS_KEY = "session_plans"


class PlanRepository:
    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = PLANS_KEY,
        now: Clock | None = None,
    ) -> None:
        self._store = store
        self._key = key
        self._now = now

    async def load_plans(self) -> list[Plan]:
        """Read plans, writing the payload back when it needed repair."""
        raw = await self._store.get(self._key)
        if raw is None:
            return []
        result = normalize_session_plans_payload(
            raw, schema_version=PLAN_SCHEMA_VERSION, now=self._now
        )
        if result.repaired:
            await self._store.set(self._key, result.payload)
        return result.plans

    async def save_plan(self, name: str, queue: Sequence[Step]) -> Plan:
        validation = get_plan_save_validation(name, len(queue))
        if not validation.ok:
            raise ValueError(f"Cannot save plan: {validation.reason}")
        plans = await self.load_plans()
        plan = create_plan_entry(name, queue, now=self._now)
        plans.append(plan)
        await self._write(plans)
        return plan

    async def delete_plan(self, index: int) -> Plan:
        plans = await self.load_plans()
        if not 0 <= index < len(plans):
            raise ValueError(f"Unknown plan index {index}")
        removed = plans.pop(index)
        await self._write(plans)
        return removed

    async def rename_plan(self, index: int, name: str) -> Plan:
        plans = await self.load_plans()
        if not 0 <= index < len(plans):
            raise ValueError(f"Unknown plan index {index}")
        if not name.strip():
            raise ValueError("Cannot rename plan: empty-name")
        current = plans[index]
        plans[index] = Plan(name=name.strip(), steps=current.steps, date=current.date)
        await self._write(plans)
        return plans[index]

    async def find_plan(self, name: str) -> Plan | None:
        wanted = name.strip().lower()
        for plan in await self.load_plans():
            if plan.name.lower() == wanted:
                return plan
        return None

    async def _write(self, plans: list[Plan]) -> None:
        payload = {
            "schemaVersion": PLAN_SCHEMA_VERSION,
            "plans": [plan.to_dict() for plan in plans],
        }
        if not await self._store.set(self._key, payload):
            raise RuntimeError("Unable to persist session plans")
