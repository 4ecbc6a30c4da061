"""Lenient number coercion for persisted or user-supplied values."""

from __future__ import annotations

import math


def to_number(value: object, fallback: float = 0.0) -> float:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        num = float(value)
    elif isinstance(value, str):
        try:
            num = float(value.strip())
        except ValueError:
            return fallback
    else:
        return fallback
    return num if math.isfinite(num) else fallback


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def to_int(value: object, fallback: int = 0) -> int:
    num = to_number(value, math.nan)
    if math.isnan(num):
        return fallback
    return round_half_up(num)


def to_positive_int(value: object, fallback: int = 0) -> int:
    """Round to int and floor at zero (zero itself is allowed)."""
    return max(0, to_int(value, fallback))


def clamp_int(value: object, lower: int, upper: int, fallback: int | None = None) -> int:
    num = to_number(value, math.nan)
    if math.isnan(num):
        return lower if fallback is None else fallback
    return max(lower, min(upper, round_half_up(num)))
