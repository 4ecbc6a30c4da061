"""Human-readable durations."""

from __future__ import annotations

import math

from posetimer.session.coerce import to_number


def _safe_seconds(value: object) -> int:
    return max(0, math.floor(to_number(value, 0)))


def format_compact_duration(seconds: object) -> str:
    safe = _safe_seconds(seconds)
    if safe <= 0:
        return "0s"
    hours, minutes, secs = safe // 3600, (safe % 3600) // 60, safe % 60
    parts: list[str] = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{secs}s")
    return " ".join(parts)


def format_clock_duration(seconds: object) -> str:
    safe = _safe_seconds(seconds)
    hours, minutes, secs = safe // 3600, (safe % 3600) // 60, safe % 60
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
