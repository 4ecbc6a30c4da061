from __future__ import annotations

from posetimer.session.formatting import format_clock_duration, format_compact_duration


def test_compact_duration() -> None:
    assert format_compact_duration(0) == "0s"
    assert format_compact_duration(-5) == "0s"
    assert format_compact_duration(90) == "1m 30s"
    assert format_compact_duration(3600) == "1h"
    assert format_compact_duration(3725) == "1h 2m 5s"
    assert format_compact_duration("nope") == "0s"


def test_clock_duration() -> None:
    assert format_clock_duration(0) == "0:00"
    assert format_clock_duration(65) == "1:05"
    assert format_clock_duration(3725) == "1:02:05"
