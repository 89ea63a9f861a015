from __future__ import annotations

"""Display strings for durations, delays, grades and pace adjustments.

Kept free of any web/UI dependency so the API and scripts can share it.
"""

import math


def _is_missing(seconds: float | None) -> bool:
    return seconds is None or (isinstance(seconds, float) and math.isnan(seconds))


def format_duration_clock(seconds: float | None) -> str:
    """Format duration as a clock (e.g. 1:02:03 / 5:02 / '-')."""

    if _is_missing(seconds):
        return "-"
    total_seconds = int(round(seconds))
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    secs = total_seconds % 60
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_elapsed_time(seconds: float | None) -> str:
    """Zero-padded HH:MM:SS (e.g. 00:25:00)."""

    if _is_missing(seconds):
        return "-"
    total = int(round(seconds))
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_delay(seconds: float | None) -> str:
    """Stoppage duration: 'No delay', '45s', '2m 30s', '1h 5m'."""

    if _is_missing(seconds):
        return "-"
    total = int(round(seconds))
    if total == 0:
        return "No delay"
    if total < 60:
        return f"{total}s"
    if total < 3600:
        minutes, secs = divmod(total, 60)
        return f"{minutes}m" if secs == 0 else f"{minutes}m {secs}s"

    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    parts = [f"{hours}h"]
    if minutes:
        parts.append(f"{minutes}m")
    if secs:
        parts.append(f"{secs}s")
    return " ".join(parts)


def format_grade(grade_percent: float) -> str:
    """'flat' below 0.5 %, otherwise e.g. '4.2% uphill' / '3.0% downhill'."""

    magnitude = abs(grade_percent)
    if magnitude < 0.5:
        return "flat"
    direction = "uphill" if grade_percent >= 0 else "downhill"
    return f"{magnitude:.1f}% {direction}"


def format_pace_adjustment(delta_seconds: float, pace_unit: str = "per_km") -> str:
    """Pace delta per unit, e.g. '12s slower per km' / '1:05 faster per mile'."""

    magnitude = abs(delta_seconds)
    if magnitude < 1:
        return "no adjustment"
    direction = "slower" if delta_seconds > 0 else "faster"
    minutes = int(magnitude // 60)
    secs = int(round(magnitude % 60))
    if secs == 60:
        minutes, secs = minutes + 1, 0
    amount = f"{minutes}:{secs:02d}" if minutes > 0 else f"{secs}s"
    unit = "mile" if pace_unit == "per_mile" else "km"
    return f"{amount} {direction} per {unit}"
