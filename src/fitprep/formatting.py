"""
Human-readable formatting of workout summaries.
"""

import math
from typing import List, Optional, Tuple

from fitprep.constants import MISSING_VALUE
from fitprep.models import WorkoutSummary

__all__ = [
    "format_duration",
    "format_distance",
    "format_pace",
    "format_heart_rate",
    "summary_rows",
]


def format_duration(seconds: Optional[float]) -> str:
    """Format seconds as ``"1h 02m 03s"`` or ``"5m 07s"``."""
    if seconds is None:
        return MISSING_VALUE
    total = max(int(math.floor(seconds + 0.5)), 0)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h {minutes:02d}m {secs:02d}s"
    return f"{minutes}m {secs:02d}s"


def format_distance(meters: Optional[float]) -> str:
    """Format meters as kilometers from 1 km upwards."""
    if meters is None:
        return MISSING_VALUE
    if meters >= 1000.0:
        return f"{meters / 1000.0:.2f} km"
    return f"{meters:.0f} m"


def format_pace(speed: Optional[float]) -> str:
    """Format a speed in m/s as a running pace, e.g. ``"5:00 min/km"``.

    Non-positive speeds have no pace and are shown as missing.
    """
    if speed is None or not speed > 0:
        return MISSING_VALUE
    total_minutes = 1000.0 / (speed * 60.0)
    minutes = int(math.floor(total_minutes))
    seconds = int(math.floor((total_minutes - minutes) * 60.0 + 0.5))
    if seconds >= 60:
        minutes += 1
        seconds = 0
    return f"{minutes}:{seconds:02d} min/km"


def format_heart_rate(value: Optional[float]) -> str:
    if value is None or not math.isfinite(value) or value <= 0:
        return MISSING_VALUE
    return f"{math.floor(value + 0.5):.0f} bpm"


def summary_rows(summary: WorkoutSummary) -> List[Tuple[str, str]]:
    """Return (label, value) pairs describing a workout summary."""
    return [
        ("Workout Duration", format_duration(summary.duration_seconds)),
        ("Workout Type", summary.workout_type or "Unknown"),
        ("Workout Distance", format_distance(summary.distance_meters)),
        ("Speed (min)", format_pace(summary.speed_min)),
        ("Speed (mean)", format_pace(summary.speed_mean)),
        ("Speed (max)", format_pace(summary.speed_max)),
        ("Heart Rate (min)", format_heart_rate(summary.heart_rate_min)),
        ("Heart Rate (mean)", format_heart_rate(summary.heart_rate_mean)),
        ("Heart Rate (max)", format_heart_rate(summary.heart_rate_max)),
    ]
