"""
Workout analytics for decoded FIT records.

Derives duration, distance, speed and heart rate statistics from the
timestamp/distance samples of a recording. Speeds are always computed from
distance deltas, so the results stay the same when the encoded speed fields
are missing or have been removed. Optional moving-average smoothing also
produces per-record overrides that can be written back into the binary file.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from fitprep.constants import SPEED_SMOOTHING_WINDOW
from fitprep.models import DecodedRecord, ProcessingOptions, RecordOverride, WorkoutSummary

__all__ = [
    "DistanceSample",
    "DerivedWorkoutData",
    "collect_distance_samples",
    "compute_distance_based_speeds",
    "compute_time_intervals",
    "smooth_speed_window",
    "reconstruct_distance_series",
    "derive_workout_data",
]


@dataclass(frozen=True)
class DistanceSample:
    """Timestamp and cumulative distance of one data record."""

    record_index: int
    timestamp: float
    distance: float


@dataclass(frozen=True)
class DerivedWorkoutData:
    """Summary metrics plus per-record overrides for the binary rewrite."""

    summary: WorkoutSummary
    overrides: List[RecordOverride] = field(default_factory=list)


def collect_distance_samples(records: Sequence[DecodedRecord]) -> List[DistanceSample]:
    """Collect (record_index, timestamp, distance) for records exposing both fields."""
    samples = []
    for idx, record in enumerate(records):
        timestamp = record.get("timestamp")
        distance = record.get("distance")
        if timestamp is None or distance is None:
            continue
        if timestamp.numeric_value is None or distance.numeric_value is None:
            continue
        samples.append(DistanceSample(idx, timestamp.numeric_value, distance.numeric_value))
    return samples


def compute_time_intervals(samples: Sequence[DistanceSample]) -> np.ndarray:
    """Elapsed seconds between consecutive samples, negative gaps clamped to 0."""
    if len(samples) < 2:
        return np.zeros(0)
    timestamps = np.array([s.timestamp for s in samples], dtype=float)
    return np.maximum(np.diff(timestamps), 0.0)


def compute_distance_based_speeds(samples: Sequence[DistanceSample]) -> np.ndarray:
    """Calculate per-interval speeds (m/s) from distance and time deltas.

    For consecutive samples the speed is ``max(dd, 0) / dt`` when ``dt > 0``
    and 0 otherwise, so pauses and distance resets never yield negative or
    infinite values.

    Args:
        samples: Distance samples in stream order.

    Returns:
        Array with ``len(samples) - 1`` speeds (empty for fewer than 2 samples).
    """
    if len(samples) < 2:
        return np.zeros(0)
    dt = np.diff(np.array([s.timestamp for s in samples], dtype=float))
    dd = np.maximum(np.diff(np.array([s.distance for s in samples], dtype=float)), 0.0)
    speeds = np.zeros_like(dt)
    moving = dt > 0
    speeds[moving] = dd[moving] / dt[moving]
    return speeds


def smooth_speed_window(
    speeds: Sequence[float], window_size: int = SPEED_SMOOTHING_WINDOW
) -> np.ndarray:
    """Smooth a speed series with a centered moving average.

    The window shrinks at the edges of the series instead of padding: sample
    ``i`` averages indices ``[max(0, i - w//2), min(n, i + w//2 + 1))``.

    Args:
        speeds: Interval speeds.
        window_size: Number of samples in the window. 0 returns the series
            unchanged; even sizes behave like the next odd size.

    Returns:
        Smoothed speeds, same length as the input.

    Example:
        >>> smooth_speed_window([1.0, 2.0, 3.0, 4.0, 5.0], 3).tolist()
        [1.5, 2.0, 3.0, 4.0, 4.5]
    """
    values = np.asarray(speeds, dtype=float)
    if window_size == 0 or values.size == 0:
        return values.copy()
    span = 2 * (window_size // 2) + 1
    return pd.Series(values).rolling(span, center=True, min_periods=1).mean().to_numpy()


def reconstruct_distance_series(
    samples: Sequence[DistanceSample],
    speeds: Sequence[float],
    intervals: Sequence[float],
) -> np.ndarray:
    """Rebuild cumulative distance from (smoothed) speeds and time intervals.

    Starts at the first sample's distance and adds ``speed * interval`` for
    each step, never decreasing. If fewer steps than samples are available
    the series is padded with its last value.

    Returns:
        Array with one distance per sample (empty when there are no samples).
    """
    if not samples:
        return np.zeros(0)
    steps = min(len(speeds), len(intervals))
    increments = np.maximum(
        np.asarray(speeds[:steps], dtype=float) * np.asarray(intervals[:steps], dtype=float),
        0.0,
    )
    distances = np.cumsum(np.concatenate(([samples[0].distance], increments)))
    if distances.size < len(samples):
        padding = np.full(len(samples) - distances.size, distances[-1])
        distances = np.concatenate((distances, padding))
    return distances


def _speed_mean(
    samples: Sequence[DistanceSample], distances: np.ndarray, speeds: np.ndarray
) -> Optional[float]:
    if speeds.size:
        return float(speeds.mean())
    if samples and distances.size:
        dt = samples[-1].timestamp - samples[0].timestamp
        dd = float(distances[-1]) - samples[0].distance
        if dt > 0 and dd >= 0:
            return dd / dt
    return None


def _record_overrides(
    record_count: int,
    samples: Sequence[DistanceSample],
    speeds: np.ndarray,
    distances: np.ndarray,
) -> List[RecordOverride]:
    record_speeds: List[Optional[float]] = [None] * record_count
    record_distances: List[Optional[float]] = [None] * record_count

    for sample_idx, sample in enumerate(samples):
        # Interval starting at each sample; the last sample keeps its speed
        if sample_idx < len(speeds):
            record_speeds[sample.record_index] = float(speeds[sample_idx])
        record_distances[sample.record_index] = float(distances[sample_idx])

    return [
        RecordOverride(speed=speed, distance=distance)
        for speed, distance in zip(record_speeds, record_distances)
    ]


def _workout_type(records: Sequence[DecodedRecord]) -> Optional[str]:
    for record in records:
        for f in record.fields:
            if f.name in ("sport", "workout_type") and f.display_value:
                return f.display_value
    return None


def _start_time(records: Sequence[DecodedRecord]) -> Optional[datetime]:
    starts = [
        f.value
        for record in records
        if (f := record.get("timestamp")) is not None and isinstance(f.value, datetime)
    ]
    return min(starts) if starts else None


def derive_workout_data(
    records: Sequence[DecodedRecord], options: Optional[ProcessingOptions] = None
) -> DerivedWorkoutData:
    """Convert decoded records into summary metrics and optional overrides.

    Args:
        records: Decoded data messages in stream order. Only the
            ``timestamp``, ``distance``, ``heart_rate``, ``sport`` and
            ``workout_type`` fields are used.
        options: Processing options. With ``smooth_speed`` the interval speeds
            are smoothed, the distance series is reconstructed from them and
            both are returned as per-record overrides.

    Returns:
        DerivedWorkoutData whose ``overrides`` list has one entry per record.
        Without smoothing every override is empty.
    """
    options = options or ProcessingOptions()

    timestamps = np.array(
        [
            f.numeric_value
            for record in records
            if (f := record.get("timestamp")) is not None and f.numeric_value is not None
        ],
        dtype=float,
    )
    heart_rates = np.array(
        [
            f.numeric_value
            for record in records
            if (f := record.get("heart_rate")) is not None and f.numeric_value is not None
        ],
        dtype=float,
    )
    samples = collect_distance_samples(records)

    speeds = compute_distance_based_speeds(samples)
    if options.smooth_speed:
        speeds = smooth_speed_window(speeds, options.smoothing_window)
        distances = reconstruct_distance_series(samples, speeds, compute_time_intervals(samples))
    else:
        distances = np.array([s.distance for s in samples], dtype=float)

    positive = speeds[speeds > 0]

    summary = WorkoutSummary(
        duration_seconds=float(timestamps.max() - timestamps.min()) if timestamps.size else None,
        workout_type=_workout_type(records),
        distance_meters=float(distances[-1]) if distances.size else None,
        speed_min=float(positive.min()) if positive.size else None,
        speed_mean=_speed_mean(samples, distances, speeds),
        speed_max=float(positive.max()) if positive.size else None,
        heart_rate_min=float(heart_rates.min()) if heart_rates.size else None,
        heart_rate_mean=float(heart_rates.mean()) if heart_rates.size else None,
        heart_rate_max=float(heart_rates.max()) if heart_rates.size else None,
        start_time=_start_time(records),
    )

    if options.smooth_speed and len(samples) >= 2:
        overrides = _record_overrides(len(records), samples, speeds, distances)
    else:
        overrides = [RecordOverride() for _ in records]

    return DerivedWorkoutData(summary=summary, overrides=overrides)
