"""Fixed-length splits with gain/loss, grade, pace and drift-free elapsed time.

Elapsed times are computed in two passes: raw per-split travel is accumulated
first, then every split's travel component is rescaled so that the last
split lands exactly on the stated total (target time in ``time`` mode, the
rounded raw total otherwise).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Sequence

import numpy as np

from core.elevation_profile import ElevationProfile, elevations_at, segment_gain_loss
from core.pacing_model import (
    DEFAULT_SAMPLING,
    CourseScales,
    Sampling,
    course_scales,
    factors_at,
    sample_steps,
)
from core.plan_config import PlanConfig
from core.stoppage import NO_STOPPAGE, StoppagePlan


@dataclass(frozen=True)
class SplitRow:
    index: int
    start: float
    end: float
    distance_meters: float
    gain_meters: float
    loss_meters: float
    avg_grade_percent: float
    pace_per_unit: float | None
    elapsed_seconds: float | None


def split_boundaries(total_distance: float, split_length: float) -> list[float]:
    """0, L, 2L, ... strictly below the total, then the total itself."""

    if total_distance <= 0 or split_length <= 0:
        return []
    bounds: list[float] = []
    i = 0
    while i * split_length < total_distance:
        bounds.append(i * split_length)
        i += 1
    bounds.append(float(total_distance))
    return bounds


def _mean_factor(
    profile: ElevationProfile,
    plan: PlanConfig,
    start: float,
    end: float,
    total: float,
    sampling: Sampling,
) -> float:
    strategy = plan.strategy_factor(((start + end) / 2.0) / total if total > 0 else 0.5)
    mids, lengths = sample_steps(start, end, sampling.step)
    if mids.size == 0:
        return strategy
    weighted = float(np.sum(factors_at(profile, mids, plan, sampling) * strategy * lengths))
    return weighted / (end - start)


def _back_calculate(
    rows: list[SplitRow],
    raw_travel: list[float],
    plan: PlanConfig,
    stoppage: StoppagePlan,
    total: float,
) -> list[SplitRow]:
    total_stoppage = stoppage.up_to(total)
    raw_travel_last = raw_travel[-1]
    raw_elapsed_last = raw_travel_last + total_stoppage
    target = plan.target_time_seconds
    target_total = float(target) if target is not None else float(round(raw_elapsed_last))

    desired_travel = max(0.0, target_total - total_stoppage)
    scale = desired_travel / raw_travel_last if raw_travel_last > 0 else 1.0

    # A target below the total stoppage leaves no travel; capping keeps the
    # sequence non-decreasing up to the pinned last row.
    out = [
        replace(row, elapsed_seconds=min(travel * scale + stoppage.up_to(row.end), target_total))
        for row, travel in zip(rows, raw_travel)
    ]
    out[-1] = replace(out[-1], elapsed_seconds=target_total)
    return out


def compute_splits(
    profile: ElevationProfile,
    plan: PlanConfig,
    stoppage: StoppagePlan = NO_STOPPAGE,
    sampling: Sampling = DEFAULT_SAMPLING,
    *,
    scales: CourseScales | None = None,
) -> list[SplitRow]:
    """Partition the course into 1 km / 1 mile splits (by ``plan.pace_unit``).

    Gain/loss/grade are always filled; pace and elapsed time are None when no
    base pace can be derived from the plan.
    """

    total = profile.total_distance
    bounds = split_boundaries(total, plan.unit_meters)
    if profile.is_empty or not bounds:
        return []

    if scales is None:
        scales = course_scales(profile, plan, stoppage, sampling)
    base = scales.base_pace_per_meter
    pace_scale = scales.normalization_scale * scales.time_scale
    unit = plan.unit_meters
    if base is not None:
        base_per_unit = float(plan.pace) if plan.has_valid_pace else base * unit

    rows: list[SplitRow] = []
    raw_travel: list[float] = []
    cumulative_travel = 0.0
    elevations = elevations_at(profile, bounds)
    for index, (start, end) in enumerate(zip(bounds[:-1], bounds[1:]), start=1):
        distance = end - start
        gain, loss = segment_gain_loss(profile, start, end)
        net = float(elevations[index] - elevations[index - 1])
        avg_grade = net / distance * 100.0 if distance > 0 else 0.0

        pace_per_unit = None
        elapsed = None
        if base is not None:
            factor = _mean_factor(profile, plan, start, end, total, sampling)
            pace_per_unit = base_per_unit * factor * pace_scale
            cumulative_travel += distance * pace_per_unit / unit
            raw_travel.append(cumulative_travel)
            elapsed = cumulative_travel + stoppage.up_to(end)

        rows.append(
            SplitRow(
                index=index,
                start=float(start),
                end=float(end),
                distance_meters=float(distance),
                gain_meters=gain,
                loss_meters=loss,
                avg_grade_percent=avg_grade,
                pace_per_unit=pace_per_unit,
                elapsed_seconds=elapsed,
            )
        )

    if base is None:
        return rows
    return _back_calculate(rows, raw_travel, plan, stoppage, total)


def total_split_distance(rows: Sequence[SplitRow]) -> float:
    return float(sum(r.distance_meters for r in rows))
