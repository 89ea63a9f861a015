"""Legs between consecutive waypoints and the planned time of arrival at each."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from core.elevation_profile import ElevationProfile, elevations_at, segment_gain_loss
from core.pacing_model import (
    DEFAULT_SAMPLING,
    CourseScales,
    Sampling,
    course_scales,
    cumulative_equivalent,
    factors_at,
    normalization_scale,
    sample_steps,
)
from core.plan_config import PlanConfig
from core.stoppage import NO_STOPPAGE, StoppagePlan, Waypoint


@dataclass(frozen=True)
class WaypointSegment:
    from_waypoint: str
    to_waypoint: str
    start: float
    end: float
    distance: float
    elevation_gain: float
    elevation_loss: float
    average_grade: float


@dataclass(frozen=True)
class SegmentPacing:
    average_grade: float
    adjustment_factor: float
    base_pace: float
    adjusted_pace: float
    pace_delta: float
    estimated_seconds: float


def sorted_waypoints(waypoints: Sequence[Waypoint]) -> list[Waypoint]:
    return sorted(waypoints, key=lambda w: w.order)


def compute_waypoint_segments(
    waypoints: Sequence[Waypoint],
    profile: ElevationProfile,
) -> list[WaypointSegment]:
    ordered = sorted_waypoints(waypoints)
    if len(ordered) < 2:
        return []

    segments = []
    for a, b in zip(ordered, ordered[1:]):
        start = min(a.distance, b.distance)
        end = max(a.distance, b.distance)
        distance = end - start
        gain, loss = segment_gain_loss(profile, start, end)
        if profile.is_empty or distance <= 0:
            grade = 0.0
        else:
            elev = elevations_at(profile, [start, end])
            grade = float(elev[1] - elev[0]) / distance * 100.0
        segments.append(
            WaypointSegment(
                from_waypoint=a.id,
                to_waypoint=b.id,
                start=start,
                end=end,
                distance=distance,
                elevation_gain=gain,
                elevation_loss=loss,
                average_grade=grade,
            )
        )
    return segments


def _leg_factor(
    profile: ElevationProfile,
    plan: PlanConfig,
    start: float,
    end: float,
    sampling: Sampling,
) -> float:
    mids, lengths = sample_steps(start, end, sampling.step)
    if mids.size == 0:
        return 1.0
    return float(np.sum(factors_at(profile, mids, plan, sampling) * lengths)) / (end - start)


def segment_pacing(
    segment: WaypointSegment,
    profile: ElevationProfile,
    plan: PlanConfig,
    sampling: Sampling = DEFAULT_SAMPLING,
) -> SegmentPacing | None:
    """Normalized grade-adjusted pace over one leg, in the plan's pace unit."""

    if not plan.has_valid_pace:
        return None
    factor = _leg_factor(profile, plan, segment.start, segment.end, sampling)
    adjusted = float(plan.pace) * factor * normalization_scale(profile, plan, sampling)
    return SegmentPacing(
        average_grade=segment.average_grade,
        adjustment_factor=factor,
        base_pace=float(plan.pace),
        adjusted_pace=adjusted,
        pace_delta=adjusted - float(plan.pace),
        estimated_seconds=segment.distance * adjusted / plan.unit_meters,
    )


def compute_waypoint_elapsed_times(
    profile: ElevationProfile,
    plan: PlanConfig,
    stoppage: StoppagePlan = NO_STOPPAGE,
    sampling: Sampling = DEFAULT_SAMPLING,
    *,
    scales: CourseScales | None = None,
) -> dict[str, int]:
    """Whole-second elapsed time at each waypoint, its own stoppage included.

    Travel follows grade, pacing strategy and the course scales. In time mode
    travel is rescaled so that the finish lands on the target, as the splits do.
    """

    ordered = sorted_waypoints(stoppage.waypoints)
    if not ordered:
        return {}
    if scales is None:
        scales = course_scales(profile, plan, stoppage, sampling)
    base = scales.base_pace_per_meter
    if base is None:
        return {}

    total = profile.total_distance
    pace_scale = base * scales.normalization_scale * scales.time_scale
    distances = [wp.distance for wp in ordered] + [total]
    travel = cumulative_equivalent(profile, plan, distances, sampling, with_strategy=True) * pace_scale

    target = plan.target_time_seconds
    if target is not None and travel[-1] > 0:
        desired = max(0.0, target - stoppage.up_to(total))
        travel = travel * (desired / travel[-1])

    result: dict[str, int] = {}
    stopped = 0.0
    for wp, travel_s in zip(ordered, travel):
        stopped += stoppage.at(wp)
        elapsed = float(travel_s) + stopped
        if target is not None:
            elapsed = min(elapsed, target)
        result[wp.id] = int(round(elapsed))
    return result
