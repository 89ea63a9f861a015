"""Course-wide pace calibration and the continuous predicted-pace curve.

Two scale factors are solved over the whole course:

- the normalization scale (``normalized`` mode) makes the distance-weighted
  mean of the grade-adjusted pace equal the plan pace;
- the time scale (``time`` mode) makes travel time plus stoppage equal the
  target time before any split discretization.

Both integrate the grade factor at the midpoint of fixed sampling steps.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from core.constants import DEFAULT_GRADE_WINDOW_M, DEFAULT_SAMPLE_STEP_M, MIN_SAMPLE_STEP_M
from core.elevation_profile import ElevationProfile, grades_at
from core.grade_table import grade_factor
from core.plan_config import PlanConfig
from core.stoppage import NO_STOPPAGE, StoppagePlan

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Sampling:
    sample_step_meters: float = DEFAULT_SAMPLE_STEP_M
    grade_window_meters: float = DEFAULT_GRADE_WINDOW_M

    @property
    def step(self) -> float:
        """Effective integration step: 0/unset means default, never below 1 m."""

        value = self.sample_step_meters
        if value is None or value == 0 or not math.isfinite(value):
            return DEFAULT_SAMPLE_STEP_M
        return max(MIN_SAMPLE_STEP_M, float(value))


DEFAULT_SAMPLING = Sampling()


@dataclass(frozen=True)
class PacePoint:
    distance: float
    predicted_pace: float
    grade_percent: float


@dataclass(frozen=True)
class CourseScales:
    base_pace_per_meter: float | None
    normalization_scale: float
    time_scale: float


def sample_steps(start: float, end: float, step: float) -> tuple[np.ndarray, np.ndarray]:
    """Midpoints and lengths of consecutive ``step``-long pieces of [start, end)."""

    span = end - start
    if span <= 0:
        return np.zeros(0), np.zeros(0)
    n = max(1, int(math.ceil(span / step)))
    edges = np.minimum(start + np.arange(n + 1, dtype=float) * step, end)
    edges[-1] = end
    lengths = np.diff(edges)
    mids = (edges[:-1] + edges[1:]) / 2.0
    return mids, lengths


def factors_at(
    profile: ElevationProfile,
    distances: np.ndarray,
    plan: PlanConfig,
    sampling: Sampling = DEFAULT_SAMPLING,
) -> np.ndarray:
    """Grade factor at each distance (all ones when grade adjustment is off)."""

    if not plan.grade_adjustment:
        return np.ones(np.shape(distances))
    grades = grades_at(profile, distances, sampling.grade_window_meters)
    return np.asarray(grade_factor(grades), dtype=float)


def equivalent_distance(
    profile: ElevationProfile,
    plan: PlanConfig,
    start: float,
    end: float,
    sampling: Sampling = DEFAULT_SAMPLING,
) -> float:
    """Integral of the grade factor over [start, end) (meters of flat-equivalent effort)."""

    mids, lengths = sample_steps(start, end, sampling.step)
    if mids.size == 0:
        return 0.0
    return float(np.sum(factors_at(profile, mids, plan, sampling) * lengths))


def cumulative_equivalent(
    profile: ElevationProfile,
    plan: PlanConfig,
    distances: Sequence[float] | np.ndarray,
    sampling: Sampling = DEFAULT_SAMPLING,
    *,
    with_strategy: bool = False,
) -> np.ndarray:
    """Equivalent distance from the start to each query distance.

    Integrates on the course-wide step grid, so the value at the finish is
    the same integral the scale factors are solved against.
    """

    query = np.asarray(distances, dtype=float)
    total = profile.total_distance
    mids, lengths = sample_steps(0.0, total, sampling.step)
    if mids.size == 0:
        return np.zeros(query.shape)

    weights = factors_at(profile, mids, plan, sampling)
    if with_strategy:
        weights = weights * np.array([plan.strategy_factor(p) for p in mids / total])
    starts = mids - lengths / 2.0
    cum = np.concatenate(([0.0], np.cumsum(weights * lengths)))

    q = np.clip(query, 0.0, total)
    idx = np.clip(np.searchsorted(starts, q, side="right") - 1, 0, mids.size - 1)
    return cum[idx] + weights[idx] * (q - starts[idx])


def normalization_scale(
    profile: ElevationProfile,
    plan: PlanConfig,
    sampling: Sampling = DEFAULT_SAMPLING,
) -> float:
    if plan.pace_mode != "normalized" or not plan.grade_adjustment or len(profile) < 2:
        return 1.0
    total = profile.total_distance
    equivalent = equivalent_distance(profile, plan, 0.0, total, sampling)
    if equivalent <= 0:
        return 1.0
    return total / equivalent


def base_pace_per_meter(
    profile: ElevationProfile,
    plan: PlanConfig,
    stoppage: StoppagePlan = NO_STOPPAGE,
) -> float | None:
    """Plan pace in s/m; in time mode without a pace, the flat pace meeting the target."""

    if plan.has_valid_pace:
        return plan.base_pace_per_meter
    target = plan.target_time_seconds
    total = profile.total_distance
    if target is None or total <= 0:
        return None
    travel = target - stoppage.up_to(total)
    if travel <= 0:
        return None
    return travel / total


def time_scale(
    profile: ElevationProfile,
    plan: PlanConfig,
    stoppage: StoppagePlan = NO_STOPPAGE,
    sampling: Sampling = DEFAULT_SAMPLING,
    *,
    norm_scale: float | None = None,
) -> float:
    target = plan.target_time_seconds
    base = base_pace_per_meter(profile, plan, stoppage)
    if target is None or base is None or profile.is_empty:
        return 1.0
    if norm_scale is None:
        norm_scale = normalization_scale(profile, plan, sampling)

    total = profile.total_distance
    travel_base = base * norm_scale * equivalent_distance(profile, plan, 0.0, total, sampling)
    if travel_base <= 0:
        return 1.0
    desired_travel = max(0.0, target - stoppage.up_to(total))
    return desired_travel / travel_base


def course_scales(
    profile: ElevationProfile,
    plan: PlanConfig,
    stoppage: StoppagePlan = NO_STOPPAGE,
    sampling: Sampling = DEFAULT_SAMPLING,
) -> CourseScales:
    norm = normalization_scale(profile, plan, sampling)
    scales = CourseScales(
        base_pace_per_meter=base_pace_per_meter(profile, plan, stoppage),
        normalization_scale=norm,
        time_scale=time_scale(profile, plan, stoppage, sampling, norm_scale=norm),
    )
    logger.debug(
        "course scales mode=%s normalization=%.6f time=%.6f",
        plan.pace_mode,
        scales.normalization_scale,
        scales.time_scale,
    )
    return scales


def actual_pace_series(
    profile: ElevationProfile,
    plan: PlanConfig,
    distances: Sequence[float] | np.ndarray | None = None,
    stoppage: StoppagePlan = NO_STOPPAGE,
    sampling: Sampling = DEFAULT_SAMPLING,
) -> list[PacePoint]:
    """Predicted pace (s per plan unit) along the course for charting.

    ``pace * factor(grade) * normalization_scale``. The time scale is not
    applied here: the curve shows local effort, the splits carry the
    schedule.
    """

    base = base_pace_per_meter(profile, plan, stoppage)
    if profile.is_empty or base is None:
        return []
    query = profile.distances if distances is None else np.asarray(distances, dtype=float)
    query = np.clip(query, 0.0, profile.total_distance)
    norm = normalization_scale(profile, plan, sampling)

    grades = grades_at(profile, query, sampling.grade_window_meters)
    factors = factors_at(profile, query, plan, sampling)
    base_per_unit = float(plan.pace) if plan.has_valid_pace else base * plan.unit_meters
    paces = base_per_unit * factors * norm
    return [
        PacePoint(distance=float(d), predicted_pace=float(p), grade_percent=float(g))
        for d, p, g in zip(query, paces, grades)
    ]


def pace_at_distance(
    profile: ElevationProfile,
    plan: PlanConfig,
    distance: float,
    stoppage: StoppagePlan = NO_STOPPAGE,
    sampling: Sampling = DEFAULT_SAMPLING,
) -> PacePoint | None:
    """Hover/tooltip query; the distance is clamped to the course."""

    if distance is None or math.isnan(float(distance)):
        return None
    series = actual_pace_series(profile, plan, [float(distance)], stoppage, sampling)
    return series[0] if series else None


def smooth_pace_series(points: Sequence[PacePoint], window_meters: float) -> list[PacePoint]:
    """Boxcar average of the predicted pace over +/- window/2 in distance space."""

    if not points or window_meters is None or window_meters <= 0:
        return list(points)
    dist = np.array([p.distance for p in points], dtype=float)
    pace = np.array([p.predicted_pace for p in points], dtype=float)
    half = window_meters / 2.0

    order = np.argsort(dist, kind="stable")
    sorted_dist = dist[order]
    csum = np.concatenate(([0.0], np.cumsum(pace[order])))
    lo = np.searchsorted(sorted_dist, dist - half, side="left")
    hi = np.searchsorted(sorted_dist, dist + half, side="right")
    counts = hi - lo
    smoothed = np.where(counts > 0, (csum[hi] - csum[lo]) / np.maximum(counts, 1), pace)
    return [
        PacePoint(distance=p.distance, predicted_pace=float(s), grade_percent=p.grade_percent)
        for p, s in zip(points, smoothed)
    ]


def flat_equivalent_pace(
    profile: ElevationProfile,
    plan: PlanConfig,
    sampling: Sampling = DEFAULT_SAMPLING,
) -> float | None:
    """Plan pace times the distance-weighted average grade factor of the course."""

    if not plan.has_valid_pace:
        return None
    total = profile.total_distance
    if len(profile) < 2 or total <= 0:
        return float(plan.pace)
    average_factor = equivalent_distance(profile, plan, 0.0, total, sampling) / total
    return float(plan.pace) * average_factor
