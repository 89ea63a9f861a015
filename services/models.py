from __future__ import annotations

from dataclasses import dataclass

from core.constants import DEFAULT_PACE_SMOOTHING_M
from core.elevation_profile import ElevationProfile
from core.pacing_model import CourseScales, PacePoint, Sampling, DEFAULT_SAMPLING
from core.plan_config import PlanConfig
from core.splits import SplitRow
from core.stoppage import NO_STOPPAGE, StoppagePlan
from core.transform_report import TransformReport
from core.waypoint_segments import SegmentPacing, WaypointSegment


@dataclass(frozen=True)
class LoadedCourse:
    name: str
    profile: ElevationProfile
    report: TransformReport
    geometry_count: int
    has_elevation: bool


@dataclass(frozen=True)
class PlanInputs:
    """Everything a recompute needs, passed by value."""

    profile: ElevationProfile
    plan: PlanConfig
    stoppage: StoppagePlan = NO_STOPPAGE
    sampling: Sampling = DEFAULT_SAMPLING
    smoothing_meters: float = DEFAULT_PACE_SMOOTHING_M


@dataclass(frozen=True)
class FinishComparison:
    flat_finish_seconds: float
    adjusted_finish_seconds: float
    difference_seconds: float
    average_factor: float


@dataclass(frozen=True)
class PlanSummary:
    total_distance_m: float
    elevation_gain_m: float
    elevation_loss_m: float
    total_stoppage_s: float
    finish_seconds: float | None
    flat_equivalent_pace: float | None
    normalization_scale: float
    time_scale: float


@dataclass(frozen=True)
class SegmentResult:
    segment: WaypointSegment
    pacing: SegmentPacing | None


@dataclass(frozen=True)
class PlanResult:
    scales: CourseScales
    splits: list[SplitRow]
    series: list[PacePoint]
    segments: list[SegmentResult]
    waypoint_times: dict[str, int]
    summary: PlanSummary
    comparison: FinishComparison | None
