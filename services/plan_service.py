from __future__ import annotations

"""Orchestration du plan d'allure: point d'entree unique de recalcul.

L'appelant rappelle ``analyze_plan`` a chaque changement de profil, de plan,
de points de passage ou d'arrets. Rien n'est memorise entre deux appels.
"""

import logging
from typing import Any, Iterable, Mapping, Sequence

from core.constants import DEFAULT_STOPPAGE_S
from core.elevation_profile import (
    ElevationProfile,
    extract_elevation_profile,
    has_elevation_samples,
    profile_stats,
)
from core.gpx_loader import coordinates_from_geojson, parse_gpx_bytes, route_geometries_from_gpx
from core.pacing_model import (
    DEFAULT_SAMPLING,
    CourseScales,
    Sampling,
    actual_pace_series,
    course_scales,
    equivalent_distance,
    flat_equivalent_pace,
    smooth_pace_series,
)
from core.plan_config import PlanConfig
from core.splits import SplitRow, compute_splits
from core.stoppage import NO_STOPPAGE, StoppagePlan, Waypoint
from core.transform_report import TransformReport
from core.waypoint_segments import (
    compute_waypoint_elapsed_times,
    compute_waypoint_segments,
    segment_pacing,
)
from services.models import (
    FinishComparison,
    LoadedCourse,
    PlanInputs,
    PlanResult,
    PlanSummary,
    SegmentResult,
)

logger = logging.getLogger(__name__)


def load_course_from_geometries(geometries: Sequence[Sequence[Any]], name: str = "course") -> LoadedCourse:
    report = TransformReport()
    profile = extract_elevation_profile(geometries, report=report)
    return LoadedCourse(
        name=name,
        profile=profile,
        report=report,
        geometry_count=len(geometries),
        has_elevation=has_elevation_samples(geometries),
    )


def load_course_from_gpx_bytes(data: bytes, name: str = "course.gpx") -> LoadedCourse:
    """GPX -> profil. Les erreurs de parsing gpxpy remontent a l'appelant."""

    gpx = parse_gpx_bytes(data)
    geometries = route_geometries_from_gpx(gpx)
    course = load_course_from_geometries(geometries, name=name)
    logger.info(
        "gpx_loaded name=%s geometries=%d points=%d distance_m=%.1f",
        name,
        course.geometry_count,
        len(course.profile),
        course.profile.total_distance,
    )
    return course


def load_course_from_geojson(feature_collection: Mapping[str, Any], name: str = "course") -> LoadedCourse:
    return load_course_from_geometries(coordinates_from_geojson(feature_collection), name=name)


def build_stoppage_plan(
    waypoints: Iterable[Waypoint] | None,
    overrides: Mapping[str, float] | None = None,
    default_seconds: float = DEFAULT_STOPPAGE_S,
) -> StoppagePlan:
    return StoppagePlan(
        waypoints=tuple(waypoints or ()),
        overrides=dict(overrides or {}),
        default_seconds=float(default_seconds or 0.0),
    )


def finish_comparison(
    profile: ElevationProfile,
    plan: PlanConfig,
    stoppage: StoppagePlan = NO_STOPPAGE,
    sampling: Sampling = DEFAULT_SAMPLING,
    *,
    splits: Sequence[SplitRow] | None = None,
    scales: CourseScales | None = None,
) -> FinishComparison | None:
    """Arrivee a allure constante vs arrivee ajustee a la pente (arrets inclus)."""

    total = profile.total_distance
    if profile.is_empty or total <= 0:
        return None
    if scales is None:
        scales = course_scales(profile, plan, stoppage, sampling)
    base = scales.base_pace_per_meter
    if base is None:
        return None
    if splits is None:
        splits = compute_splits(profile, plan, stoppage, sampling, scales=scales)

    total_stoppage = stoppage.up_to(total)
    flat_finish = base * total + total_stoppage
    adjusted_finish = splits[-1].elapsed_seconds if splits else flat_finish
    return FinishComparison(
        flat_finish_seconds=flat_finish,
        adjusted_finish_seconds=float(adjusted_finish),
        difference_seconds=float(adjusted_finish) - flat_finish,
        average_factor=equivalent_distance(profile, plan, 0.0, total, sampling) / total,
    )


def analyze_plan(inputs: PlanInputs, *, series_distances: Sequence[float] | None = None) -> PlanResult:
    profile, plan, stoppage, sampling = inputs.profile, inputs.plan, inputs.stoppage, inputs.sampling

    scales = course_scales(profile, plan, stoppage, sampling)
    splits = compute_splits(profile, plan, stoppage, sampling, scales=scales)
    series = actual_pace_series(profile, plan, series_distances, stoppage, sampling)
    if inputs.smoothing_meters > 0:
        series = smooth_pace_series(series, inputs.smoothing_meters)

    segments = [
        SegmentResult(segment=seg, pacing=segment_pacing(seg, profile, plan, sampling))
        for seg in compute_waypoint_segments(stoppage.waypoints, profile)
    ]
    waypoint_times = compute_waypoint_elapsed_times(profile, plan, stoppage, sampling, scales=scales)

    stats = profile_stats(profile)
    summary = PlanSummary(
        total_distance_m=stats["total_distance_m"],
        elevation_gain_m=stats["elevation_gain_m"],
        elevation_loss_m=stats["elevation_loss_m"],
        total_stoppage_s=stoppage.up_to(profile.total_distance),
        finish_seconds=splits[-1].elapsed_seconds if splits else None,
        flat_equivalent_pace=flat_equivalent_pace(profile, plan, sampling),
        normalization_scale=scales.normalization_scale,
        time_scale=scales.time_scale,
    )
    comparison = finish_comparison(profile, plan, stoppage, sampling, splits=splits, scales=scales)

    logger.info(
        "plan_analyzed mode=%s unit=%s splits=%d finish_s=%s",
        plan.pace_mode,
        plan.pace_unit,
        len(splits),
        summary.finish_seconds,
    )
    return PlanResult(
        scales=scales,
        splits=splits,
        series=series,
        segments=segments,
        waypoint_times=waypoint_times,
        summary=summary,
        comparison=comparison,
    )
