import logging

from fastapi import APIRouter, HTTPException, Request

from api.routes.course import get_profile_cache, profile_cache_key
from api.schemas import PaceAtRequest, PaceAtResponse, PlanAnalyzeRequest, PlanAnalyzeResponse
from core.elevation_profile import grade_at, interpolate
from core.pacing_model import Sampling, pace_at_distance
from core.plan_config import PlanConfig
from core.stoppage import Waypoint
from services.models import LoadedCourse, PlanInputs
from services.plan_service import (
    analyze_plan,
    build_stoppage_plan,
    load_course_from_geojson,
    load_course_from_geometries,
)
from services.serialization import plan_result_to_dict


router = APIRouter()


def _get_logger(request: Request) -> logging.Logger:
    return request.app.state.logger


def _get_request_id(request: Request) -> str:
    return getattr(getattr(request, "state", None), "request_id", "-")


def _resolve_course(request: Request, payload: PlanAnalyzeRequest) -> LoadedCourse:
    if payload.profile_id:
        course = get_profile_cache(request).get(profile_cache_key(payload.profile_id))
        if course is None:
            raise HTTPException(status_code=404, detail="Profile not found (upload the GPX again)")
    elif payload.geojson is not None:
        course = load_course_from_geojson(payload.geojson)
    elif payload.geometries is not None:
        course = load_course_from_geometries(payload.geometries)
    else:
        raise HTTPException(status_code=400, detail="One of profile_id, geometries or geojson is required")
    if course.profile.is_empty:
        raise HTTPException(status_code=400, detail="Route geometry has no usable coordinates")
    return course


def _build_inputs(request: Request, payload: PlanAnalyzeRequest) -> PlanInputs:
    course = _resolve_course(request, payload)
    p = payload.plan
    try:
        plan = PlanConfig.from_fields(
            pace=p.pace,
            pace_unit=p.pace_unit,
            pace_mode=p.pace_mode,
            target_time_seconds=p.target_time_seconds,
            pacing_strategy=p.pacing_strategy,
            pacing_linear_percent=p.pacing_linear_percent,
            grade_adjustment=p.grade_adjustment,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    settings = request.app.state.settings
    sampling_in = payload.sampling
    sampling = Sampling(
        sample_step_meters=(
            sampling_in.sample_step_meters
            if sampling_in is not None and sampling_in.sample_step_meters is not None
            else settings.sample_step_m
        ),
        grade_window_meters=(
            sampling_in.grade_window_meters
            if sampling_in is not None and sampling_in.grade_window_meters is not None
            else settings.grade_window_m
        ),
    )
    stoppage = build_stoppage_plan(
        [Waypoint(id=w.id, distance=w.distance, order=w.order) for w in payload.waypoints],
        payload.stoppage_overrides,
        payload.default_stoppage_seconds,
    )
    return PlanInputs(
        profile=course.profile,
        plan=plan,
        stoppage=stoppage,
        sampling=sampling,
        smoothing_meters=payload.smoothing_meters,
    )


@router.post("/plan/analyze", response_model=PlanAnalyzeResponse)
async def analyze_plan_endpoint(request: Request, payload: PlanAnalyzeRequest):
    """Splits, courbe d'allure et temps de passage pour un plan"""
    inputs = _build_inputs(request, payload)
    result = analyze_plan(inputs)
    _get_logger(request).info(
        "plan_analyze_ok",
        extra={"request_id": _get_request_id(request), "splits": len(result.splits)},
    )
    return PlanAnalyzeResponse(**plan_result_to_dict(result, pace_unit=inputs.plan.pace_unit))


@router.post("/plan/pace-at", response_model=PaceAtResponse)
async def pace_at_endpoint(request: Request, payload: PaceAtRequest):
    """Allure prevue et pente a une distance donnee (survol du graphique)"""
    inputs = _build_inputs(request, payload)
    profile = inputs.profile
    distance = min(max(payload.distance_m, 0.0), profile.total_distance)

    location = interpolate(profile, distance)
    point = pace_at_distance(profile, inputs.plan, distance, inputs.stoppage, inputs.sampling)
    grade = grade_at(profile, distance, inputs.sampling.grade_window_meters)
    return PaceAtResponse(
        distance=distance,
        predicted_pace=point.predicted_pace if point is not None else None,
        grade_percent=grade,
        lat=location.lat if location is not None else None,
        lng=location.lng if location is not None else None,
        elevation=location.elevation if location is not None else None,
    )
