from pathlib import Path

import logging

import gpxpy
from fastapi import APIRouter, UploadFile, File, Form, HTTPException, Request
from typing import Optional

from api.schemas import CourseProfileResponse, ProfilePoint, TransformStepModel
from core.elevation_profile import profile_stats
from services.cache import InMemoryCache, make_key, sha256_bytes
from services.plan_service import load_course_from_gpx_bytes


router = APIRouter()

ALLOWED_EXTENSIONS = {".gpx"}


def _get_logger(request: Request) -> logging.Logger:
    return request.app.state.logger


def _get_request_id(request: Request) -> str:
    return getattr(getattr(request, "state", None), "request_id", "-")


def get_profile_cache(request: Request) -> InMemoryCache:
    return request.app.state.profile_cache


def profile_cache_key(profile_id: str) -> str:
    return make_key("profile", profile_id)


@router.post("/course/profile", response_model=CourseProfileResponse)
async def load_course_profile(
    request: Request,
    file: UploadFile = File(...),
    name: Optional[str] = Form(None),
):
    """Charge un GPX et retourne son profil d'elevation indexe en distance"""
    logger = _get_logger(request)
    request_id = _get_request_id(request)
    settings = request.app.state.settings

    if not file.filename:
        raise HTTPException(status_code=400, detail="Missing filename")
    if Path(file.filename).suffix.lower() not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid file extension. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}",
        )

    file_bytes = await file.read()
    logger.info(
        "upload_file_read",
        extra={
            "request_id": request_id,
            "upload_filename": file.filename,
            "size_bytes": len(file_bytes),
        },
    )
    if len(file_bytes) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Max size: {settings.max_upload_bytes / (1024 * 1024):.1f}MB",
        )

    profile_id = sha256_bytes(file_bytes)
    cache = get_profile_cache(request)
    key = profile_cache_key(profile_id)
    course = cache.get(key)
    if course is None:
        try:
            course = load_course_from_gpx_bytes(file_bytes, name=name or file.filename)
        except gpxpy.gpx.GPXException as e:
            logger.warning("upload_parse_failed", extra={"request_id": request_id})
            raise HTTPException(status_code=400, detail=f"Unreadable GPX: {e}")
        # Only usable courses are cached.
        if course.profile.is_empty:
            raise HTTPException(status_code=400, detail="GPX has no track or route points")
        cache.set(key, course)

    profile = course.profile
    return CourseProfileResponse(
        id=profile_id,
        name=course.name,
        total_distance_m=profile.total_distance,
        has_elevation=course.has_elevation,
        stats=profile_stats(profile),
        points=[
            ProfilePoint(distance=p.distance, elevation=p.elevation, lat=p.lat, lng=p.lng)
            for p in profile.points
        ],
        transform=[
            TransformStepModel(
                name=s.name,
                points_in=s.points_in,
                points_out=s.points_out,
                reason=s.reason,
                details=s.details,
            )
            for s in course.report.steps
        ],
    )
