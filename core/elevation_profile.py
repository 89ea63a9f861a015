"""Distance-indexed elevation profile: extraction, interpolation and grade.

Everything here is a pure function of its inputs. An empty profile is a
valid value and every query on it degrades to ``None`` / ``0`` / empty.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

import numpy as np
from gpxpy.geo import haversine_distance

from core.transform_report import TransformReport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ElevationPoint:
    distance: float
    elevation: float
    lat: float
    lng: float


def _readonly(values: list[float]) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class ElevationProfile:
    """Immutable ordered profile plus read-only numpy views of its columns."""

    points: tuple[ElevationPoint, ...] = ()
    distances: np.ndarray = field(init=False, repr=False, compare=False)
    elevations: np.ndarray = field(init=False, repr=False, compare=False)
    lats: np.ndarray = field(init=False, repr=False, compare=False)
    lngs: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        pts = tuple(self.points)
        object.__setattr__(self, "points", pts)
        object.__setattr__(self, "distances", _readonly([p.distance for p in pts]))
        object.__setattr__(self, "elevations", _readonly([p.elevation for p in pts]))
        object.__setattr__(self, "lats", _readonly([p.lat for p in pts]))
        object.__setattr__(self, "lngs", _readonly([p.lng for p in pts]))

    def __len__(self) -> int:
        return len(self.points)

    @property
    def is_empty(self) -> bool:
        return not self.points

    @property
    def start_distance(self) -> float:
        return self.points[0].distance if self.points else 0.0

    @property
    def total_distance(self) -> float:
        return self.points[-1].distance if self.points else 0.0


EMPTY_PROFILE = ElevationProfile()


def _as_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        out = float(value)
    except (TypeError, ValueError):
        return None
    return out if math.isfinite(out) else None


def _parse_coordinate(coord: Any) -> tuple[float, float, float] | None:
    """Return (lat, lng, elevation) or None when the coordinate is unusable."""

    try:
        if len(coord) < 2:
            return None
        lat = _as_float(coord[0])
        lng = _as_float(coord[1])
        elevation = _as_float(coord[2]) if len(coord) >= 3 else None
    except (TypeError, KeyError, IndexError):
        return None
    if lat is None or lng is None:
        return None
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
        return None
    return lat, lng, elevation if elevation is not None else 0.0


def extract_elevation_profile(
    geometries: Iterable[Sequence[Any]] | None,
    report: TransformReport | None = None,
) -> ElevationProfile:
    """Build a profile from route geometries given as (lat, lng[, elevation]) sequences.

    Geometries are concatenated in input order and the haversine distance is
    accumulated across geometry boundaries. Coordinates without elevation get
    0 m. Unusable coordinates are skipped; malformed input yields an empty
    profile.
    """

    if geometries is None:
        return EMPTY_PROFILE

    raw: list[Any] = []
    try:
        for geometry in geometries:
            raw.extend(list(geometry))
    except TypeError:
        logger.warning("route geometry is not a sequence of coordinates")
        return EMPTY_PROFILE

    parsed = [_parse_coordinate(c) for c in raw]
    valid = [c for c in parsed if c is not None]
    if len(valid) < len(raw):
        logger.warning("skipped %d invalid coordinates out of %d", len(raw) - len(valid), len(raw))
    if report is not None:
        report.add(
            "profile:valid_coordinates",
            points_in=len(raw),
            points_out=len(valid),
            reason="lat/lng missing, non-numeric or out of range",
        )

    points: list[ElevationPoint] = []
    cumulative = 0.0
    prev: tuple[float, float, float] | None = None
    for lat, lng, elevation in valid:
        if prev is not None:
            step = haversine_distance(prev[0], prev[1], lat, lng)
            if math.isfinite(step) and step >= 0:
                cumulative += step
        points.append(ElevationPoint(distance=cumulative, elevation=elevation, lat=lat, lng=lng))
        prev = (lat, lng, elevation)

    if report is not None:
        zero_length = sum(1 for a, b in zip(points, points[1:]) if b.distance == a.distance)
        report.add(
            "profile:distance_index",
            points_in=len(valid),
            points_out=len(points),
            reason="cumulative haversine distance",
            details={"total_distance_m": cumulative, "zero_length_segments": zero_length},
        )
    return ElevationProfile(points=tuple(points))


def build_profile(points: Iterable[ElevationPoint]) -> ElevationProfile:
    """Profile from already distance-indexed points (sorted by distance)."""

    ordered = sorted(points, key=lambda p: p.distance)
    return ElevationProfile(points=tuple(ordered))


def has_elevation_samples(geometries: Iterable[Sequence[Any]]) -> bool:
    for geometry in geometries:
        for coord in geometry:
            try:
                if len(coord) >= 3 and _as_float(coord[2]) is not None:
                    return True
            except (TypeError, KeyError, IndexError):
                continue
    return False


def interpolate(profile: ElevationProfile, distance: float) -> ElevationPoint | None:
    """Point at ``distance`` along the route, linearly interpolated.

    Queries before the first / after the last point return those points.
    At a vertex distance the vertex values are returned unchanged.
    """

    if profile.is_empty:
        return None
    d = float(distance)
    if math.isnan(d):
        return None
    first = profile.points[0]
    last = profile.points[-1]
    if d <= first.distance:
        return first
    if d >= last.distance:
        return last

    hi = int(np.searchsorted(profile.distances, d, side="right"))
    lo = hi - 1
    a = profile.points[lo]
    b = profile.points[hi]
    if d == a.distance:
        return a
    ratio = (d - a.distance) / (b.distance - a.distance)
    return ElevationPoint(
        distance=d,
        elevation=a.elevation + ratio * (b.elevation - a.elevation),
        lat=a.lat + ratio * (b.lat - a.lat),
        lng=a.lng + ratio * (b.lng - a.lng),
    )


def elevations_at(profile: ElevationProfile, distances: np.ndarray | Sequence[float]) -> np.ndarray:
    query = np.asarray(distances, dtype=float)
    if profile.is_empty:
        return np.full(query.shape, np.nan)
    return np.interp(query, profile.distances, profile.elevations)


def grades_at(
    profile: ElevationProfile,
    distances: np.ndarray | Sequence[float],
    window_meters: float,
) -> np.ndarray:
    """Windowed grade (%) at each distance: rise over ``window_meters``.

    Window ends are clamped to the profile extent; a zero effective span
    gives 0.
    """

    query = np.asarray(distances, dtype=float)
    window = float(window_meters)
    if len(profile) < 2 or not math.isfinite(window) or window <= 0:
        return np.zeros(query.shape)

    lo = profile.start_distance
    hi = profile.total_distance
    start = np.clip(query - window / 2.0, lo, hi)
    end = np.clip(query + window / 2.0, lo, hi)
    rise = elevations_at(profile, end) - elevations_at(profile, start)
    grade = rise / window * 100.0
    return np.where(end - start > 0, grade, 0.0)


def grade_at(profile: ElevationProfile, distance: float, window_meters: float) -> float:
    return float(grades_at(profile, [distance], window_meters)[0])


def segment_gain_loss(profile: ElevationProfile, start: float, end: float) -> tuple[float, float]:
    """Elevation gain and loss (both >= 0) between two distances.

    Uses the interpolated endpoints plus every vertex strictly inside.
    """

    if profile.is_empty or end <= start:
        return 0.0, 0.0
    inside = (profile.distances > start) & (profile.distances < end)
    ends = elevations_at(profile, [start, end])
    elev = np.concatenate(([ends[0]], profile.elevations[inside], [ends[1]]))
    deltas = np.diff(elev)
    gain = float(deltas[deltas > 0].sum())
    loss = float(-deltas[deltas < 0].sum())
    return gain, loss


def profile_stats(profile: ElevationProfile) -> dict[str, float]:
    if profile.is_empty:
        return {
            "min_elevation_m": 0.0,
            "max_elevation_m": 0.0,
            "total_distance_m": 0.0,
            "elevation_gain_m": 0.0,
            "elevation_loss_m": 0.0,
        }
    deltas = np.diff(profile.elevations)
    return {
        "min_elevation_m": float(profile.elevations.min()),
        "max_elevation_m": float(profile.elevations.max()),
        "total_distance_m": float(profile.total_distance),
        "elevation_gain_m": float(deltas[deltas > 0].sum()),
        "elevation_loss_m": float(-deltas[deltas < 0].sum()),
    }
