from __future__ import annotations

import logging
from typing import IO, Any, Iterable, Mapping

import gpxpy

logger = logging.getLogger(__name__)

Coordinate = tuple[float, float, float | None]
RouteGeometry = list[Coordinate]


def _decode_gpx_bytes(content: bytes) -> str:
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError:
        try:
            return content.decode("latin-1")
        except UnicodeDecodeError:
            return content.decode("utf-8", errors="replace")


def parse_gpx_bytes(content: bytes | bytearray | str) -> gpxpy.gpx.GPX:
    if isinstance(content, (bytes, bytearray)):
        text = _decode_gpx_bytes(bytes(content))
    else:
        text = str(content)
    return gpxpy.parse(text)


def load_gpx(file: IO[bytes]) -> gpxpy.gpx.GPX:
    """
    Lit un fichier GPX (file-like, UploadFile.file, ...) et retourne l'objet GPX.
    """
    return parse_gpx_bytes(file.read())


def route_geometries_from_gpx(gpx: gpxpy.gpx.GPX) -> list[RouteGeometry]:
    """
    Une geometrie par segment de trace, puis une par route (<rte>).

    Chaque coordonnee est (lat, lon, elevation|None).
    """
    geometries: list[RouteGeometry] = []
    for track in gpx.tracks:
        for segment in track.segments:
            coords = [(p.latitude, p.longitude, p.elevation) for p in segment.points]
            if coords:
                geometries.append(coords)
    for route in gpx.routes:
        coords = [(p.latitude, p.longitude, p.elevation) for p in route.points]
        if coords:
            geometries.append(coords)
    return geometries


def _position(position: Any) -> Coordinate | None:
    # GeoJSON positions are [lon, lat(, elevation)].
    try:
        lon = position[0]
        lat = position[1]
        elevation = position[2] if len(position) >= 3 else None
    except (TypeError, IndexError, KeyError):
        return None
    return (lat, lon, elevation)


def _line(positions: Iterable[Any]) -> RouteGeometry:
    out: RouteGeometry = []
    for position in positions or []:
        coord = _position(position)
        if coord is not None:
            out.append(coord)
    return out


def _geometry_lines(geometry: Mapping[str, Any] | None) -> list[RouteGeometry]:
    if not geometry:
        return []
    kind = geometry.get("type")
    coords = geometry.get("coordinates")
    if kind == "Point":
        point = _position(coords)
        return [[point]] if point is not None else []
    if kind in ("LineString", "MultiPoint"):
        return [_line(coords)]
    if kind == "MultiLineString":
        return [_line(line) for line in coords or []]
    # Outer ring only, holes are not part of the route.
    if kind == "Polygon":
        return [_line(coords[0])] if coords else []
    if kind == "MultiPolygon":
        return [_line(polygon[0]) for polygon in coords or [] if polygon]
    if kind == "GeometryCollection":
        return [line for child in geometry.get("geometries") or [] for line in _geometry_lines(child)]
    logger.warning("unsupported geojson geometry type=%s", kind)
    return []


def coordinates_from_geojson(feature_collection: Mapping[str, Any]) -> list[RouteGeometry]:
    """Route geometries from a GeoJSON FeatureCollection, Feature or bare geometry."""

    kind = feature_collection.get("type")
    if kind == "FeatureCollection":
        features = feature_collection.get("features") or []
        lines = [line for f in features for line in _geometry_lines(f.get("geometry"))]
    elif kind == "Feature":
        lines = _geometry_lines(feature_collection.get("geometry"))
    else:
        lines = _geometry_lines(feature_collection)
    return [line for line in lines if line]
