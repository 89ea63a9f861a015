from __future__ import annotations

import io

import gpxpy
import pytest

from tests.unit._bootstrap import ensure_project_on_path, fixture_path


ensure_project_on_path()


GPX_WITH_ROUTE = b"""<?xml version="1.0"?>
<gpx version="1.1" creator="tests" xmlns="http://www.topografix.com/GPX/1/1">
  <rte>
    <name>Col d\xe9part</name>
    <rtept lat="45.0" lon="6.0"><ele>100</ele></rtept>
    <rtept lat="45.001" lon="6.0"></rtept>
  </rte>
</gpx>
"""


def test_load_gpx_fixture_tracks() -> None:
    from core.gpx_loader import load_gpx, route_geometries_from_gpx

    with fixture_path().open("rb") as f:
        gpx = load_gpx(f)
    geometries = route_geometries_from_gpx(gpx)

    assert len(geometries) == 1
    assert len(geometries[0]) == 30
    assert geometries[0][0] == (45.0, 6.0, 500.0)


def test_routes_and_latin1_bytes() -> None:
    from core.gpx_loader import load_gpx, route_geometries_from_gpx

    gpx = load_gpx(io.BytesIO(GPX_WITH_ROUTE))
    geometries = route_geometries_from_gpx(gpx)

    assert geometries == [[(45.0, 6.0, 100.0), (45.001, 6.0, None)]]


def test_invalid_gpx_raises() -> None:
    from core.gpx_loader import parse_gpx_bytes

    with pytest.raises(gpxpy.gpx.GPXException):
        parse_gpx_bytes(b"definitely not xml")


def test_geojson_geometry_types_swap_lon_lat() -> None:
    from core.gpx_loader import coordinates_from_geojson

    collection = {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "geometry": {"type": "Point", "coordinates": [6.0, 45.0]}},
            {
                "type": "Feature",
                "geometry": {
                    "type": "MultiLineString",
                    "coordinates": [[[6.0, 45.0, 10], [6.1, 45.1, 20]], [[7.0, 46.0]]],
                },
            },
            {
                "type": "Feature",
                "geometry": {
                    "type": "GeometryCollection",
                    "geometries": [
                        {"type": "Polygon", "coordinates": [[[1.0, 2.0], [3.0, 4.0]]]},
                        {"type": "MultiPolygon", "coordinates": [[[[5.0, 6.0]]]]},
                    ],
                },
            },
            {"type": "Feature", "geometry": None},
        ],
    }
    lines = coordinates_from_geojson(collection)

    assert lines[0] == [(45.0, 6.0, None)]
    assert lines[1] == [(45.0, 6.0, 10), (45.1, 6.1, 20)]
    assert lines[2] == [(46.0, 7.0, None)]
    assert lines[3] == [(2.0, 1.0, None), (4.0, 3.0, None)]
    assert lines[4] == [(6.0, 5.0, None)]
    assert len(lines) == 5


def test_geojson_single_feature() -> None:
    from core.gpx_loader import coordinates_from_geojson

    feature = {"type": "Feature", "geometry": {"type": "LineString", "coordinates": [[6.0, 45.0]]}}
    assert coordinates_from_geojson(feature) == [[(45.0, 6.0, None)]]


def test_polygon_keeps_outer_ring_only() -> None:
    from core.gpx_loader import coordinates_from_geojson

    outer = [[6.0, 45.0], [6.1, 45.0], [6.1, 45.1], [6.0, 45.0]]
    hole = [[6.02, 45.02], [6.03, 45.02], [6.02, 45.02]]
    polygon = {"type": "Polygon", "coordinates": [outer, hole]}
    multi = {"type": "MultiPolygon", "coordinates": [[outer, hole], [outer]]}

    lines = coordinates_from_geojson(polygon)
    assert len(lines) == 1
    assert lines[0][1] == (45.0, 6.1, None)

    assert len(coordinates_from_geojson(multi)) == 2
