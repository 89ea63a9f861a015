"""Planned rest time at intermediate waypoints.

Start (order 0) and finish (highest order) never contribute. A waypoint
uses its override when one exists, the default duration otherwise.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence

from core.constants import DEFAULT_STOPPAGE_S


@dataclass(frozen=True)
class Waypoint:
    id: str
    distance: float
    order: int


StoppageOverrides = Mapping[str, float]


def _is_intermediate(waypoint: Waypoint, max_order: int) -> bool:
    return 0 < waypoint.order < max_order


def waypoint_stoppage(
    waypoint: Waypoint,
    waypoints: Sequence[Waypoint],
    overrides: StoppageOverrides | None,
    default_seconds: float,
) -> float:
    """Stoppage time planned at a single waypoint (0 for start/finish)."""

    if not waypoints:
        return 0.0
    max_order = max(w.order for w in waypoints)
    if not _is_intermediate(waypoint, max_order):
        return 0.0
    if overrides and waypoint.id in overrides:
        return float(overrides[waypoint.id])
    return float(default_seconds)


def cumulative_stoppage(
    waypoints: Sequence[Waypoint],
    overrides: StoppageOverrides | None,
    default_seconds: float,
    target_distance: float,
) -> float:
    """Total stoppage at intermediate waypoints located at or before ``target_distance``."""

    if not waypoints:
        return 0.0
    max_order = max(w.order for w in waypoints)
    total = 0.0
    for wp in waypoints:
        if not _is_intermediate(wp, max_order) or wp.distance > target_distance:
            continue
        if overrides and wp.id in overrides:
            total += float(overrides[wp.id])
        else:
            total += float(default_seconds)
    return total


@dataclass(frozen=True)
class StoppagePlan:
    """Waypoints plus their stoppage overrides and the default duration."""

    waypoints: tuple[Waypoint, ...] = ()
    overrides: Mapping[str, float] | None = None
    default_seconds: float = DEFAULT_STOPPAGE_S

    def up_to(self, distance: float) -> float:
        return cumulative_stoppage(self.waypoints, self.overrides, self.default_seconds, distance)

    def at(self, waypoint: Waypoint) -> float:
        return waypoint_stoppage(waypoint, self.waypoints, self.overrides, self.default_seconds)


NO_STOPPAGE = StoppagePlan()
