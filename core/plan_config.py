"""Plan configuration passed by value into every pacing computation.

The pace mode is a tagged variant: ``TimeTarget`` carries its target time, so
a time-mode plan without a target cannot be built.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Literal, Union

from core.constants import MAX_LINEAR_PACING_FRACTION, METERS_PER_KM, METERS_PER_MILE
from core.utils import mmss_to_seconds


PaceUnit = Literal["per_km", "per_mile"]
PaceMode = Literal["pace", "normalized", "time"]
PacingStrategy = Literal["flat", "linear"]

PACE_UNITS: tuple[str, ...] = ("per_km", "per_mile")
PACING_STRATEGIES: tuple[str, ...] = ("flat", "linear")

# Legacy unit spellings accepted by from_fields().
_UNIT_ALIASES = {
    "min_per_km": "per_km",
    "min_per_mi": "per_mile",
    "per_mi": "per_mile",
}


@dataclass(frozen=True)
class PaceTarget:
    """Run the plan pace, slowed/sped up by terrain."""

    mode: Literal["pace"] = field(default="pace", init=False)


@dataclass(frozen=True)
class NormalizedTarget:
    """Keep the distance-weighted average pace equal to the plan pace."""

    mode: Literal["normalized"] = field(default="normalized", init=False)


@dataclass(frozen=True)
class TimeTarget:
    """Pin total elapsed time (travel + stoppage) to ``target_time_seconds``."""

    target_time_seconds: float
    mode: Literal["time"] = field(default="time", init=False)

    def __post_init__(self) -> None:
        value = float(self.target_time_seconds)
        if not math.isfinite(value) or value <= 0:
            raise ValueError("target_time_seconds must be a positive number.")
        object.__setattr__(self, "target_time_seconds", value)


Target = Union[PaceTarget, NormalizedTarget, TimeTarget]


def unit_length_m(pace_unit: str) -> float:
    return METERS_PER_MILE if pace_unit == "per_mile" else METERS_PER_KM


@dataclass(frozen=True)
class PlanConfig:
    pace: float | None = None
    pace_unit: PaceUnit = "per_km"
    target: Target = field(default_factory=PaceTarget)
    pacing_strategy: PacingStrategy = "flat"
    pacing_linear_percent: float = 0.0
    grade_adjustment: bool = True

    def __post_init__(self) -> None:
        if self.pace_unit not in PACE_UNITS:
            raise ValueError(f"Unknown pace unit: {self.pace_unit!r}")
        if self.pacing_strategy not in PACING_STRATEGIES:
            raise ValueError(f"Unknown pacing strategy: {self.pacing_strategy!r}")
        if not isinstance(self.target, (PaceTarget, NormalizedTarget, TimeTarget)):
            raise ValueError("target must be PaceTarget, NormalizedTarget or TimeTarget.")

    @property
    def pace_mode(self) -> PaceMode:
        return self.target.mode

    @property
    def target_time_seconds(self) -> float | None:
        if isinstance(self.target, TimeTarget):
            return self.target.target_time_seconds
        return None

    @property
    def unit_meters(self) -> float:
        return unit_length_m(self.pace_unit)

    @property
    def has_valid_pace(self) -> bool:
        return self.pace is not None and math.isfinite(self.pace) and self.pace > 0

    @property
    def base_pace_per_meter(self) -> float | None:
        """Plan pace in seconds per meter, None when no usable pace is set."""

        if not self.has_valid_pace:
            return None
        return float(self.pace) / self.unit_meters

    @property
    def linear_fraction(self) -> float:
        """pacing_linear_percent as a fraction clamped to [-0.5, 0.5]."""

        try:
            fraction = float(self.pacing_linear_percent) / 100.0
        except (TypeError, ValueError):
            return 0.0
        if not math.isfinite(fraction):
            return 0.0
        return min(max(fraction, -MAX_LINEAR_PACING_FRACTION), MAX_LINEAR_PACING_FRACTION)

    def strategy_factor(self, progress: float) -> float:
        """Pacing-strategy multiplier at a fractional course position (0..1)."""

        if self.pacing_strategy != "linear":
            return 1.0
        return 1.0 + (progress - 0.5) * self.linear_fraction

    @classmethod
    def from_fields(
        cls,
        *,
        pace: float | str | None = None,
        pace_unit: str = "per_km",
        pace_mode: str = "pace",
        target_time_seconds: float | None = None,
        pacing_strategy: str | None = "flat",
        pacing_linear_percent: float | None = 0.0,
        grade_adjustment: bool = True,
    ) -> "PlanConfig":
        """Build a plan from flat, optional fields (storage/API shape).

        ``pace`` may be given in seconds or as an "M:SS" string.
        """

        if isinstance(pace, str):
            pace = mmss_to_seconds(pace)
        unit = _UNIT_ALIASES.get(pace_unit, pace_unit)
        if pace_mode == "pace":
            target: Target = PaceTarget()
        elif pace_mode == "normalized":
            target = NormalizedTarget()
        elif pace_mode == "time":
            if target_time_seconds is None:
                raise ValueError("pace_mode 'time' requires target_time_seconds.")
            target = TimeTarget(target_time_seconds=target_time_seconds)
        else:
            raise ValueError(f"Unknown pace mode: {pace_mode!r}")

        return cls(
            pace=float(pace) if pace is not None else None,
            pace_unit=unit,
            target=target,
            pacing_strategy=pacing_strategy or "flat",
            pacing_linear_percent=float(pacing_linear_percent or 0.0),
            grade_adjustment=bool(grade_adjustment),
        )
