from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class TransformStep:
    name: str
    points_in: int
    points_out: int
    reason: str
    details: dict[str, Any] | None = None

    @property
    def dropped(self) -> int:
        return self.points_in - self.points_out


@dataclass
class TransformReport:
    """Trace of the filtering steps applied while building a profile."""

    steps: list[TransformStep] = field(default_factory=list)

    def add(
        self,
        name: str,
        *,
        points_in: int,
        points_out: int,
        reason: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.steps.append(
            TransformStep(
                name=str(name),
                points_in=int(points_in),
                points_out=int(points_out),
                reason=str(reason),
                details=details,
            )
        )

    def step(self, name: str) -> TransformStep | None:
        return next((s for s in self.steps if s.name == name), None)

    def total_dropped(self) -> int:
        return sum(s.dropped for s in self.steps)
