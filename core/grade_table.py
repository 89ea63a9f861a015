"""Grade / slope correction model.

Maps an instantaneous grade (percent) to a multiplicative pace factor.
The curve is fixed: a constrained 4th-degree polynomial for moderate grades,
continued by its tangent lines on very steep terrain.
"""

from __future__ import annotations

import numpy as np

from core.constants import GRADE_CLAMP_PERCENT, MAX_PACE_FACTOR, MIN_PACE_FACTOR


# Polynomial coefficients (a0 is pinned to 1.0: flat ground is neutral).
POLY_COEFFS = (
    1.0,
    0.03076354335605815,
    0.0018738529522439088,
    -2.930257313334705e-6,
    -4.3144778100289634e-7,
)

# Transition grades (%) where the polynomial hands over to its tangents.
LEFT_END = -32.25
RIGHT_END = 32.1

SLOPE_LEFT = -0.041356411457441594
INTERCEPT_LEFT = 0.25463237016735074
SLOPE_RIGHT = 0.08492425850523927
INTERCEPT_RIGHT = 0.6372687773774661


def _raw_curve(grade: np.ndarray) -> np.ndarray:
    a0, a1, a2, a3, a4 = POLY_COEFFS
    poly = a4 * grade**4 + a3 * grade**3 + a2 * grade**2 + a1 * grade + a0
    left = SLOPE_LEFT * grade + INTERCEPT_LEFT
    right = SLOPE_RIGHT * grade + INTERCEPT_RIGHT
    return np.where(grade < LEFT_END, left, np.where(grade > RIGHT_END, right, poly))


def grade_factor(grade_percent: float | np.ndarray) -> float | np.ndarray:
    """Return multiplicative pace factor for a given grade.

    > 1: slower uphill, < 1: faster on gentle descents, rising again on
    steep ones. Grade is clamped to +/-50 % and the factor to [0.5, 3.0].
    """

    grade_arr = np.asarray(grade_percent, dtype=float)
    clamped = np.clip(grade_arr, -GRADE_CLAMP_PERCENT, GRADE_CLAMP_PERCENT)
    out = np.clip(_raw_curve(clamped), MIN_PACE_FACTOR, MAX_PACE_FACTOR)

    out = np.where(np.isfinite(grade_arr), out, np.nan)

    if np.isscalar(grade_percent):
        return float(out)
    return out
