"""Shared engine defaults (no web framework imports).

This module centralises the sampling parameters, unit lengths and clamps used
in core/ and services/. Keep it dependency free (stdlib only).
"""

from __future__ import annotations


METERS_PER_KM: float = 1000.0
METERS_PER_MILE: float = 1609.344

# Integration step used by the normalization/time scalers and the splits.
DEFAULT_SAMPLE_STEP_M: float = 50.0
MIN_SAMPLE_STEP_M: float = 1.0

# Window used to smooth single-sample elevation noise when computing grade.
DEFAULT_GRADE_WINDOW_M: float = 100.0

# Grade -> pace factor bounds.
GRADE_CLAMP_PERCENT: float = 50.0
MIN_PACE_FACTOR: float = 0.5
MAX_PACE_FACTOR: float = 3.0

# Linear pacing strategy: pacing_linear_percent is clamped to +/-50 %.
MAX_LINEAR_PACING_FRACTION: float = 0.5

DEFAULT_STOPPAGE_S: float = 0.0

# Boxcar smoothing applied to the charted pace curve (0 = disabled).
DEFAULT_PACE_SMOOTHING_M: float = 0.0
