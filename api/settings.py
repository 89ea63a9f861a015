from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from core.constants import DEFAULT_GRADE_WINDOW_M, DEFAULT_SAMPLE_STEP_M

ENV_PREFIX = "COURSEPACE_"

DEFAULT_MAX_UPLOAD_BYTES = 20_000_000
DEFAULT_PROFILE_CACHE_ITEMS = 32
DEFAULT_CORS_ORIGINS = ("http://localhost:3000", "http://localhost:3001")


def _env(name: str) -> str | None:
    return os.environ.get(ENV_PREFIX + name)


def _env_float(name: str, default: float) -> float:
    raw = _env(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    log_dir: Path | None
    max_upload_bytes: int
    profile_cache_items: int
    sample_step_m: float
    grade_window_m: float
    cors_origins: tuple[str, ...]


def load_settings() -> Settings:
    """Read settings from COURSEPACE_* environment variables.

    COURSEPACE_LOG_DIR set to an empty string disables the log file.
    """

    log_dir_raw = _env("LOG_DIR")
    if log_dir_raw is None:
        log_dir: Path | None = Path(__file__).resolve().parents[1] / "logs"
    elif log_dir_raw.strip():
        log_dir = Path(log_dir_raw)
    else:
        log_dir = None

    origins_raw = _env("CORS_ORIGINS")
    if origins_raw:
        origins = tuple(o.strip() for o in origins_raw.split(",") if o.strip())
    else:
        origins = DEFAULT_CORS_ORIGINS

    return Settings(
        log_dir=log_dir,
        max_upload_bytes=int(_env_float("MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES)),
        profile_cache_items=int(_env_float("PROFILE_CACHE_ITEMS", DEFAULT_PROFILE_CACHE_ITEMS)),
        sample_step_m=_env_float("SAMPLE_STEP_M", DEFAULT_SAMPLE_STEP_M),
        grade_window_m=_env_float("GRADE_WINDOW_M", DEFAULT_GRADE_WINDOW_M),
        cors_origins=origins,
    )
