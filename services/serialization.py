"""Helpers de serialisation (sans dependance web).

Convertit les objets du moteur (dataclasses, numpy, pandas) en structures
100% JSON-serialisables, et les tableaux de splits en DataFrame.
"""

from __future__ import annotations

from dataclasses import fields, is_dataclass
from typing import Any, Sequence

import numpy as np
import pandas as pd

from core.formatting import (
    format_delay,
    format_duration_clock,
    format_elapsed_time,
    format_grade,
    format_pace_adjustment,
)
from core.pacing_model import PacePoint
from core.splits import SplitRow
from core.utils import seconds_to_mmss
from services.models import PlanResult

SPLIT_COLUMNS = [
    "index",
    "start",
    "end",
    "distance_meters",
    "gain_meters",
    "loss_meters",
    "avg_grade_percent",
    "pace_per_unit",
    "elapsed_seconds",
]

SERIES_COLUMNS = ["distance", "predicted_pace", "grade_percent"]


def _is_nan(value: Any) -> bool:
    try:
        return bool(value != value)
    except Exception:
        return False


def splits_to_dataframe(rows: Sequence[SplitRow]) -> pd.DataFrame:
    if not rows:
        return pd.DataFrame(columns=SPLIT_COLUMNS)
    return pd.DataFrame([{c: getattr(r, c) for c in SPLIT_COLUMNS} for r in rows], columns=SPLIT_COLUMNS)


def pace_series_to_dataframe(points: Sequence[PacePoint]) -> pd.DataFrame:
    if not points:
        return pd.DataFrame(columns=SERIES_COLUMNS)
    return pd.DataFrame([{c: getattr(p, c) for c in SERIES_COLUMNS} for p in points], columns=SERIES_COLUMNS)


def df_to_records(df: pd.DataFrame, *, limit: int | None = None) -> list[dict[str, Any]]:
    if df is None:
        return []
    if limit is not None:
        df = df.head(int(limit))
    # Remplace NaN par None pour JSON.
    # IMPORTANT: cast en object pour conserver None dans les colonnes numeriques.
    safe = df.copy().astype(object)
    safe = safe.where(pd.notna(safe), None)
    return [{str(k): to_jsonable(v) for k, v in rec.items()} for rec in safe.to_dict(orient="records")]


def to_jsonable(obj: Any, *, dataframe_limit: int | None = None) -> Any:
    """Convertit obj en primitives JSON-serialisables.

    Retourne uniquement dict/list/str/int/float/bool/None. Les dataclasses
    deviennent des dicts de leurs champs.
    """

    if obj is None:
        return None

    # Scalaire numpy
    if isinstance(obj, np.generic):
        return to_jsonable(obj.item())
    if isinstance(obj, np.ndarray):
        return [to_jsonable(v) for v in obj.tolist()]

    # Scalaires de base
    if isinstance(obj, (str, int, bool)):
        return obj
    if isinstance(obj, float):
        return None if _is_nan(obj) or obj in (float("inf"), float("-inf")) else obj

    # Conteneurs
    if isinstance(obj, dict):
        return {str(k): to_jsonable(v, dataframe_limit=dataframe_limit) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set)):
        return [to_jsonable(v, dataframe_limit=dataframe_limit) for v in obj]

    # pandas
    if isinstance(obj, pd.DataFrame):
        return df_to_records(obj, limit=dataframe_limit)

    # dataclasses
    if is_dataclass(obj):
        return {f.name: to_jsonable(getattr(obj, f.name), dataframe_limit=dataframe_limit) for f in fields(obj)}

    # Fallback
    return str(obj)


def _pace_label(pace: float | None) -> str:
    return "-" if pace is None else seconds_to_mmss(pace)


def _split_records(result: PlanResult) -> list[dict[str, Any]]:
    records = df_to_records(splits_to_dataframe(result.splits))
    for record, row in zip(records, result.splits):
        record["pace_label"] = _pace_label(row.pace_per_unit)
        record["elapsed_label"] = format_duration_clock(row.elapsed_seconds)
    return records


def _segment_records(result: PlanResult, pace_unit: str) -> list[dict[str, Any]]:
    out = []
    for item in result.segments:
        record = to_jsonable(item)
        record["grade_label"] = format_grade(item.segment.average_grade)
        if item.pacing is not None:
            record["pace_adjustment_label"] = format_pace_adjustment(item.pacing.pace_delta, pace_unit)
            record["adjusted_pace_label"] = _pace_label(item.pacing.adjusted_pace)
        out.append(record)
    return out


def plan_result_to_dict(result: PlanResult, *, pace_unit: str = "per_km") -> dict[str, Any]:
    summary = to_jsonable(result.summary)
    summary["finish_label"] = format_elapsed_time(result.summary.finish_seconds)
    summary["stoppage_label"] = format_delay(result.summary.total_stoppage_s)
    summary["flat_equivalent_pace_label"] = _pace_label(result.summary.flat_equivalent_pace)
    return {
        "splits": _split_records(result),
        "series": df_to_records(pace_series_to_dataframe(result.series)),
        "segments": _segment_records(result, pace_unit),
        "waypoint_times": to_jsonable(result.waypoint_times),
        "scales": to_jsonable(result.scales),
        "summary": summary,
        "comparison": to_jsonable(result.comparison),
    }
