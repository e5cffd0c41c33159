from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from .data_models import Cohort
from .ingest import build_snapshot, classify_cohort, merge_sources
from .scorer import score
from .settings import Settings, load_settings


logger = logging.getLogger(__name__)

ID_CANDIDATES = ["id", "user_id", "profile_id", "uuid"]

SCORE_COLUMNS = [
    "profile_id",
    "cohort",
    "completed_count",
    "total_count",
    "percentage",
    "has_image",
    "missing_fields",
]


def read_profiles(path: Path) -> pd.DataFrame:
    """Load a profile export (CSV, JSON array or JSON lines) into a DataFrame."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Profile export not found: {path}")
    suffix = path.suffix.lower()
    if suffix == ".jsonl":
        df = pd.read_json(path, lines=True, dtype=False)
    elif suffix == ".json":
        df = pd.read_json(path, dtype=False)
    else:
        df = pd.read_csv(path, dtype=str)
    return clean_profiles_df(df)


def clean_profiles_df(df: pd.DataFrame) -> pd.DataFrame:
    """Light cleanup that keeps the export's own column names."""

    out = df.copy()
    out.columns = [col.strip() if isinstance(col, str) else col for col in out.columns]
    for col in out.columns:
        if pd.api.types.is_object_dtype(out[col]):
            out[col] = out[col].apply(lambda v: v.strip() if isinstance(v, str) else v)
            out[col] = out[col].replace({"nan": None, "None": None, "": None})
    return out


def _records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    filtered = df.astype(object).where(pd.notnull(df), None)
    return filtered.to_dict(orient="records")


def _profile_id(record: Dict[str, Any], position: int) -> str:
    for col in ID_CANDIDATES:
        value = record.get(col)
        if value is not None and str(value).strip():
            return str(value).strip()
    return f"row_{position}"


def score_profiles(
    df: pd.DataFrame,
    cohort: Optional[Cohort] = None,
    settings: Optional[Settings] = None,
) -> pd.DataFrame:
    """
    Score every row of a profile export.

    Args:
        df: One profile record per row, using profile-store column names.
        cohort: Force a cohort for every row; classify each row when None.
        settings: Settings used for cohort classification.

    Returns:
        DataFrame with one row per input row and the columns in SCORE_COLUMNS.
    """
    settings = settings or load_settings()
    rows = []
    for position, record in enumerate(_records(df)):
        merged = merge_sources(record)
        row_cohort = Cohort(cohort) if cohort is not None else classify_cohort(merged, settings.home_nationalities)
        snapshot = build_snapshot(merged, cohort=row_cohort, settings=settings)
        result = score(snapshot, row_cohort)
        rows.append({
            "profile_id": _profile_id(merged, position),
            "cohort": row_cohort.value,
            "completed_count": result.completed_count,
            "total_count": result.total_count,
            "percentage": result.percentage,
            "has_image": result.has_image,
            "missing_fields": "|".join(result.missing_fields),
        })
    logger.info("Scored %d profiles", len(rows))
    return pd.DataFrame(rows, columns=SCORE_COLUMNS)


def summarize_scores(scored: pd.DataFrame) -> pd.DataFrame:
    """Per-cohort count, mean/min/max percentage and number of complete profiles."""
    columns = ["cohort", "profiles", "mean_percentage", "min_percentage", "max_percentage", "complete"]
    if scored.empty:
        return pd.DataFrame(columns=columns)
    grouped = scored.groupby("cohort", sort=True)
    summary = pd.DataFrame({
        "profiles": grouped.size(),
        "mean_percentage": grouped["percentage"].mean().round(1),
        "min_percentage": grouped["percentage"].min(),
        "max_percentage": grouped["percentage"].max(),
        "complete": grouped["percentage"].apply(lambda s: int((s == 100).sum())),
    })
    return summary.reset_index()[columns]
