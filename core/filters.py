from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

import pandas as pd

ALL = "all"


@dataclass(frozen=True)
class SalesFilters:
    region: str = ""
    category: str = ""
    user_id: str = ""
    date_from: Optional[pd.Timestamp] = None
    date_to: Optional[pd.Timestamp] = None


def _naive(now: datetime) -> pd.Timestamp:
    now_ts = pd.Timestamp(now)
    if now_ts.tzinfo is not None:
        now_ts = now_ts.tz_localize(None)
    return now_ts


def default_date_range(now: datetime) -> Tuple[pd.Timestamp, pd.Timestamp]:
    """Previous calendar month relative to ``now``, both ends inclusive."""
    this_month = _naive(now).normalize().replace(day=1)
    start = this_month - pd.offsets.MonthBegin(1)
    end = this_month - pd.Timedelta(microseconds=1)
    return start, end


def preset_date_range(days: int, now: datetime) -> Tuple[pd.Timestamp, pd.Timestamp]:
    now_ts = _naive(now)
    return now_ts - timedelta(days=days), now_ts


def _as_timestamp(value: object) -> Optional[pd.Timestamp]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError):
        return None
    if pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts


def _as_choice(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


def normalize_filters(raw: dict, *, now: datetime) -> SalesFilters:
    default_from, default_to = default_date_range(now)
    date_from = _as_timestamp(raw.get("date_from", raw.get("from")))
    date_to = _as_timestamp(raw.get("date_to", raw.get("to")))
    return SalesFilters(
        region=_as_choice(raw.get("region")),
        category=_as_choice(raw.get("category")),
        user_id=_as_choice(raw.get("user_id", raw.get("userId"))),
        date_from=date_from if date_from is not None else default_from,
        date_to=date_to if date_to is not None else default_to,
    )


def _is_open(choice: str) -> bool:
    return not choice or choice == ALL


def filter_sales(df: pd.DataFrame, filters: SalesFilters, *, now: datetime) -> pd.DataFrame:
    """Rows matching every active filter, in their original order."""
    if df.empty:
        return df.copy()

    default_from, default_to = default_date_range(now)
    start = filters.date_from if filters.date_from is not None else default_from
    end = filters.date_to if filters.date_to is not None else default_to

    ts = df["timestamp"]
    mask = (ts >= start) & (ts <= end)
    if not _is_open(filters.region):
        mask &= df["region"] == filters.region
    if not _is_open(filters.category):
        mask &= df["category"] == filters.category
    if not _is_open(filters.user_id):
        mask &= df["user_id"].astype("string") == filters.user_id

    return df[mask.fillna(False).astype(bool)].copy()


def _unique_str(series: pd.Series) -> List[str]:
    return [str(x) for x in series.dropna().astype(str).unique().tolist()]


def filter_options(df: pd.DataFrame) -> Dict[str, List[str]]:
    if df.empty:
        return {"regions": [], "categories": [], "users": []}
    return {
        "regions": _unique_str(df["region"]),
        "categories": _unique_str(df["category"]),
        "users": _unique_str(df["user_id"]),
    }
