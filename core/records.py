from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, Iterable, List

import numpy as np
import pandas as pd

from core.errors import ValidationError

REQUIRED_FIELDS = ("timestamp", "user_id", "region", "category", "sales_amount", "items_sold")
STRING_FIELDS = ("region", "category")
INT_FIELDS = ("user_id", "items_sold")

SalesRecord = Dict[str, Any]


def validate_records(data: object) -> List[SalesRecord]:
    """Check that ``data`` is a non-empty array of sales records.

    Only the first record is inspected for the required fields; the rest of
    the upload is assumed to share its shape.
    """
    if not isinstance(data, (list, tuple)) or len(data) == 0:
        raise ValidationError("Invalid data format: Expected a non-empty array")

    first = data[0]
    if not isinstance(first, Mapping):
        raise ValidationError("Invalid data format: Expected an array of objects")

    for name in REQUIRED_FIELDS:
        if name not in first:
            raise ValidationError(f"Invalid data format: Missing required field '{name}'")
    return list(data)


def empty_frame() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "timestamp": pd.Series(dtype="datetime64[ns]"),
            "user_id": pd.Series(dtype="Int64"),
            "region": pd.Series(dtype=object),
            "category": pd.Series(dtype=object),
            "sales_amount": pd.Series(dtype=float),
            "items_sold": pd.Series(dtype="Int64"),
        }
    )


_INT64_LIMIT = float(np.iinfo(np.int64).max)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float, np.integer, np.floating)) and not isinstance(value, (bool, np.bool_))


def parse_timestamps(values: Iterable[object]) -> pd.Series:
    """Parse to timezone-naive datetimes; aware values are shifted to UTC first.

    Numbers are epoch milliseconds; strings may mix date and date-time forms.
    """
    raw = pd.Series(list(values), dtype=object)
    out = pd.Series(pd.NaT, index=raw.index, dtype="datetime64[ns]")
    if raw.empty:
        return out

    numeric = raw.map(_is_number).astype(bool)
    if numeric.any():
        millis = pd.to_numeric(raw[numeric], errors="coerce").astype(float)
        millis = millis.where(millis.abs() < _INT64_LIMIT / 1_000_000)
        out[numeric] = pd.to_datetime(millis, unit="ms", errors="coerce").astype("datetime64[ns]")
    text = ~numeric
    if text.any():
        parsed = pd.to_datetime(raw[text], errors="coerce", utc=True, format="mixed")
        out[text] = parsed.dt.tz_localize(None).astype("datetime64[ns]")
    return out


def _as_int(series: pd.Series) -> pd.Series:
    """Whole numbers truncated toward zero; values outside int64 become missing."""
    numeric = np.trunc(pd.to_numeric(series, errors="coerce").astype(float))
    return numeric.where(numeric.abs() < _INT64_LIMIT).astype("Int64")


def _as_str(value: object) -> object:
    if value is None or (isinstance(value, float) and np.isnan(value)):
        return None
    return str(value)


def to_frame(records: List[SalesRecord]) -> pd.DataFrame:
    """Normalize validated records into the typed Dataset frame.

    Numeric fields that arrive as strings (JSON uploads) are coerced;
    values that cannot be coerced become missing rather than failing the upload.
    """
    if not records:
        return empty_frame()

    df = pd.DataFrame.from_records([dict(r) for r in records])
    for name in REQUIRED_FIELDS:
        if name not in df.columns:
            df[name] = None

    df["timestamp"] = parse_timestamps(df["timestamp"]).values
    df["sales_amount"] = pd.to_numeric(df["sales_amount"], errors="coerce").astype(float)
    for name in INT_FIELDS:
        df[name] = _as_int(df[name])
    for name in STRING_FIELDS:
        df[name] = df[name].map(_as_str).astype(object)

    extras = [c for c in df.columns if c not in REQUIRED_FIELDS]
    return df[list(REQUIRED_FIELDS) + extras].reset_index(drop=True)


def frame_to_records(df: pd.DataFrame) -> List[SalesRecord]:
    """Rows as plain dicts, timestamps as ISO-8601 strings."""
    if df.empty:
        return []
    out = df.copy()
    if "timestamp" in out.columns:
        out["timestamp"] = out["timestamp"].map(lambda ts: ts.isoformat() if pd.notna(ts) else None)
    out = out.astype(object).where(pd.notna(out), None)
    return out.to_dict(orient="records")
