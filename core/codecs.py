"""Text decoders for uploaded sales files, plus the CSV export writer.

The upload dialect is deliberately minimal: comma separated, header first, no
quoting. A comma inside a value always starts a new field. Numeric cells are
read by their leading numeric prefix; cells without one become missing.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any, Callable, Dict, List, Optional

import pandas as pd

from core.errors import ParseError
from core.records import REQUIRED_FIELDS, SalesRecord

_INT_PREFIX = re.compile(r"[+-]?\d+")
_FLOAT_PREFIX = re.compile(r"[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def _parse_int(value: str) -> Optional[int]:
    match = _INT_PREFIX.match(value)
    return int(match.group(0), 10) if match else None


def _parse_float(value: str) -> float:
    match = _FLOAT_PREFIX.match(value)
    if not match:
        return math.nan
    return float(match.group(0).replace("Infinity", "inf"))


FIELD_KINDS: Dict[str, Callable[[str], Any]] = {
    "sales_amount": _parse_float,
    "items_sold": _parse_float,
    "user_id": _parse_int,
}


def _coerce(header: str, value: Optional[str]) -> Any:
    if value is None:
        return None
    kind = FIELD_KINDS.get(header)
    return kind(value) if kind is not None else value


def decode_csv(text: str) -> List[SalesRecord]:
    try:
        lines = [line for line in text.split("\n") if line.strip()]
        headers = [h.strip() for h in lines[0].split(",")]

        rows: List[SalesRecord] = []
        for line in lines[1:]:
            values = [v.strip() for v in line.split(",")]
            row: SalesRecord = {}
            for idx, header in enumerate(headers):
                row[header] = _coerce(header, values[idx] if idx < len(values) else None)
            rows.append(row)
        return rows
    except Exception as exc:
        raise ParseError("Invalid CSV format") from exc


def decode_json(text: str) -> Any:
    try:
        return json.loads(text)
    except (TypeError, ValueError) as exc:
        raise ParseError("Invalid JSON format") from exc


def encode_csv(df: pd.DataFrame) -> str:
    """Write a dataset as CSV (required fields first), timestamps as ISO-8601."""
    extras = [c for c in df.columns if c not in REQUIRED_FIELDS]
    out = df.reindex(columns=list(REQUIRED_FIELDS) + extras).copy()
    out["timestamp"] = out["timestamp"].map(lambda ts: ts.isoformat() if pd.notna(ts) else None)
    return out.to_csv(index=False)
