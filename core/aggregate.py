from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional

import pandas as pd


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def _money(value: object) -> float:
    out = round_half_up(value, 2)
    return out if out is not None else 0.0


def _count(value: object) -> int:
    if value is None or pd.isna(value):
        return 0
    return int(value)


def _sum_frame(df: pd.DataFrame, key: pd.Series) -> pd.DataFrame:
    return df.groupby(key, sort=False, dropna=False).agg(
        salesAmount=("sales_amount", "sum"),
        itemsSold=("items_sold", "sum"),
        transactions=("sales_amount", "size"),
    )


def aggregate_by_day(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Daily totals over the full day span of ``df``, zero-filling empty days."""
    if df.empty:
        return []
    ts = df["timestamp"]
    valid = df[ts.notna()]
    if valid.empty:
        return []

    days = valid["timestamp"].dt.normalize()
    span = pd.date_range(days.min(), days.max(), freq="D")
    grouped = _sum_frame(valid, days.rename("day")).reindex(span, fill_value=0)

    return [
        {
            "date": day.strftime("%Y-%m-%d"),
            "salesAmount": _money(row["salesAmount"]),
            "itemsSold": _count(row["itemsSold"]),
            "transactions": _count(row["transactions"]),
        }
        for day, row in grouped.iterrows()
    ]


def _aggregate_by_dimension(df: pd.DataFrame, dimension: str) -> List[Dict[str, Any]]:
    if df.empty:
        return []
    grouped = _sum_frame(df, df[dimension])
    return [
        {
            "name": (None if pd.isna(name) else name),
            "salesAmount": _money(row["salesAmount"]),
            "itemsSold": _count(row["itemsSold"]),
            "transactions": _count(row["transactions"]),
        }
        for name, row in grouped.iterrows()
    ]


def aggregate_by_region(df: pd.DataFrame) -> List[Dict[str, Any]]:
    return _aggregate_by_dimension(df, "region")


def aggregate_by_category(df: pd.DataFrame) -> List[Dict[str, Any]]:
    return _aggregate_by_dimension(df, "category")


def summarize(df: pd.DataFrame) -> Dict[str, Any]:
    """Totals for the dashboard summary cards."""
    if df.empty:
        return {"totalSales": 0.0, "itemsSold": 0, "transactions": 0}
    return {
        "totalSales": _money(df["sales_amount"].sum()),
        "itemsSold": _count(df["items_sold"].sum()),
        "transactions": int(len(df)),
    }
