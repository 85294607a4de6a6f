from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, Literal

import pandas as pd

from core.aggregate import aggregate_by_category, aggregate_by_day, aggregate_by_region, summarize
from core.charts import ITEMS_COLOR, SALES_COLOR, breakdown_chart, sales_over_time_chart, to_vega_spec
from core.filters import SalesFilters, filter_options, filter_sales

ChartType = Literal["line", "bar", "area"]


def _filters_payload(filters: SalesFilters) -> Dict[str, Any]:
    out = asdict(filters)
    for key in ("date_from", "date_to"):
        out[key] = out[key].isoformat() if out[key] is not None else None
    return out


def compute_dashboard(
    filters: SalesFilters,
    df: pd.DataFrame,
    *,
    now: datetime,
    chart_type: ChartType = "line",
) -> Dict[str, Any]:
    filtered = filter_sales(df, filters, now=now)
    by_day = aggregate_by_day(filtered)
    by_region = aggregate_by_region(filtered)
    by_category = aggregate_by_category(filtered)

    charts: Dict[str, Any] = {}
    if by_day:
        charts["sales_over_time"] = to_vega_spec(sales_over_time_chart(by_day, chart_type))
    if by_region:
        charts["sales_by_region"] = to_vega_spec(breakdown_chart(by_region, "Sales by Region", SALES_COLOR))
    if by_category:
        charts["sales_by_category"] = to_vega_spec(breakdown_chart(by_category, "Sales by Category", ITEMS_COLOR))

    return {
        "filters": _filters_payload(filters),
        "summary": summarize(filtered),
        "by_day": by_day,
        "by_region": by_region,
        "by_category": by_category,
        "options": filter_options(df),
        "charts": charts,
    }
