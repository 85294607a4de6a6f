from __future__ import annotations

from typing import Any, Dict, List

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()

SALES_COLOR = "#8884d8"
ITEMS_COLOR = "#82ca9d"


def to_vega_spec(chart: alt.TopLevelMixin) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def sales_over_time_chart(by_day: List[Dict[str, Any]], chart_type: str = "line") -> alt.LayerChart:
    """Sales amount (left axis) and items sold (right axis) per day."""
    data = pd.DataFrame(by_day, columns=["date", "salesAmount", "itemsSold", "transactions"])
    base = alt.Chart(data).encode(x=alt.X("date:T", title="Date", axis=alt.Axis(format="%Y-%m-%d", grid=False)))

    if chart_type == "bar":
        sales_mark, items_mark = base.mark_bar(color=SALES_COLOR, opacity=0.8), base.mark_bar(color=ITEMS_COLOR, opacity=0.8)
    elif chart_type == "area":
        sales_mark = base.mark_area(color=SALES_COLOR, opacity=0.3, line={"color": SALES_COLOR})
        items_mark = base.mark_area(color=ITEMS_COLOR, opacity=0.3, line={"color": ITEMS_COLOR})
    else:
        sales_mark = base.mark_line(color=SALES_COLOR, point={"filled": True, "size": 60})
        items_mark = base.mark_line(color=ITEMS_COLOR)

    tooltip = [
        alt.Tooltip("date:T", title="Date", format="%Y-%m-%d"),
        alt.Tooltip("salesAmount:Q", title="Sales Amount ($)", format="$,.2f"),
        alt.Tooltip("itemsSold:Q", title="Items Sold", format=","),
        alt.Tooltip("transactions:Q", title="Transactions"),
    ]
    sales = sales_mark.encode(
        y=alt.Y("salesAmount:Q", title="Sales Amount ($)", axis=alt.Axis(format="$~s", gridDash=[4, 4], domain=False, ticks=False)),
        tooltip=tooltip,
    )
    items = items_mark.encode(
        y=alt.Y("itemsSold:Q", title="Items Sold", axis=alt.Axis(format="~s", orient="right")),
        tooltip=tooltip,
    )
    return alt.layer(sales, items).resolve_scale(y="independent").properties(height=400)


def breakdown_chart(rows: List[Dict[str, Any]], title: str, color: str = SALES_COLOR) -> alt.Chart:
    """Horizontal bar chart of sales amount per group name."""
    data = pd.DataFrame(rows, columns=["name", "salesAmount", "itemsSold", "transactions"])
    return (
        alt.Chart(data, title=title)
        .mark_bar(color=color)
        .encode(
            y=alt.Y("name:N", title=None, sort="-x"),
            x=alt.X("salesAmount:Q", title="Sales Amount ($)", axis=alt.Axis(format="$~s", gridDash=[4, 4])),
            tooltip=[
                alt.Tooltip("name:N", title="Name"),
                alt.Tooltip("salesAmount:Q", title="Sales Amount ($)", format="$,.2f"),
                alt.Tooltip("itemsSold:Q", title="Items Sold", format=","),
                alt.Tooltip("transactions:Q", title="Transactions"),
            ],
        )
        .properties(height=300)
    )
