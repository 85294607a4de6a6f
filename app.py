import altair as alt
import pandas as pd
import streamlit as st
from datetime import datetime
from typing import Dict, List

from core.aggregate import aggregate_by_category, aggregate_by_day, aggregate_by_region, summarize
from core.charts import ITEMS_COLOR, SALES_COLOR, breakdown_chart, sales_over_time_chart
from core.config import load_settings
from core.errors import DashboardError
from core.filters import ALL, default_date_range, filter_options, filter_sales, normalize_filters, preset_date_range
from core.ingest import ingest_upload, load_bootstrap_dataset
from core.logging_setup import configure_logging
from core.store import InMemoryDatasetStore

alt.data_transformers.disable_max_rows()
settings = load_settings()
configure_logging(settings.log_level)


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


def format_filter_summary(filters: Dict[str, str], date_from, date_to) -> str:
    chips = [f"Dates: {date_from:%b %d, %Y} – {date_to:%b %d, %Y}"]
    for label, key in [("Region", "region"), ("Category", "category"), ("User", "user_id")]:
        value = filters.get(key) or ALL
        chips.append(f"{label}: {'All' if value == ALL else value}")
    return "".join([f"<span class='chip'>{txt}</span>" for txt in chips])


@st.cache_resource
def get_store() -> InMemoryDatasetStore:
    return InMemoryDatasetStore()


@st.cache_data
def get_bootstrap() -> pd.DataFrame:
    return load_bootstrap_dataset(settings.bootstrap_source, timeout=settings.fetch_timeout)


def select_with_all(label: str, options: List[str], key: str) -> str:
    choice = st.selectbox(label, [ALL] + options, format_func=lambda v: f"All {label}s" if v == ALL else v, key=key)
    return choice or ALL


# ---------- UI setup ----------
st.set_page_config(page_title="Sales Dashboard", layout="wide")
inject_base_styles()
store = get_store()
now = datetime.now()

with st.expander("Upload Sales Data", expanded=False):
    st.caption("Upload your sales data file in JSON or CSV format to analyze it in the dashboard.")
    uploaded = st.file_uploader("Sales file", type=["json", "csv"])
    if uploaded is not None and st.button("Upload File"):
        try:
            file_id = ingest_upload(uploaded.getvalue(), uploaded.name, store)
        except DashboardError as exc:
            st.error(str(exc))
        else:
            st.success("File uploaded successfully!")
            st.query_params["fileId"] = file_id

file_id = st.query_params.get("fileId")
sales_df = store.get(file_id) if file_id else None
if sales_df is None:
    if file_id:
        st.warning("Uploaded file not found; showing the default dataset.")
    sales_df = get_bootstrap()

st.title("Sales Dashboard")
st.caption("Analyze your sales data with interactive filters and visualizations.")

# ----- Date range + filters -----
default_from, default_to = default_date_range(now)
if "date_range" not in st.session_state:
    st.session_state["date_range"] = (default_from.date(), default_to.date())

c_dates, c_filters = st.columns([2, 1])
with c_dates:
    preset_cols = st.columns(3)
    for col, days in zip(preset_cols, (7, 30, 90)):
        if col.button(f"Last {days} days"):
            start, end = preset_date_range(days, now)
            st.session_state["date_range"] = (start.date(), end.date())
    picked = st.date_input("Date range", key="date_range")
with c_filters:
    options = filter_options(sales_df)
    raw_filters = {
        "region": select_with_all("Region", options["regions"], "region_filter"),
        "category": select_with_all("Category", options["categories"], "category_filter"),
        "user_id": select_with_all("User", options["users"], "user_filter"),
    }

# Calendar dates are whole days: include everything up to the end of the last one.
date_from = picked[0] if len(picked) > 0 else None
date_to = (pd.Timestamp(picked[1]) + pd.Timedelta(days=1) - pd.Timedelta(microseconds=1)) if len(picked) > 1 else None
filters = normalize_filters({**raw_filters, "date_from": date_from, "date_to": date_to}, now=now)
st.markdown(f"<div class='chip-row'>{format_filter_summary(raw_filters, filters.date_from, filters.date_to)}</div>", unsafe_allow_html=True)

filtered = filter_sales(sales_df, filters, now=now)
summary = summarize(filtered)

k1, k2, k3 = st.columns(3)
k1.metric("Total Sales", f"${summary['totalSales']:,.2f}")
k2.metric("Items Sold", f"{summary['itemsSold']:,}")
k3.metric("Transactions", f"{summary['transactions']:,}")

tab_charts, tab_table = st.tabs(["Charts", "Table"])
with tab_charts:
    chart_type = st.radio("Chart type", ["line", "bar", "area"], horizontal=True, format_func=str.title)
    by_day = aggregate_by_day(filtered)
    if by_day:
        st.subheader("Sales Over Time")
        st.altair_chart(sales_over_time_chart(by_day, chart_type), use_container_width=True)
    else:
        st.info("No sales in the selected range.")
    left, right = st.columns(2)
    with left:
        by_region = aggregate_by_region(filtered)
        if by_region:
            st.altair_chart(breakdown_chart(by_region, "Sales by Region", SALES_COLOR), use_container_width=True)
    with right:
        by_category = aggregate_by_category(filtered)
        if by_category:
            st.altair_chart(breakdown_chart(by_category, "Sales by Category", ITEMS_COLOR), use_container_width=True)

with tab_table:
    display = filtered.copy()
    if not display.empty:
        display["timestamp"] = display["timestamp"].dt.strftime("%Y-%m-%d %H:%M")
        display["sales_amount"] = display["sales_amount"].apply(lambda v: f"${float(v):,.2f}" if pd.notna(v) else "")
    st.dataframe(display, use_container_width=True, hide_index=True)
