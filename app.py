"""
Sales Activity Dashboard — Interactive Dashboard

Run with:  streamlit run app.py
"""

import sys
from dataclasses import asdict
from pathlib import Path

import streamlit as st
import plotly.graph_objects as go
import plotly.express as px

sys.path.insert(0, str(Path(__file__).resolve().parent))

from sales_dashboard.config import (
    ACTIVITY_DETAIL_SHEET,
    ACTIVITY_SHEET,
    ALL_MANAGERS,
    OPPORTUNITY_SHEET,
)
from sales_dashboard.dashboard import (
    format_currency,
    format_kilo_value,
    get_manager_filter_options,
    get_performance_view,
    get_selector_options,
)
from sales_dashboard.errors import InsightsUnavailableError, SalesDashboardError
from sales_dashboard.insights import get_dashboard_insights
from sales_dashboard.kpis import (
    is_booked,
    owner_opportunity_counts,
    region_value_breakdown,
    status_breakdown,
)
from sales_dashboard.loaders import load_workbook_records
from sales_dashboard.models import Selection
from sales_dashboard.transforms import enrich_activities, records_to_frame

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="Sales & Activity Dashboard",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded",
)

COLORS = {
    "primary": "#22d3ee",
    "secondary": "#818cf8",
    "trend": "#f43f5e",
    "booked": "#2ecc71",
    "lost": "#e74c3c",
}


# ---------------------------------------------------------------------------
# Data loading (cached per file content)
# ---------------------------------------------------------------------------
@st.cache_data(show_spinner="Parsing Excel file...")
def parse_upload(data: bytes):
    return load_workbook_records(data)


def reset_state():
    for key in ("records", "file_name", "file_id", "error", "insights", "insights_error"):
        st.session_state.pop(key, None)


# ---------------------------------------------------------------------------
# Header & upload
# ---------------------------------------------------------------------------
st.title("Sales & Activity Dashboard")
st.caption(
    f"Upload your Excel export to analyse the '{OPPORTUNITY_SHEET}', "
    f"'{ACTIVITY_SHEET}' and '{ACTIVITY_DETAIL_SHEET}' sheets."
)

if st.session_state.get("error"):
    col_msg, col_btn = st.columns([6, 1])
    with col_msg:
        st.error(st.session_state["error"])
    with col_btn:
        if st.button("Dismiss"):
            st.session_state.pop("error", None)
            st.rerun()

if "records" not in st.session_state:
    uploaded = st.file_uploader("Upload Excel file", type=["xlsx", "xls"])
    if uploaded is not None and uploaded.file_id != st.session_state.get("file_id"):
        st.session_state["file_id"] = uploaded.file_id
        try:
            st.session_state["records"] = parse_upload(uploaded.getvalue())
            st.session_state["file_name"] = uploaded.name
            for key in ("error", "insights", "insights_error"):
                st.session_state.pop(key, None)
        except SalesDashboardError as e:
            st.session_state["error"] = f"Failed to process file. {e}"
        st.rerun()
    st.stop()

opportunities, activities, details = st.session_state["records"]

# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
st.sidebar.title("Sales & Activity")
st.sidebar.markdown(f"Displaying data from **{st.session_state.get('file_name', '')}**")
if st.sidebar.button("Upload New File"):
    reset_state()
    st.rerun()
st.sidebar.divider()

pages = ["Pipeline Overview"]
if activities or details:
    pages += ["Manager Performance", "Employee Performance"]
page = st.sidebar.radio("Navigate", pages)

st.sidebar.divider()
st.sidebar.caption(
    f"{len(opportunities)} opportunities · {len(activities)} activities · "
    f"{len(details)} time entries"
)


# ---------------------------------------------------------------------------
# Helper: metric card
# ---------------------------------------------------------------------------
def metric_card(label: str, value: str, color: str = COLORS["primary"]):
    st.markdown(
        f"""
        <div style="background: linear-gradient(135deg, {color}22, {color}11);
                    border-left: 4px solid {color};
                    border-radius: 8px; padding: 16px; margin-bottom: 8px;">
            <div style="font-size: 13px; color: #888; font-weight: 600; text-transform: uppercase;">{label}</div>
            <div style="font-size: 28px; font-weight: 700; color: #222; margin: 4px 0;">{value}</div>
        </div>
        """,
        unsafe_allow_html=True,
    )


def hours_evolution_chart(trend_df):
    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=trend_df["label"],
        y=trend_df["hours"],
        name="Monthly Hours",
        marker_color=COLORS["primary"],
    ))
    if "trend" in trend_df.columns:
        fig.add_trace(go.Scatter(
            x=trend_df["label"],
            y=trend_df["trend"],
            name="Trend",
            mode="lines",
            line=dict(color=COLORS["trend"], width=2),
        ))
    fig.update_layout(
        yaxis_title="Hours",
        height=400,
        plot_bgcolor="rgba(0,0,0,0)",
        margin=dict(l=10, r=10, t=10, b=40),
    )
    return fig


def top_opportunities_chart(top_df):
    colors = [COLORS["booked"] if b else COLORS["secondary"] for b in top_df["is_booked"]]
    fig = go.Figure(go.Bar(
        x=top_df["hours"],
        y=top_df["name"].str.slice(0, 45),
        orientation="h",
        marker_color=colors,
        customdata=top_df[["opp_id", "total_value", "description"]],
        hovertemplate=(
            "<b>%{y}</b><br>"
            "Opp ID: %{customdata[0]}<br>"
            "Total Hours: %{x:.2f}<br>"
            "Value: $%{customdata[1]:,.0f}<br>"
            "%{customdata[2]}"
            "<extra></extra>"
        ),
    ))
    fig.update_layout(
        height=max(300, len(top_df) * 40),
        yaxis=dict(autorange="reversed"),
        xaxis_title="Hours",
        plot_bgcolor="rgba(0,0,0,0)",
        margin=dict(l=10, r=10, t=10, b=40),
    )
    return fig


def status_color(status: str) -> str:
    if is_booked(status):
        return f"background-color: {COLORS['booked']}22; color: {COLORS['booked']}"
    if status.lower() == "lost":
        return f"background-color: {COLORS['lost']}22; color: {COLORS['lost']}"
    return ""


# ===========================================================================
# PAGE: Pipeline Overview
# ===========================================================================
if page == "Pipeline Overview":
    st.title("Pipeline Overview")

    if not opportunities:
        st.info(f"No opportunities found in the '{OPPORTUNITY_SHEET}' sheet.")
    else:
        cols = st.columns(4)
        with cols[0]:
            metric_card("Opportunities", f"{len(opportunities):,}")
        with cols[1]:
            metric_card("Total Value", format_currency(sum(o.total for o in opportunities)))
        with cols[2]:
            metric_card("ADRM", format_currency(sum(o.adrm for o in opportunities)))
        with cols[3]:
            metric_card("Upside", format_currency(sum(o.upside for o in opportunities)))

        col1, col2 = st.columns(2)
        with col1:
            st.subheader("Opportunities by Status")
            status_df = status_breakdown(opportunities)
            fig = px.pie(status_df, names="status", values="count", hole=0.4)
            fig.update_layout(height=380, margin=dict(l=10, r=10, t=10, b=10))
            st.plotly_chart(fig, use_container_width=True)
        with col2:
            st.subheader("Total Value by Region")
            region_df = region_value_breakdown(opportunities)
            fig = go.Figure(go.Bar(
                x=region_df["region"],
                y=region_df["total"],
                marker_color=COLORS["secondary"],
            ))
            fig.update_layout(height=380, plot_bgcolor="rgba(0,0,0,0)",
                              margin=dict(l=10, r=10, t=10, b=40))
            st.plotly_chart(fig, use_container_width=True)

        st.subheader("Unique Opportunities per Owner (Top 15)")
        owner_df = owner_opportunity_counts(opportunities)
        fig = go.Figure(go.Bar(
            x=owner_df["opportunities"],
            y=owner_df["owner"],
            orientation="h",
            marker_color=COLORS["primary"],
        ))
        fig.update_layout(height=max(300, len(owner_df) * 30),
                          yaxis=dict(autorange="reversed"),
                          plot_bgcolor="rgba(0,0,0,0)",
                          margin=dict(l=10, r=10, t=10, b=40))
        st.plotly_chart(fig, use_container_width=True)

        st.divider()
        st.subheader("AI Insights")
        if st.button("Generate Insights"):
            with st.spinner("Asking the AI analyst..."):
                try:
                    st.session_state["insights"] = get_dashboard_insights(opportunities)
                    st.session_state.pop("insights_error", None)
                except InsightsUnavailableError as e:
                    st.session_state["insights_error"] = str(e)

        if st.session_state.get("insights_error"):
            st.warning(st.session_state["insights_error"])
            if st.button("Dismiss", key="dismiss_insights"):
                st.session_state.pop("insights_error", None)
                st.rerun()
        if st.session_state.get("insights"):
            st.markdown(st.session_state["insights"])


# ===========================================================================
# PAGE: Manager / Employee Performance
# ===========================================================================
else:
    mode = "manager" if page == "Manager Performance" else "employee"
    st.title(page)

    manager_filter = ALL_MANAGERS
    enriched = enrich_activities(activities, opportunities)

    col_filter, col_select = st.columns(2)
    if mode == "employee":
        with col_filter:
            manager_filter = st.selectbox("Filter by Manager", get_manager_filter_options(activities))

    options = get_selector_options(enriched, details, Selection(mode=mode, manager_filter=manager_filter))
    if not options:
        st.info(f"No {mode} data found for the current filter.")
        st.stop()

    with col_select:
        selected = st.selectbox(f"Select {mode}", options, key=f"select_{mode}")

    view = get_performance_view(
        opportunities,
        activities,
        details,
        Selection(mode=mode, selected=selected, manager_filter=manager_filter),
    )
    metrics = view["metrics"]

    cols = st.columns(5)
    cards = [
        ("#OPP", f"{metrics.unique_opps_count:,}"),
        ("Supported Pipeline", format_kilo_value(metrics.supported_pipeline)),
        ("Booked", format_currency(metrics.booked_value)),
        ("#Opp Booked", f"{metrics.booked_opps_count:,}"),
        ("#OPP LeanIX supported", f"{metrics.leanix_count:,}"),
    ]
    for i, (label, value) in enumerate(cards):
        with cols[i]:
            metric_card(label, value)

    # Activity log
    st.subheader(f"Activity Log (From {ACTIVITY_SHEET})")
    log_df = records_to_frame(view["activity_log"])
    if log_df.empty:
        st.info(f"No unique opportunities found in the activity log for the selected {mode}.")
    else:
        log_cols = [
            "opp_id", "activ_type", "acct_name", "opp_description",
            "adrm_total_value", "opp_status", "opp_acv_usd_k",
        ]
        if mode == "manager":
            log_cols.insert(0, "activ_team_empl_name")
        display_df = log_df[log_cols].rename(columns={
            "activ_team_empl_name": "Employee",
            "opp_id": "Opp ID",
            "activ_type": "Activ Type",
            "acct_name": "Acct Name",
            "opp_description": "Opp Description",
            "adrm_total_value": "Opp. Total Value",
            "opp_status": "Opp Status",
            "opp_acv_usd_k": "Opp ACV (K USD)",
        })
        display_df["Opp. Total Value"] = display_df["Opp. Total Value"].apply(format_currency)
        styled = display_df.style.map(status_color, subset=["Opp Status"])
        st.dataframe(styled, use_container_width=True, hide_index=True)

    # Hours charts
    trend_df = view["hours_trend"]
    if view["details"] and not trend_df.empty:
        st.subheader("Cumulative Hours Evolution")
        st.plotly_chart(hours_evolution_chart(trend_df), use_container_width=True)
    else:
        st.info("No time recording data available for detailed chart analysis.")

    top_df = view["top_opportunities"]
    if not top_df.empty:
        st.subheader("Top Opportunities by Hours Recorded")
        st.plotly_chart(top_opportunities_chart(top_df), use_container_width=True)

    with st.expander("Raw Data"):
        st.markdown(f"**Filtered Activities ({len(view['activities'])})**")
        st.dataframe(records_to_frame(view["activities"][:10]), use_container_width=True)
        st.markdown(f"**Filtered Activity Details ({len(view['details'])})**")
        st.dataframe(records_to_frame(view["details"][:10]), use_container_width=True)
        st.markdown("**Metrics**")
        st.json(asdict(metrics))
