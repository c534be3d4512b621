import pandas as pd
import plotly.express as px
import streamlit as st

from admin_console import widgets
from db.aggregates import format_naira
from db.models import Analytics, DashboardStats
from db.query_state import QueryRunner, QueryStatus
from db.stats import fetch_analytics, fetch_dashboard_stats


def _stats_runner() -> QueryRunner:
    return QueryRunner(fetch_dashboard_stats, DashboardStats, keep_data_on_error=True)


def _analytics_runner() -> QueryRunner:
    return QueryRunner(fetch_analytics, Analytics, keep_data_on_error=True)


def render_dashboard():
    st.title("📊 Campus Market Dashboard")

    result = widgets.load("dashboard", _stats_runner)
    if result.status == QueryStatus.FAILURE:
        # Stats keep the last good values; just flag the failed refresh
        st.warning(f"Could not refresh dashboard: {result.error}")
    stats: DashboardStats = result.data

    # --- KPI Metrics ---
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total Users", f"{stats.total_users:,}")
    col2.metric("Total Merchants", f"{stats.total_merchants:,}")
    col3.metric("Total Revenue", format_naira(stats.total_revenue))
    col4.metric("Pending Verifications", f"{stats.pending_verifications:,}")

    st.divider()
    c1, c2 = st.columns(2)
    with c1:
        st.subheader("User Growth")
        if stats.user_growth:
            growth = pd.DataFrame(stats.user_growth)
            fig = px.line(growth, x="month", y=["users", "merchants"], markers=True)
            st.plotly_chart(fig, use_container_width=True)
    with c2:
        st.subheader("Revenue (₦)")
        if stats.revenue_by_month:
            revenue = pd.DataFrame(stats.revenue_by_month)
            st.plotly_chart(px.bar(revenue, x="month", y="revenue"), use_container_width=True)

    # --- Recent Activity ---
    st.subheader("Recent Activity")
    if not stats.recent_activity:
        st.info("No recent activity.")
    for activity in stats.recent_activity:
        st.markdown(f"**{activity.title}** · {activity.description}")
        st.caption(activity.created_at)


def render_analytics():
    st.title("📈 Analytics")

    result = widgets.load("analytics", _analytics_runner)
    if result.status == QueryStatus.FAILURE:
        st.warning(f"Could not refresh analytics: {result.error}")
    analytics: Analytics = result.data

    col1, col2, col3 = st.columns(3)
    col1.metric("Total Requests", f"{analytics.total_requests:,}")
    col2.metric("Total Products", f"{analytics.total_products:,}")
    col3.metric("Average Rating", f"{analytics.average_rating:.1f} ★")

    st.subheader("Revenue by Month")
    if analytics.revenue_by_month:
        revenue = pd.DataFrame(analytics.revenue_by_month)
        st.plotly_chart(px.line(revenue, x="month", y="revenue", markers=True), use_container_width=True)

    c1, c2 = st.columns(2)
    with c1:
        st.subheader("Users by School")
        if analytics.users_by_school:
            st.plotly_chart(
                px.bar(pd.DataFrame(analytics.users_by_school), x="school", y="count"),
                use_container_width=True,
            )
        st.subheader("Top Categories")
        if analytics.top_categories:
            st.plotly_chart(
                px.bar(pd.DataFrame(analytics.top_categories), x="count", y="category", orientation="h"),
                use_container_width=True,
            )
    with c2:
        st.subheader("Merchant Verification")
        if analytics.merchants_by_status:
            st.plotly_chart(
                px.pie(pd.DataFrame(analytics.merchants_by_status), names="status", values="count"),
                use_container_width=True,
            )
        st.subheader("Requests by University")
        widgets.table(analytics.requests_by_university, ["university", "count"], "No requests logged.")
