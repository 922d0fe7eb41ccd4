from __future__ import annotations

from datetime import datetime, timezone

import altair as alt
import pandas as pd
import streamlit as st

from podcast_analytics.aggregate.build_result import aggregate_records
from podcast_analytics.config import get_settings
from podcast_analytics.ingest.fetch_downloads import DataUnavailableError, fetch_snapshot
from podcast_analytics.models import AggregateResult, CategoryShare, Snapshot

# =====================================================
# Page config
# =====================================================
st.set_page_config(page_title="OP3 Podcast Analytics", layout="wide")
st.title("📈 OP3.dev Podcast Analytics")
st.caption("Download analytics powered by OP3.dev")

# =====================================================
# Settings (strict: token and guid must be configured)
# =====================================================
try:
    settings = get_settings()
except RuntimeError as exc:
    st.warning(
        f"OP3 API credentials not configured. {exc}\n\n"
        "Add `OP3_API_TOKEN` and `PODCAST_GUID` to your `.env` file."
    )
    st.stop()

RANGE_LABELS = {
    "month": "This Month",
    "7d": "7 Days",
    "30d": "30 Days",
    "90d": "90 Days",
}

CHART_COLORS = ["#3b82f6", "#10b981", "#a855f7", "#f59e0b", "#ec4899"]


# =====================================================
# Helpers
# =====================================================
@st.cache_data(ttl=15 * 60, show_spinner="Loading OP3 downloads...")
def load_snapshot(time_range: str) -> Snapshot:
    """Fetch OP3 rows and titles; cached for 15 minutes per range.

    The snapshot carries its own `fetched_at`, which is the "now" every
    window on the page is computed from.
    """
    return fetch_snapshot(settings, time_range, datetime.now(timezone.utc))


def shares_frame(shares: list[CategoryShare], key_title: str) -> pd.DataFrame:
    """Return ranked shares as a display DataFrame."""
    return pd.DataFrame(
        [
            {key_title: s.key, "Downloads": s.count, "Share %": round(s.percentage, 1)}
            for s in shares
        ]
    )


def donut(df: pd.DataFrame, key_title: str) -> alt.Chart:
    return (
        alt.Chart(df)
        .mark_arc(innerRadius=50)
        .encode(
            theta=alt.Theta("Downloads:Q"),
            color=alt.Color(f"{key_title}:N", scale=alt.Scale(range=CHART_COLORS)),
            tooltip=[f"{key_title}:N", "Downloads:Q", "Share %:Q"],
        )
        .properties(height=260)
    )


# =====================================================
# SECTION 0 — TIME RANGE
# =====================================================
time_range = st.radio(
    "Time range",
    list(RANGE_LABELS),
    format_func=RANGE_LABELS.get,
    horizontal=True,
)

try:
    snapshot = load_snapshot(time_range)
except DataUnavailableError as exc:
    st.error(
        "Failed to load OP3 analytics data. Please check your API credentials and try again.\n\n"
        f"Error: {exc}"
    )
    st.stop()

# one "now" for the whole page so every window agrees with the fetch
analytics: AggregateResult = aggregate_records(
    snapshot.rows, snapshot.titles, time_range, snapshot.fetched_at
)

# =====================================================
# SECTION 1 — SUMMARY
# =====================================================
c1, c2, c3, c4 = st.columns(4)
with c1:
    st.metric("Total Downloads", f"{analytics.total_downloads:,}")
with c2:
    st.metric("Unique Audience", f"{analytics.unique_audience:,}")
with c3:
    st.metric("Last 7 Days", f"{analytics.downloads_7_days:,}")
with c4:
    st.metric("Last 30 Days", f"{analytics.downloads_30_days:,}")

st.divider()

# =====================================================
# SECTION 2 — CUMULATIVE DOWNLOADS BY EPISODE
# =====================================================
st.header("Downloads Over Time")

if not analytics.downloads_over_time:
    st.info("No download data available for this period.")
else:
    # top 5 episodes keep the chart readable
    top_ids = [e.episode_id for e in analytics.episode_stats[:5]]
    labels = {e.episode_id: e.label for e in analytics.episode_stats}
    df_series = pd.DataFrame(
        [
            {"date": p.date, "episode": labels.get(ep, ep), "downloads": p.totals.get(ep, 0)}
            for p in analytics.downloads_over_time
            for ep in top_ids
        ]
    )
    df_series["date"] = pd.to_datetime(df_series["date"])

    chart = (
        alt.Chart(df_series)
        .mark_line(point=True)
        .encode(
            x=alt.X("date:T", title="Date"),
            y=alt.Y("downloads:Q", title="Cumulative Downloads"),
            color=alt.Color("episode:N", title="Episode", scale=alt.Scale(range=CHART_COLORS)),
            tooltip=["date:T", "episode:N", "downloads:Q"],
        )
        .properties(height=320)
    )
    st.altair_chart(chart, width="stretch")

st.divider()

# =====================================================
# SECTION 3 — AUDIENCE BREAKDOWN
# =====================================================
col_geo, col_app, col_dev = st.columns(3)

for col, title, shares, key_title in (
    (col_geo, "🌍 Top Countries", analytics.top_countries, "Country"),
    (col_app, "🎧 Top Apps", analytics.top_apps, "App"),
    (col_dev, "📱 Devices", analytics.top_devices, "Device"),
):
    with col:
        st.subheader(title)
        if not shares:
            st.info("No data for this period.")
            continue
        df = shares_frame(shares, key_title)
        st.altair_chart(donut(df, key_title), width="stretch")
        st.dataframe(df, width="stretch", hide_index=True)

st.divider()

# =====================================================
# SECTION 4 — EPISODES
# =====================================================
st.header("Episode Performance")

if not analytics.episode_stats:
    st.info("No episode downloads for this period.")
else:
    df_eps = pd.DataFrame(
        [
            {
                "Episode": e.label,
                "Downloads": e.downloads,
                "Unique Listeners": e.unique_listeners,
            }
            for e in analytics.episode_stats
        ]
    )
    st.dataframe(df_eps, width="stretch", hide_index=True)

# =====================================================
# Footer
# =====================================================
st.caption("OP3.dev • pandas • Dask • Streamlit")
