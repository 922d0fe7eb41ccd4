"""Cumulative per-episode time series for growth charts.

Rows are bucketed by UTC calendar day and episode, then a running total is
taken down the date axis. Every episode seen in the window appears in every
point (zero before its first download), and totals never decrease.
"""
from __future__ import annotations

import pandas as pd

from podcast_analytics.models import TimeSeriesPoint


def day_bucket(timestamps: pd.Series) -> pd.Series:
    """Return the UTC calendar day (`YYYY-MM-DD`) of each timestamp."""
    return timestamps.dt.tz_convert("UTC").dt.strftime("%Y-%m-%d")


def daily_counts(rows: pd.DataFrame) -> pd.DataFrame:
    """Return a date x episode matrix of daily download counts.

    Rows without a timestamp or an episode are skipped. The index is the
    ascending ISO date; columns are episode ids; missing cells are 0.
    """
    dated = rows[rows["timestamp"].notna() & rows["item_id"].notna()]
    if dated.empty:
        return pd.DataFrame(dtype="int64")

    days = day_bucket(dated["timestamp"]).rename("date")
    counts = dated.groupby([days, dated["item_id"]], sort=False).size()
    return counts.unstack("item_id", fill_value=0).sort_index()


def cumulative_series(rows: pd.DataFrame) -> list[TimeSeriesPoint]:
    """Return day-ordered cumulative download totals per episode.

    Example:
        A, A on 2024-01-01 and B on 2024-01-02 yields
        ``[{date: 2024-01-01, A: 2, B: 0}, {date: 2024-01-02, A: 2, B: 1}]``.
    """
    daily = daily_counts(rows)
    if daily.empty:
        return []

    running = daily.cumsum()
    items = [str(c) for c in running.columns]

    return [
        TimeSeriesPoint(
            date=str(day),
            totals={item: int(v) for item, v in zip(items, values)},
        )
        for day, values in zip(running.index, running.to_numpy())
    ]
