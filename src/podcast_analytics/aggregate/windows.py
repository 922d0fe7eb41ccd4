"""Time-window filtering over the intake frame.

Supported ranges are rolling 7/30/90 days and the current calendar month.
All boundaries are computed in UTC; the lower bound is inclusive and no upper
bound is applied, so rows stamped in the future (clock skew) are kept.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Literal, get_args

import pandas as pd

from podcast_analytics.clean.transform import empty_rows

TimeRange = Literal["7d", "30d", "90d", "month"]
TIME_RANGES: tuple[str, ...] = get_args(TimeRange)

ROLLING_DAYS = {"7d": 7, "30d": 30, "90d": 90}


def to_utc(now: datetime | pd.Timestamp) -> pd.Timestamp:
    """Return `now` as a tz-aware UTC Timestamp; naive input is taken as UTC."""
    ts = pd.Timestamp(now)
    if ts.tzinfo is None:
        return ts.tz_localize(timezone.utc)
    return ts.tz_convert(timezone.utc)


def window_start(time_range: str, now: datetime | pd.Timestamp) -> pd.Timestamp:
    """Return the inclusive lower bound of `time_range` relative to `now`.

    Args:
        time_range: One of "7d", "30d", "90d", "month".
        now: Reference instant.

    Raises:
        ValueError: for an unknown time range.
    """
    now_utc = to_utc(now)
    if time_range == "month":
        return now_utc.normalize().replace(day=1)
    if time_range in ROLLING_DAYS:
        return now_utc - timedelta(days=ROLLING_DAYS[time_range])
    raise ValueError(f"Unknown time range {time_range!r}; expected one of {TIME_RANGES}")


def filter_since(rows: pd.DataFrame | None, start: datetime | pd.Timestamp) -> pd.DataFrame:
    """Return rows with `timestamp >= start`. NaT timestamps never match."""
    if rows is None or rows.empty:
        return empty_rows()
    mask = rows["timestamp"] >= to_utc(start)
    return rows[mask.fillna(False).astype(bool)]


def filter_window(
    rows: pd.DataFrame | None,
    time_range: str,
    now: datetime | pd.Timestamp,
) -> pd.DataFrame:
    """Return the subset of `rows` inside `time_range` as of `now`."""
    return filter_since(rows, window_start(time_range, now))
