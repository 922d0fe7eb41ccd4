"""Assemble the analytics result set for one time range.

`total_downloads`, `downloads_7_days` and `downloads_30_days` always use
their own fixed bounds over the full row set. Everything else (audience,
episode stats, rankings, time series) uses the requested window.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

import pandas as pd

from podcast_analytics.aggregate.rankings import (
    TOP_N,
    episode_stats,
    rank_categories,
    unique_audience,
)
from podcast_analytics.aggregate.timeseries import cumulative_series
from podcast_analytics.aggregate.windows import filter_window, to_utc, window_start
from podcast_analytics.clean.transform import load_rows
from podcast_analytics.models import AggregateResult

log = logging.getLogger(__name__)


def build_aggregate(
    rows: pd.DataFrame | None,
    titles: Mapping[str, str] | None = None,
    time_range: str = "30d",
    now: datetime | pd.Timestamp | None = None,
) -> AggregateResult:
    """Compute the `AggregateResult` for `time_range` as of `now`.

    Args:
        rows: Intake frame from `load_rows`. ``None`` or empty yields an
            all-zero result.
        titles: Episode id -> title lookup used for episode labels.
        time_range: "7d", "30d", "90d" or "month".
        now: Reference instant; defaults to the current UTC time. Pass one
            value for every call made while serving a single request.

    Raises:
        ValueError: for an unknown time range.
    """
    now_utc = to_utc(now if now is not None else datetime.now(timezone.utc))
    start = window_start(time_range, now_utc)

    if rows is None or rows.empty:
        log.info("No download rows; returning empty result for %s", time_range)
        return AggregateResult()

    window = filter_window(rows, time_range, now_utc)
    log.info(
        "Aggregating %d of %d rows for %s (since %s)",
        len(window),
        len(rows),
        time_range,
        start.isoformat(),
    )

    return AggregateResult(
        total_downloads=len(rows),
        unique_audience=unique_audience(window),
        downloads_7_days=len(filter_window(rows, "7d", now_utc)),
        downloads_30_days=len(filter_window(rows, "30d", now_utc)),
        episode_stats=episode_stats(window, titles),
        top_countries=rank_categories(window, "country_code", cap=TOP_N),
        top_apps=rank_categories(window, "agent_name", cap=TOP_N),
        top_devices=rank_categories(window, "device_type"),
        downloads_over_time=cumulative_series(window),
    )


def aggregate_records(
    records: Iterable[Mapping[str, Any]] | None,
    titles: Mapping[str, str] | None = None,
    time_range: str = "30d",
    now: datetime | pd.Timestamp | None = None,
) -> AggregateResult:
    """Run row intake on raw records, then `build_aggregate`."""
    return build_aggregate(load_rows(records), titles, time_range, now)
