"""Grouping and ranking over a windowed row frame.

Rankings are built with a single groupby per key. Groups keep first-seen
order (`sort=False`) and the count sort is stable, so equal counts stay in
the order their keys first appeared in the row set. Caps apply after the
sort.
"""
from __future__ import annotations

from typing import Mapping

import pandas as pd

from podcast_analytics.models import CategoryShare, EpisodeStat

TOP_N = 10


def percentage(count: int, total: int) -> float:
    """Return `100 * count / total`, or 0.0 when `total` is zero."""
    if total <= 0:
        return 0.0
    return 100.0 * count / total


def count_by(rows: pd.DataFrame, column: str) -> pd.Series:
    """Return row counts per non-empty value of `column`, count descending.

    Args:
        rows: Intake frame (usually already windowed).
        column: Canonical column to group by.

    Returns:
        Integer Series indexed by key value.
    """
    keys = rows[column]
    keys = keys[keys.notna()]
    counts = keys.groupby(keys, sort=False).size()
    return counts.sort_values(ascending=False, kind="stable")


def rank_categories(
    rows: pd.DataFrame,
    column: str,
    cap: int | None = None,
    total: int | None = None,
) -> list[CategoryShare]:
    """Rank the values of `column` by download count.

    Rows with an empty key are left out of the ranking but still count in the
    percentage denominator.

    Args:
        rows: Windowed intake frame.
        column: Canonical column, e.g. `country_code` or `agent_name`.
        cap: Keep at most this many entries (after sorting).
        total: Denominator for percentages; defaults to `len(rows)`.

    Returns:
        List of `CategoryShare`, count descending.
    """
    window_total = len(rows) if total is None else total
    counts = count_by(rows, column)
    if cap is not None:
        counts = counts.head(cap)

    return [
        CategoryShare(key=str(key), count=int(n), percentage=percentage(int(n), window_total))
        for key, n in counts.items()
    ]


def episode_stats(rows: pd.DataFrame, titles: Mapping[str, str] | None = None) -> list[EpisodeStat]:
    """Return downloads and distinct listeners per episode, downloads descending.

    The label is the episode title when `titles` has one, else the episode id.
    """
    titles = titles or {}
    keyed = rows[rows["item_id"].notna()]
    if keyed.empty:
        return []

    grouped = (
        keyed.groupby("item_id", sort=False)
        .agg(
            downloads=("timestamp", "size"),
            unique_listeners=("audience_hash", "nunique"),
        )
        .sort_values("downloads", ascending=False, kind="stable")
    )

    return [
        EpisodeStat(
            episode_id=str(item_id),
            label=titles.get(item_id) or str(item_id),
            downloads=int(r.downloads),
            unique_listeners=int(r.unique_listeners),
        )
        for item_id, r in zip(grouped.index, grouped.itertuples(index=False))
    ]


def unique_audience(rows: pd.DataFrame) -> int:
    """Distinct non-empty audience hashes across all of `rows`."""
    return int(rows["audience_hash"].nunique(dropna=True))
