"""Pydantic models for OP3 payloads and the aggregate analytics result.

Input models (`Episode`, `ShowResponse`, `Snapshot`) validate what comes back
from the OP3 API or a local snapshot file. Output models define the result
set handed to the dashboard and the CLI.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =========================================================
# OP3 PAYLOADS
# =========================================================

class Episode(BaseModel):
    """Episode entry of the OP3 `/shows/{id}?episodes=include` response."""
    model_config = ConfigDict(extra="ignore")
    id: str
    title: str | None = None
    pubdate: str | None = None


class ShowResponse(BaseModel):
    """Schema for the OP3 show lookup response.

    Attributes:
        show_uuid: OP3 show UUID used by the downloads endpoint.
        title: Show title when OP3 knows it.
        podcast_guid: The show's `podcast:guid`.
        stats_page_url: Public OP3 stats page for the show.
        episodes: Episodes known to OP3 (only present with `episodes=include`).
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True)
    show_uuid: str = Field(..., alias="showUuid")
    title: str | None = None
    podcast_guid: str | None = Field(None, alias="podcastGuid")
    stats_page_url: str | None = Field(None, alias="statsPageUrl")
    episodes: list[Episode] = Field(default_factory=list)


class DownloadsPage(BaseModel):
    """Schema for the OP3 `/downloads/show/{uuid}?format=json` response.

    Only the first page is read; `continuation_token` is set when OP3 had
    more rows than the requested limit.
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True)
    rows: list[dict[str, Any]] = Field(default_factory=list)
    count: int | None = None
    continuation_token: str | None = Field(None, alias="continuationToken")


class Snapshot(BaseModel):
    """A fetched row set plus its title lookup, as stored on disk."""
    model_config = ConfigDict(extra="forbid")
    fetched_at: datetime
    start: str
    end: str
    rows: list[dict[str, Any]] = Field(default_factory=list)
    titles: dict[str, str] = Field(default_factory=dict)


# =========================================================
# AGGREGATE RESULT
# =========================================================

class EpisodeStat(BaseModel):
    """Per-episode downloads and distinct listeners in the window."""
    model_config = ConfigDict(extra="forbid")
    episode_id: str
    label: str
    downloads: int = Field(..., ge=0)
    unique_listeners: int = Field(..., ge=0)


class CategoryShare(BaseModel):
    """One ranked category (country, app or device) and its share."""
    model_config = ConfigDict(extra="forbid")
    key: str
    count: int = Field(..., ge=0)
    percentage: float = Field(..., ge=0)


class TimeSeriesPoint(BaseModel):
    """Cumulative downloads per episode as of one UTC calendar day."""
    model_config = ConfigDict(extra="forbid")
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    totals: dict[str, int] = Field(default_factory=dict)

    def to_record(self) -> dict[str, Any]:
        """Return the flat chart row: `{"date": ..., <episode_id>: total, ...}`.

        An episode whose id is literally "date" is shadowed by the date key in
        this shape; its total stays available in `totals`.
        """
        record: dict[str, Any] = dict(self.totals)
        record["date"] = self.date
        return record


class AggregateResult(BaseModel):
    """Analytics result set for one (time range, row set) pair.

    Attributes:
        total_downloads: Every row of the full row set.
        unique_audience: Distinct audience hashes in the selected window.
        downloads_7_days: Rows in the fixed rolling 7-day window.
        downloads_30_days: Rows in the fixed rolling 30-day window.
        episode_stats: Per-episode stats, downloads descending.
        top_countries: Top 10 countries by downloads.
        top_apps: Top 10 client apps by downloads.
        top_devices: All device types by downloads.
        downloads_over_time: Day-ordered cumulative per-episode totals.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)
    total_downloads: int = Field(0, ge=0)
    unique_audience: int = Field(0, ge=0)
    downloads_7_days: int = Field(0, ge=0)
    downloads_30_days: int = Field(0, ge=0)
    episode_stats: list[EpisodeStat] = Field(default_factory=list)
    top_countries: list[CategoryShare] = Field(default_factory=list)
    top_apps: list[CategoryShare] = Field(default_factory=list)
    top_devices: list[CategoryShare] = Field(default_factory=list)
    downloads_over_time: list[TimeSeriesPoint] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """Return the camelCase, JSON-ready shape consumed by chart clients."""

        def _shares(items: list[CategoryShare], key_name: str) -> list[dict[str, Any]]:
            return [
                {key_name: s.key, "count": s.count, "percentage": s.percentage}
                for s in items
            ]

        return {
            "totalDownloads": self.total_downloads,
            "uniqueAudience": self.unique_audience,
            "downloads7Days": self.downloads_7_days,
            "downloads30Days": self.downloads_30_days,
            "episodeStats": [
                {
                    "episodeId": e.episode_id,
                    "url": e.label,
                    "downloads": e.downloads,
                    "uniqueListeners": e.unique_listeners,
                }
                for e in self.episode_stats
            ],
            "topCountries": _shares(self.top_countries, "countryCode"),
            "topApps": _shares(self.top_apps, "appName"),
            "topDevices": _shares(self.top_devices, "deviceType"),
            "downloadsOverTime": [p.to_record() for p in self.downloads_over_time],
        }
