"""OP3 API client: show lookup and download rows.

`fetch_show` resolves the configured podcast guid to an OP3 show (and its
episode titles); `fetch_download_rows` pulls one page of download rows for a
date range. Network and HTTP failures are raised as `DataUnavailableError`.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any

import pandas as pd
import requests
from pydantic import ValidationError

from podcast_analytics.aggregate.windows import to_utc, window_start
from podcast_analytics.config import Settings
from podcast_analytics.models import DownloadsPage, ShowResponse, Snapshot

log = logging.getLogger(__name__)

# the fixed 30-day count needs at least this much history
MIN_HISTORY_DAYS = 30


class DataUnavailableError(RuntimeError):
    """Raised when the OP3 API cannot deliver the show or its download rows."""


def show_url(settings: Settings) -> str:
    """Return the OP3 show lookup URL (episodes included) for the configured guid."""
    return (
        f"{settings.op3_base_url}/shows/{settings.podcast_guid}"
        f"?episodes=include&token={settings.op3_api_token}"
    )


def downloads_url(settings: Settings, show_uuid: str, start: str, end: str) -> str:
    """Return the OP3 downloads URL for `show_uuid` between two ISO dates."""
    return (
        f"{settings.op3_base_url}/downloads/show/{show_uuid}"
        f"?start={start}&end={end}&limit={settings.downloads_limit}"
        f"&format=json&token={settings.op3_api_token}"
    )


def fetch_range(time_range: str, now: datetime | pd.Timestamp) -> tuple[str, str]:
    """Return `(start, end)` ISO dates to fetch for `time_range`.

    The start reaches back far enough for both the selected window and the
    fixed 30-day count; the end is the day after `now` (OP3 treats it as
    exclusive).
    """
    now_utc = to_utc(now)
    start = min(window_start(time_range, now_utc), now_utc - timedelta(days=MIN_HISTORY_DAYS))
    end = now_utc + timedelta(days=1)
    return start.strftime("%Y-%m-%d"), end.strftime("%Y-%m-%d")


def _get_json(url: str, timeout: float) -> Any:
    # token is in the query string; never log the full URL
    try:
        r = requests.get(url, timeout=timeout)
        r.raise_for_status()
        return r.json()
    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else "?"
        body = e.response.text[:200] if e.response is not None else ""
        log.error("OP3 API error: %s %s", status, body)
        raise DataUnavailableError(f"OP3 API error: {status} - {body}") from e
    except (requests.RequestException, ValueError) as e:
        log.error("OP3 request failed: %s", e)
        raise DataUnavailableError(f"OP3 request failed: {e}") from e


def fetch_show(settings: Settings) -> ShowResponse:
    """Look up the show (and its episodes) for `settings.podcast_guid`.

    Raises:
        DataUnavailableError: on network, HTTP or payload errors.
    """
    log.info("Fetching OP3 show %s", settings.podcast_guid)
    payload = _get_json(show_url(settings), settings.timeout)
    try:
        show = ShowResponse.model_validate(payload)
    except ValidationError as e:
        raise DataUnavailableError(f"Unexpected OP3 show payload: {e}") from e
    log.info("Show %s: %d episodes", show.show_uuid, len(show.episodes))
    return show


def episode_titles(show: ShowResponse) -> dict[str, str]:
    """Return episode id -> title for episodes that have a title."""
    return {ep.id: ep.title for ep in show.episodes if ep.title}


def fetch_download_rows(settings: Settings, show_uuid: str, start: str, end: str) -> list[dict[str, Any]]:
    """Fetch one page of download rows for `show_uuid` in `[start, end)`.

    Args:
        settings: Client settings (token, base URL, row limit, timeout).
        show_uuid: OP3 show UUID from `fetch_show`.
        start: Inclusive ISO start date.
        end: Exclusive ISO end date.

    Returns:
        Raw OP3 download rows (dicts with `time`, `url`, `episodeId`, ...).

    Raises:
        DataUnavailableError: on network, HTTP or payload errors.
    """
    log.info("Fetching OP3 downloads for %s from %s to %s", show_uuid, start, end)
    payload = _get_json(downloads_url(settings, show_uuid, start, end), settings.timeout)
    try:
        page = DownloadsPage.model_validate(payload)
    except ValidationError as e:
        raise DataUnavailableError(f"Unexpected OP3 downloads payload: {e}") from e

    if page.continuation_token:
        log.warning(
            "OP3 returned more than %d rows; only the first page is used",
            settings.downloads_limit,
        )
    log.info("Fetched %d download rows", len(page.rows))
    return page.rows


def fetch_snapshot(settings: Settings, time_range: str, now: datetime | pd.Timestamp) -> Snapshot:
    """Fetch the show and its rows for `time_range`, stamped with `now`.

    The returned `fetched_at` is the instant the fetch window was computed
    from; aggregate with it so windows match the rows that were fetched.
    """
    show = fetch_show(settings)
    start, end = fetch_range(time_range, now)
    rows = fetch_download_rows(settings, show.show_uuid, start, end)
    return Snapshot(
        fetched_at=to_utc(now).to_pydatetime(),
        start=start,
        end=end,
        rows=rows,
        titles=episode_titles(show),
    )
