from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest
import requests

from podcast_analytics.config import Settings
from podcast_analytics.ingest import fetch_downloads
from podcast_analytics.ingest.fetch_downloads import (
    DataUnavailableError,
    downloads_url,
    episode_titles,
    fetch_download_rows,
    fetch_range,
    fetch_show,
    fetch_snapshot,
    show_url,
)

SETTINGS = Settings(
    op3_api_token="tok",
    podcast_guid="917393e3-1b1e-5cef-ace4-edaa54e1f810",
    data_dir=Path("cache"),
)
NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


class FakeResponse:
    def __init__(self, payload: Any, status_code: int = 200, text: str = "") -> None:
        self._payload = payload
        self.status_code = status_code
        self.text = text

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code}", response=self)  # type: ignore[arg-type]

    def json(self) -> Any:
        return self._payload


def _fake_get(responses: dict[str, FakeResponse], calls: list[str]):
    def fake_get(url: str, timeout: float) -> FakeResponse:
        calls.append(url)
        for fragment, resp in responses.items():
            if fragment in url:
                return resp
        raise requests.ConnectionError("no route")
    return fake_get


def test_urls() -> None:
    assert show_url(SETTINGS) == (
        "https://op3.dev/api/1/shows/917393e3-1b1e-5cef-ace4-edaa54e1f810?episodes=include&token=tok"
    )
    assert downloads_url(SETTINGS, "abc", "2024-02-14", "2024-03-16") == (
        "https://op3.dev/api/1/downloads/show/abc"
        "?start=2024-02-14&end=2024-03-16&limit=20000&format=json&token=tok"
    )


def test_fetch_range_covers_selected_and_thirty_day_windows() -> None:
    assert fetch_range("7d", NOW) == ("2024-02-14", "2024-03-16")
    assert fetch_range("90d", NOW) == ("2023-12-16", "2024-03-16")
    assert fetch_range("month", NOW) == ("2024-02-14", "2024-03-16")


def test_fetch_show_and_rows(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []
    monkeypatch.setattr(fetch_downloads.requests, "get", _fake_get({
        "/shows/": FakeResponse({
            "showUuid": "abc",
            "episodes": [{"id": "e1", "title": "First"}, {"id": "e2"}],
        }),
        "/downloads/": FakeResponse({
            "rows": [{"time": "2024-03-01T00:00:00Z", "url": "https://x/1.mp3", "episodeId": "e1"}],
            "count": 1,
        }),
    }, calls))

    show = fetch_show(SETTINGS)
    assert show.show_uuid == "abc"
    assert episode_titles(show) == {"e1": "First"}

    rows = fetch_download_rows(SETTINGS, show.show_uuid, "2024-02-14", "2024-03-16")
    assert rows[0]["episodeId"] == "e1"
    assert len(calls) == 2


def test_http_error_becomes_data_unavailable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(fetch_downloads.requests, "get", _fake_get({
        "/downloads/": FakeResponse(None, status_code=401, text="bad token"),
    }, []))
    with pytest.raises(DataUnavailableError, match="401"):
        fetch_download_rows(SETTINGS, "abc", "2024-02-14", "2024-03-16")


def test_network_error_becomes_data_unavailable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(fetch_downloads.requests, "get", _fake_get({}, []))
    with pytest.raises(DataUnavailableError):
        fetch_show(SETTINGS)


def test_bad_payload_becomes_data_unavailable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(fetch_downloads.requests, "get", _fake_get({
        "/shows/": FakeResponse({"title": "no uuid"}),
    }, []))
    with pytest.raises(DataUnavailableError):
        fetch_show(SETTINGS)


def test_fetch_snapshot_is_stamped_with_the_fetch_instant(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(fetch_downloads.requests, "get", _fake_get({
        "/shows/": FakeResponse({"showUuid": "abc", "episodes": [{"id": "e1", "title": "First"}]}),
        "/downloads/": FakeResponse({"rows": [{"time": "2024-03-14T00:00:00Z", "episodeId": "e1"}]}),
    }, []))

    snap = fetch_snapshot(SETTINGS, "7d", NOW)

    assert snap.fetched_at == NOW
    assert (snap.start, snap.end) == ("2024-02-14", "2024-03-16")
    assert snap.titles == {"e1": "First"}
    assert snap.rows[0]["episodeId"] == "e1"
