from __future__ import annotations

import pytest
from pydantic import ValidationError

from podcast_analytics.models import CategoryShare, ShowResponse, TimeSeriesPoint


def test_show_response_parses_op3_payload() -> None:
    show = ShowResponse.model_validate({
        "showUuid": "abc",
        "title": "My Show",
        "statsPageUrl": "https://op3.dev/show/abc",
        "episodes": [
            {"id": "e1", "title": "First", "pubdate": "2024-01-01T00:00:00Z", "itemGuid": "x"},
            {"id": "e2"},
        ],
    })
    assert show.show_uuid == "abc"
    assert [e.title for e in show.episodes] == ["First", None]


def test_time_series_point_record_and_date_format() -> None:
    p = TimeSeriesPoint(date="2024-01-02", totals={"A": 2, "B": 1})
    assert p.to_record() == {"date": "2024-01-02", "A": 2, "B": 1}
    with pytest.raises(ValidationError):
        TimeSeriesPoint(date="01/02/2024", totals={})


def test_category_share_rejects_negative_count() -> None:
    with pytest.raises(ValidationError):
        CategoryShare(key="US", count=-1, percentage=0.0)


def test_time_series_record_keeps_date_when_an_episode_is_named_date() -> None:
    p = TimeSeriesPoint(date="2024-01-02", totals={"date": 1, "A": 3})
    assert p.to_record() == {"date": "2024-01-02", "A": 3}
    assert p.totals["date"] == 1
