from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from podcast_analytics.ingest.snapshot import load_snapshot, save_snapshot, snapshot_path


def test_save_and_load_snapshot(tmp_path: Path) -> None:
    path = snapshot_path(tmp_path / "cache", "abc123", "2024-02-01", "2024-03-16")
    rows = [{"time": "2024-03-01T00:00:00Z", "episodeId": "A", "countryCode": "US"}]
    fetched_at = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)

    save_snapshot(path, rows, {"A": "Episode A"}, "2024-02-01", "2024-03-16", fetched_at=fetched_at)
    snap = load_snapshot(path)

    assert path.name == "downloads_abc123_2024-02-01_2024-03-16.json"
    assert snap.rows == rows
    assert snap.titles == {"A": "Episode A"}
    assert snap.fetched_at == fetched_at


def test_load_snapshot_rejects_garbage(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text('{"rows": "nope"}', encoding="utf-8")
    with pytest.raises(ValueError):
        load_snapshot(path)
