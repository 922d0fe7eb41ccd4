"""Local JSON snapshots of a fetched row set and its title lookup."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

from pydantic import ValidationError

from podcast_analytics.models import Snapshot

log = logging.getLogger(__name__)


def snapshot_path(data_dir: Path, show_uuid: str, start: str, end: str) -> Path:
    """Return the default snapshot file path for a fetch."""
    return data_dir / f"downloads_{show_uuid}_{start}_{end}.json"


def save_snapshot(
    path: Path,
    rows: list[dict[str, Any]],
    titles: Mapping[str, str],
    start: str,
    end: str,
    fetched_at: datetime | None = None,
) -> Path:
    """Write rows and titles to `path` as JSON, creating parent directories.

    Returns:
        The path written.
    """
    snap = Snapshot(
        fetched_at=fetched_at or datetime.now(timezone.utc),
        start=start,
        end=end,
        rows=rows,
        titles=dict(titles),
    )
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(snap.model_dump_json(indent=2), encoding="utf-8")
    log.info("Saved snapshot: %s (%d rows)", path, len(rows))
    return path


def load_snapshot(path: Path) -> Snapshot:
    """Read a snapshot written by `save_snapshot`.

    Raises:
        FileNotFoundError: if `path` does not exist.
        ValueError: if the file is not a valid snapshot.
    """
    text = path.read_text(encoding="utf-8")
    try:
        snap = Snapshot.model_validate_json(text)
    except ValidationError as e:
        raise ValueError(f"{path} is not a valid snapshot: {e}") from e
    log.info("Loaded snapshot: %s (%d rows)", path, len(snap.rows))
    return snap
