"""Command-line interface for fetching OP3 data and building reports.

Provides subcommands: `fetch` and `report`. Each command is implemented as a
`cmd_*` function that accepts an argparse namespace.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from podcast_analytics.config import get_settings
from podcast_analytics.logging_config import configure_logging

# INGEST
from podcast_analytics.ingest.fetch_downloads import (
    DataUnavailableError,
    episode_titles,
    fetch_download_rows,
    fetch_range,
    fetch_show,
)
from podcast_analytics.ingest.snapshot import load_snapshot, save_snapshot, snapshot_path

# AGGREGATE
from podcast_analytics.aggregate.build_result import aggregate_records
from podcast_analytics.aggregate.windows import TIME_RANGES

log = logging.getLogger(__name__)


# --------------------------------------------------
# Helpers
# --------------------------------------------------
def _parse_now(value: str | None) -> datetime:
    """Return `--now` as an aware datetime (UTC when no offset), or the current time."""
    if not value:
        return datetime.now(timezone.utc)
    now = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now


def _fetch_live(time_range: str, now: datetime) -> tuple[list[dict[str, Any]], dict[str, str], str, str, str]:
    """Fetch rows and titles from OP3 covering `time_range`.

    Returns:
        Tuple of (rows, titles, show_uuid, start, end).
    """
    s = get_settings()
    show = fetch_show(s)
    start, end = fetch_range(time_range, now)
    rows = fetch_download_rows(s, show.show_uuid, start, end)
    return rows, episode_titles(show), show.show_uuid, start, end


# --------------------------------------------------
# FETCH
# --------------------------------------------------
def cmd_fetch(args: argparse.Namespace) -> None:
    """Fetch download rows for `--range` and save them as a snapshot.

    Args:
        args: argparse namespace with `range`, `out`, `now`.
    """
    now = _parse_now(args.now)
    rows, titles, show_uuid, start, end = _fetch_live(args.range, now)

    out = Path(args.out) if args.out else snapshot_path(get_settings().data_dir, show_uuid, start, end)
    save_snapshot(out, rows, titles, start, end, fetched_at=now)
    log.info("Fetch completed.")


# --------------------------------------------------
# REPORT
# --------------------------------------------------
def cmd_report(args: argparse.Namespace) -> None:
    """Build the aggregate for `--range` and print it as JSON.

    Rows come from `--snapshot` when given, otherwise from a live fetch.

    Args:
        args: argparse namespace with `range`, `snapshot`, `now`, `indent`.
    """
    now = _parse_now(args.now)

    if args.snapshot:
        snap = load_snapshot(Path(args.snapshot))
        rows, titles = snap.rows, snap.titles
    else:
        rows, titles, *_ = _fetch_live(args.range, now)

    result = aggregate_records(rows, titles, args.range, now)
    print(json.dumps(result.to_payload(), indent=args.indent))


# --------------------------------------------------
# CLI
# --------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    """Build and return the top-level argument parser for the CLI.

    Returns:
        Configured argparse.ArgumentParser instance.
    """
    p = argparse.ArgumentParser(prog="podcast_analytics")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_fetch = sub.add_parser("fetch")
    p_fetch.add_argument("--range", choices=TIME_RANGES, default="30d")
    p_fetch.add_argument("--out", default=None)
    p_fetch.add_argument("--now", default=None)

    p_report = sub.add_parser("report")
    p_report.add_argument("--range", choices=TIME_RANGES, default="30d")
    p_report.add_argument("--snapshot", default=None)
    p_report.add_argument("--now", default=None)
    p_report.add_argument("--indent", type=int, default=2)

    return p


def main(argv: list[str] | None = None) -> int:
    """CLI entry point: parse args, configure logging and dispatch commands."""
    args = build_parser().parse_args(argv)
    # stdout carries the JSON report
    configure_logging(Path("logs/podcast_analytics.log"), stream=sys.stderr)

    try:
        if args.cmd == "fetch":
            cmd_fetch(args)
        elif args.cmd == "report":
            cmd_report(args)
        else:
            return 2
    except DataUnavailableError as e:
        log.error("OP3 data unavailable: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
