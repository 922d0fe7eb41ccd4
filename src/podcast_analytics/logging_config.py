"""Utilities to configure consistent logging across the pipeline and CLI."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TextIO

# Third-party loggers that are chatty at INFO/DEBUG during OP3 fetches.
NOISY_LOGGERS = ("urllib3", "fsspec", "asyncio")


def configure_logging(
    log_path: Path | None = None,
    level: int = logging.INFO,
    quiet_libraries: bool = True,
    stream: TextIO | None = None,
) -> None:
    """Configure root logging handlers and formatting.

    Args:
        log_path: Optional path to a file where logs will be written.
        level: Logging level (defaults to INFO).
        quiet_libraries: Raise HTTP / IO library loggers to WARNING.
        stream: Console stream; defaults to stdout.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(stream or sys.stdout)]
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=handlers,
        force=True,
    )

    if quiet_libraries:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(max(level, logging.WARNING))
