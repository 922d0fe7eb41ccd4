from __future__ import annotations

import io
import logging
from pathlib import Path

from podcast_analytics.logging_config import configure_logging


def test_configure_logging_adds_stream_handler() -> None:
    # Ensure configuring logging doesn't raise and attaches a StreamHandler
    configure_logging(None)
    root = logging.getLogger()
    assert any(isinstance(h, logging.StreamHandler) for h in root.handlers)


def test_configure_logging_writes_to_given_stream_and_file(tmp_path: Path) -> None:
    stream = io.StringIO()
    log_path = tmp_path / "logs" / "run.log"
    configure_logging(log_path, stream=stream)

    logging.getLogger("podcast_analytics.test").info("hello %s", "op3")
    for h in logging.getLogger().handlers:
        h.flush()

    assert "hello op3" in stream.getvalue()
    assert "hello op3" in log_path.read_text(encoding="utf-8")
    assert logging.getLogger("urllib3").level == logging.WARNING
