"""Configuration helpers and Settings container.

This module provides a small `Settings` dataclass and `get_settings` which
reads the OP3 credentials and client options from the environment (a `.env`
file at the project root is loaded first).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os

from dotenv import load_dotenv

# Explicitly load .env from project root
PROJECT_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(PROJECT_ROOT / ".env")

DEFAULT_BASE_URL = "https://op3.dev/api/1"


@dataclass(frozen=True)
class Settings:
    """Container for OP3 client configuration read from the environment.

    Attributes:
        op3_api_token: OP3 API bearer token (sent as the `token` query param).
        podcast_guid: The show's `podcast:guid`, dashed form.
        op3_base_url: Root of the OP3 REST API.
        downloads_limit: Row limit requested from the downloads endpoint.
        data_dir: Local directory for fetched snapshots.
        timeout: HTTP timeout in seconds.
    """
    op3_api_token: str
    podcast_guid: str
    op3_base_url: str = DEFAULT_BASE_URL
    downloads_limit: int = 20_000
    data_dir: Path = Path("data/op3_cache")
    timeout: float = 60.0

    @property
    def show_uuid(self) -> str:
        """OP3 show UUID: the podcast guid as 32 hex chars, no dashes."""
        return self.podcast_guid.replace("-", "")


def get_settings() -> Settings:
    """Read environment variables and return a frozen `Settings` object.

    Raises:
        RuntimeError: if `OP3_API_TOKEN` or `PODCAST_GUID` is not set.
    """
    op3_api_token = os.getenv("OP3_API_TOKEN", "").strip()
    podcast_guid = os.getenv("PODCAST_GUID", "").strip()
    op3_base_url = os.getenv("OP3_BASE_URL", DEFAULT_BASE_URL).rstrip("/")
    downloads_limit = int(os.getenv("OP3_DOWNLOADS_LIMIT", "20000"))
    data_dir = Path(os.getenv("OP3_DATA_DIR", "data/op3_cache"))
    timeout = float(os.getenv("OP3_TIMEOUT", "60"))

    if not op3_api_token:
        raise RuntimeError(
            "OP3_API_TOKEN is required. Set it in .env "
            "(get a token at https://op3.dev)."
        )
    if not podcast_guid:
        raise RuntimeError(
            "PODCAST_GUID is required. Set it in .env "
            "(the show's podcast:guid, dashed form)."
        )

    return Settings(
        op3_api_token=op3_api_token,
        podcast_guid=podcast_guid,
        op3_base_url=op3_base_url,
        downloads_limit=downloads_limit,
        data_dir=data_dir,
        timeout=timeout,
    )
