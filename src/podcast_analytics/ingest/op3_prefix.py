"""OP3 (Open Podcast Prefix Project) enclosure URL prefix helpers.

OP3 measures downloads by redirecting through `https://op3.dev/e/<url>`,
where `<url>` is the original enclosure URL without its scheme.
"""

from __future__ import annotations

import re

OP3_PREFIX = "https://op3.dev/e/"

_SCHEME_RE = re.compile(r"^https?://")


def add_op3_prefix(url: str) -> str:
    """Prefix `url` with the OP3 redirect unless it already has it.

    Args:
        url: Original enclosure URL (http or https).

    Returns:
        The OP3-prefixed URL; empty input is returned unchanged.
    """
    if not url:
        return url
    if url.startswith(OP3_PREFIX):
        return url
    return f"{OP3_PREFIX}{_SCHEME_RE.sub('', url)}"


def remove_op3_prefix(url: str) -> str:
    """Strip the OP3 redirect and restore an `https://` scheme."""
    if not url:
        return url
    if url.startswith(OP3_PREFIX):
        return f"https://{url[len(OP3_PREFIX):]}"
    return url


def has_op3_prefix(url: str | None) -> bool:
    """Return True when `url` already carries the OP3 redirect prefix."""
    return bool(url) and url.startswith(OP3_PREFIX)
