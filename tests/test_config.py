from __future__ import annotations

from pathlib import Path

import pytest

from podcast_analytics.config import get_settings


def test_get_settings_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OP3_API_TOKEN", "tok")
    monkeypatch.setenv("PODCAST_GUID", "917393e3-1b1e-5cef-ace4-edaa54e1f810")
    monkeypatch.setenv("OP3_BASE_URL", "https://op3.example/api/1/")
    monkeypatch.setenv("OP3_DOWNLOADS_LIMIT", "500")
    monkeypatch.setenv("OP3_DATA_DIR", "cache")

    s = get_settings()
    assert s.op3_api_token == "tok"
    assert s.show_uuid == "917393e31b1e5ceface4edaa54e1f810"
    assert s.op3_base_url == "https://op3.example/api/1"
    assert s.downloads_limit == 500
    assert s.data_dir == Path("cache")


@pytest.mark.parametrize("missing", ["OP3_API_TOKEN", "PODCAST_GUID"])
def test_get_settings_requires_credentials(monkeypatch: pytest.MonkeyPatch, missing: str) -> None:
    monkeypatch.setenv("OP3_API_TOKEN", "tok")
    monkeypatch.setenv("PODCAST_GUID", "guid")
    monkeypatch.delenv(missing)
    with pytest.raises(RuntimeError):
        get_settings()
