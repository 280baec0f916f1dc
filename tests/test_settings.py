from __future__ import annotations

import pytest

from fusion_proxy.settings import DEFAULT_BASE_URL, DEFAULT_CORS_ORIGINS, Settings


_ENV = (
    "ONEINCH_API_KEY",
    "ONEINCH_BASE_URL",
    "FUSION_PROXY_CORS_ORIGINS",
    "FUSION_PROXY_SECRET_TTL_S",
    "FUSION_PROXY_SWEEP_INTERVAL_S",
    "FUSION_PROXY_UPSTREAM_TIMEOUT_S",
)


def _clear(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV:
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear(monkeypatch)
    s = Settings.from_env()
    assert s.api_key is None
    assert s.base_url == DEFAULT_BASE_URL
    assert s.cors_origins == DEFAULT_CORS_ORIGINS
    assert s.secret_ttl_s == 600.0
    assert s.sweep_interval_s == 600.0


def test_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear(monkeypatch)
    monkeypatch.setenv("ONEINCH_API_KEY", "k")
    monkeypatch.setenv("ONEINCH_BASE_URL", "https://example.test/")
    monkeypatch.setenv("FUSION_PROXY_CORS_ORIGINS", "https://a.test, https://b.test,")
    monkeypatch.setenv("FUSION_PROXY_SECRET_TTL_S", "30")

    s = Settings.from_env()
    assert s.api_key == "k"
    assert s.base_url == "https://example.test"
    assert s.cors_origins == ("https://a.test", "https://b.test")
    assert s.secret_ttl_s == 30.0


@pytest.mark.parametrize("raw", ["abc", "0", "-5"])
def test_rejects_bad_numbers(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    _clear(monkeypatch)
    monkeypatch.setenv("FUSION_PROXY_SECRET_TTL_S", raw)
    with pytest.raises(ValueError):
        Settings.from_env()
