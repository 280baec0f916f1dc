from __future__ import annotations

import os
from dataclasses import dataclass

from .core.registry import DEFAULT_SWEEP_INTERVAL_S, DEFAULT_TTL_S


DEFAULT_BASE_URL = "https://api.1inch.dev"
DEFAULT_CORS_ORIGINS: tuple[str, ...] = (
    "http://localhost:3000",
    "http://localhost:5173",
    "http://localhost:8080",
)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be > 0")
    return value


@dataclass(frozen=True)
class Settings:
    """Proxy configuration.

    Built from environment variables by `Settings.from_env()`; tests construct it
    directly.
    """

    api_key: str | None = None
    base_url: str = DEFAULT_BASE_URL
    cors_origins: tuple[str, ...] = DEFAULT_CORS_ORIGINS
    secret_ttl_s: float = DEFAULT_TTL_S
    sweep_interval_s: float = DEFAULT_SWEEP_INTERVAL_S
    upstream_timeout_s: float = 15.0

    @classmethod
    def from_env(cls) -> "Settings":
        origins_raw = os.getenv("FUSION_PROXY_CORS_ORIGINS", "")
        origins = tuple(o.strip() for o in origins_raw.split(",") if o.strip()) or DEFAULT_CORS_ORIGINS
        return cls(
            api_key=os.getenv("ONEINCH_API_KEY") or None,
            base_url=(os.getenv("ONEINCH_BASE_URL") or DEFAULT_BASE_URL).rstrip("/"),
            cors_origins=origins,
            secret_ttl_s=_env_float("FUSION_PROXY_SECRET_TTL_S", DEFAULT_TTL_S),
            sweep_interval_s=_env_float("FUSION_PROXY_SWEEP_INTERVAL_S", DEFAULT_SWEEP_INTERVAL_S),
            upstream_timeout_s=_env_float("FUSION_PROXY_UPSTREAM_TIMEOUT_S", 15.0),
        )
