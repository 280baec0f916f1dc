from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ..core.registry import SecretRegistry
from ..core.secrets import Secret


def iso_timestamp(ts: float) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def secret_to_dict(secret: Secret, registry: SecretRegistry) -> dict[str, Any]:
    return {
        "value": secret.value,
        "hash": secret.hash,
        "metadata": dict(secret.metadata),
        "createdAt": iso_timestamp(secret.created_at),
        "expiresAt": iso_timestamp(registry.expires_at(secret)),
    }


def secret_to_public_dict(secret: Secret, registry: SecretRegistry) -> dict[str, Any]:
    """Same as `secret_to_dict` without the raw value."""
    out = secret_to_dict(secret, registry)
    out.pop("value")
    return out
