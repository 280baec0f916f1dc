from __future__ import annotations

from .registry import DEFAULT_SWEEP_INTERVAL_S, DEFAULT_TTL_S, SecretRegistry
from .secrets import (
    HEX_PREFIX,
    SECRET_NBYTES,
    RandomSourceFailure,
    Secret,
    SecretNotFound,
    decode_hex32,
    new_secret_value,
    normalize_hex32,
    secret_hash_of,
)

__all__ = [
    "SecretRegistry",
    "Secret",
    "SecretNotFound",
    "RandomSourceFailure",
    "DEFAULT_TTL_S",
    "DEFAULT_SWEEP_INTERVAL_S",
    "HEX_PREFIX",
    "SECRET_NBYTES",
    "decode_hex32",
    "new_secret_value",
    "normalize_hex32",
    "secret_hash_of",
]
