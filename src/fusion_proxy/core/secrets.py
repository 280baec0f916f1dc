from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping


SECRET_NBYTES = 32
HEX_PREFIX = "0x"


class SecretNotFound(KeyError):
    """No live (unexpired, unredeemed) secret exists for the given hash."""

    def __init__(self, secret_hash: str) -> None:
        super().__init__(secret_hash)
        self.secret_hash = secret_hash

    def __str__(self) -> str:
        return f"Unknown, expired or already used secret hash: {self.secret_hash}"


class RandomSourceFailure(RuntimeError):
    """The secure random source could not produce a secret."""


@dataclass(frozen=True)
class Secret:
    """A swap secret and the hash it is looked up by.

    Notes:
    - `value` and `hash` are both `0x`-prefixed lowercase hex of 32 bytes.
    - `hash` is SHA3-256 over the decoded bytes of `value`.
    - `metadata` is caller supplied and never interpreted here. It is copied
      into a read-only mapping, so a stored record cannot be edited in place.
    """

    value: str
    hash: str
    created_at: float
    metadata: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))


def decode_hex32(text: str, *, name: str = "secret") -> bytes:
    """Decode a `0x`-prefixed 32-byte hex string."""

    if not isinstance(text, str):
        raise ValueError(f"{name} must be a string")
    s = text.strip()
    if s[:2].lower() == HEX_PREFIX:
        s = s[2:]
    if len(s) != 2 * SECRET_NBYTES:
        raise ValueError(f"{name} must be {SECRET_NBYTES} bytes of hex ({2 * SECRET_NBYTES} hex chars)")
    try:
        raw = bytes.fromhex(s)
    except ValueError:
        raise ValueError(f"{name} is not valid hex") from None
    # fromhex skips whitespace, so 64 chars can still decode short.
    if len(raw) != SECRET_NBYTES:
        raise ValueError(f"{name} is not valid hex")
    return raw


def encode_hex(raw: bytes) -> str:
    return HEX_PREFIX + raw.hex()


def normalize_hex32(text: str, *, name: str = "secret") -> str:
    return encode_hex(decode_hex32(text, name=name))


def secret_hash_of(value: str) -> str:
    # Hash the decoded bytes, not the hex text.
    return encode_hex(hashlib.sha3_256(decode_hex32(value)).digest())


def new_secret_value(random_bytes: Callable[[int], bytes]) -> str:
    try:
        raw = random_bytes(SECRET_NBYTES)
    except Exception as e:
        raise RandomSourceFailure(f"random source failed: {e}") from e
    if not isinstance(raw, (bytes, bytearray)) or len(raw) != SECRET_NBYTES:
        raise RandomSourceFailure(f"random source must return {SECRET_NBYTES} bytes")
    return encode_hex(bytes(raw))
