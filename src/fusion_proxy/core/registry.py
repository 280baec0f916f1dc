from __future__ import annotations

import logging
import secrets
import threading
import time
from typing import Any, Callable, Mapping

from .secrets import (
    RandomSourceFailure,
    Secret,
    SecretNotFound,
    new_secret_value,
    normalize_hex32,
    secret_hash_of,
)

logger = logging.getLogger(__name__)

DEFAULT_TTL_S = 600.0
DEFAULT_SWEEP_INTERVAL_S = 600.0


class SecretRegistry:
    """Process-local store of swap secrets, keyed by secret hash.

    A record is live from `generate()` until it is redeemed or until
    `created_at + ttl_s`. Expiry is checked on every lookup, so the periodic
    sweep only bounds memory; it is never needed for correctness.
    """

    def __init__(
        self,
        *,
        ttl_s: float = DEFAULT_TTL_S,
        sweep_interval_s: float = DEFAULT_SWEEP_INTERVAL_S,
        clock: Callable[[], float] = time.time,
        random_bytes: Callable[[int], bytes] = secrets.token_bytes,
    ) -> None:
        if not ttl_s > 0:
            raise ValueError("ttl_s must be > 0")
        if not sweep_interval_s > 0:
            raise ValueError("sweep_interval_s must be > 0")
        self.ttl_s = float(ttl_s)
        self.sweep_interval_s = float(sweep_interval_s)
        self._clock = clock
        self._random_bytes = random_bytes
        self._lock = threading.RLock()
        self._by_hash: dict[str, Secret] = {}
        self._sweeper: threading.Thread | None = None
        self._stop = threading.Event()

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_hash)

    def expires_at(self, secret: Secret) -> float:
        return secret.created_at + self.ttl_s

    def _is_expired(self, secret: Secret, now: float) -> bool:
        return now >= secret.created_at + self.ttl_s

    def generate(self, metadata: Mapping[str, Any] | None = None) -> Secret:
        value = new_secret_value(self._random_bytes)
        secret = Secret(
            value=value,
            hash=secret_hash_of(value),
            created_at=float(self._clock()),
            metadata=dict(metadata or {}),
        )
        with self._lock:
            self._by_hash[secret.hash] = secret
        logger.debug("generated secret %s", secret.hash)
        return secret

    def get(self, secret_hash: str) -> Secret:
        """Return the live secret for `secret_hash` without consuming it."""

        key = normalize_hex32(secret_hash, name="secret_hash")
        with self._lock:
            secret = self._by_hash.get(key)
            if secret is None:
                raise SecretNotFound(key)
            if self._is_expired(secret, self._clock()):
                del self._by_hash[key]
                raise SecretNotFound(key)
            return secret

    def redeem(self, *, secret: str | None = None, secret_hash: str | None = None) -> Secret:
        """Consume a secret, given either its raw value or its hash.

        A raw value is trusted as-is: it always redeems, whether or not the
        registry still holds it. When it does, the stored record is consumed too
        and its metadata is returned.

        A hash must reference a live record; lookup and removal happen under one
        lock so concurrent redemptions of the same hash cannot both succeed.
        """

        if secret is not None:
            value = normalize_hex32(secret, name="secret")
            key = secret_hash_of(value)
            with self._lock:
                stored = self._by_hash.pop(key, None)
                now = self._clock()
            if stored is not None and not self._is_expired(stored, now):
                logger.debug("redeemed secret %s by value", key)
                return stored
            logger.debug("redeemed unregistered secret %s by value", key)
            return Secret(value=value, hash=key, created_at=float(now))

        if secret_hash is None:
            raise ValueError("Provide secret or secret_hash")

        key = normalize_hex32(secret_hash, name="secret_hash")
        with self._lock:
            stored = self._by_hash.pop(key, None)
            if stored is None or self._is_expired(stored, self._clock()):
                raise SecretNotFound(key)
        logger.debug("redeemed secret %s by hash", key)
        return stored

    def sweep(self) -> int:
        """Drop every expired record. Returns the number removed."""

        with self._lock:
            now = self._clock()
            expired = [h for h, s in self._by_hash.items() if self._is_expired(s, now)]
            for h in expired:
                del self._by_hash[h]
        if expired:
            logger.info("swept %d expired secret(s)", len(expired))
        return len(expired)

    def reset(self) -> None:
        with self._lock:
            self._by_hash.clear()

    # Background sweep

    def _sweep_loop(self, stop: threading.Event) -> None:
        while not stop.wait(self.sweep_interval_s):
            self.sweep()

    @property
    def sweeper_running(self) -> bool:
        t = self._sweeper
        return t is not None and t.is_alive()

    def start_sweeper(self) -> None:
        with self._lock:
            if self.sweeper_running and not self._stop.is_set():
                return
            # Each run gets its own event, so a stale thread can never be revived.
            self._stop = threading.Event()
            self._sweeper = threading.Thread(
                target=self._sweep_loop, args=(self._stop,), name="secret-sweeper", daemon=True
            )
            self._sweeper.start()

    def stop_sweeper(self, *, timeout_s: float = 5.0) -> None:
        with self._lock:
            thread = self._sweeper
            self._stop.set()
        if thread is None:
            return
        thread.join(timeout=timeout_s)
        with self._lock:
            if self._sweeper is thread and not thread.is_alive():
                self._sweeper = None


__all__ = ["SecretRegistry", "SecretNotFound", "RandomSourceFailure", "DEFAULT_TTL_S", "DEFAULT_SWEEP_INTERVAL_S"]
