from __future__ import annotations

import pytest


class FakeClock:
    """Settable wall clock for registry expiry tests."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
