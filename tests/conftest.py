from __future__ import annotations

import pytest

from poiproxy.config.settings import get_settings


class FixedRandom:
    """Deterministic stand-in for `random.Random`: `random()` cycles through `values`."""

    def __init__(self, *values: float):
        self._values = list(values) or [0.5]
        self._i = 0

    def random(self) -> float:
        value = self._values[self._i % len(self._values)]
        self._i += 1
        return value

    def choice(self, seq):
        return seq[0]


@pytest.fixture
def fresh_settings():
    """Drop the cached settings before and after a test that changes env/config."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
