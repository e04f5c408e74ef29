"""Shared fixtures for backend tests."""

import pytest


class FixedRandom:
    """Random source that always draws the same fraction of the requested range."""

    def __init__(self, fraction: float) -> None:
        self.fraction = fraction

    def uniform(self, a: float, b: float) -> float:
        return a + (b - a) * self.fraction

    def random(self) -> float:
        return self.fraction


@pytest.fixture
def fixed_rng():
    """Factory for FixedRandom instances: ``fixed_rng(0.5)`` draws range midpoints."""
    return FixedRandom
