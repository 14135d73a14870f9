"""Pytest fixtures shared by the unit tests."""

import pytest

from ioc_kernel.testing.fixtures import container, universe  # noqa: F401


@pytest.fixture
def counter():
    """A mutable call counter for factories and constructors."""

    class Counter:
        def __init__(self):
            self.calls = 0

        def hit(self):
            self.calls += 1

    return Counter()
