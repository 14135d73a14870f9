"""
──────────────────────────────────────────────────────────────────────────────
ioc_kernel.testing.fixtures
──────────────────────────────────────────────────────────────────────────────
Purpose:
    Provide reusable pytest fixtures for container-based applications.

Exports:
    - universe   → an empty StaticTypeUniverse the test can add providers to
    - container  → a fresh Container over that universe, cleared afterwards
    - override(container, type, instance) → bind a stand-in ahead of the app

Usage in your test:
    from ioc_kernel.testing.fixtures import container, universe

    def test_signup(container, universe):
        universe.add(FakeMailer)
        svc = container.resolve(SignupService)
        assert isinstance(svc.mailer, FakeMailer)
──────────────────────────────────────────────────────────────────────────────
"""

from typing import Any, Type

import pytest

from ioc_kernel.autodiscover import StaticTypeUniverse
from ioc_kernel.di.container import Container


# ──────────────────────────────────────────────────────────────
# Type universe (per test)
# ──────────────────────────────────────────────────────────────
@pytest.fixture()
def universe():
    """An explicit, initially empty table of discoverable classes."""
    return StaticTypeUniverse()


# ──────────────────────────────────────────────────────────────
# Container (per test)
# ──────────────────────────────────────────────────────────────
@pytest.fixture()
def container(universe):
    """A container that only discovers what the test puts in 'universe'."""
    c = Container(universe)
    yield c
    c.clear()


# ──────────────────────────────────────────────────────────────
# Helper to put a stand-in in front of the real wiring
# ──────────────────────────────────────────────────────────────
def override(container: Container, requested: Type[Any], instance: Any) -> None:
    """
    Bind 'requested' to 'instance'. Only works before the real binding is
    registered, since the earliest registration for a type wins.
    """
    if container.is_registered(requested):
        raise RuntimeError(f"{requested.__name__} is already bound; override it before wiring the app")
    container.register_instance(requested, instance)
