"""
Testing utilities for ioc-kernel apps.
──────────────────────────────────────────────────────────────
Provides pytest fixtures giving each test its own isolated container.
──────────────────────────────────────────────────────────────
"""
from .fixtures import container, override, universe

__all__ = ["container", "override", "universe"]
