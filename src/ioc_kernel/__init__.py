# ioc_kernel/__init__.py
"""
ioc_kernel
──────────────────────────────────────────────────────────────
A minimal inversion-of-control kernel.
Provides:
    - Lazily built, cached singletons per requested type
    - Discovery of providers marked with @resolves(...)
    - Build-up: injection of Annotated[T, Dependency] attributes
    - Settings via IOC_* environment variables
    - Optional FastAPI integration (ioc_kernel.fastapi)
──────────────────────────────────────────────────────────────
"""

__version__ = "0.1.0"

from ioc_kernel.autodiscover import MetadataProvider, ModuleTypeUniverse, StaticTypeUniverse, discover_providers
from ioc_kernel.config.base_settings import KernelSettings
from ioc_kernel.config.log_config import configure_logging
from ioc_kernel.di.container import Container
from ioc_kernel.di.errors import (
    AmbiguousProvider,
    CircularDependency,
    ConstructionError,
    DependencyMissing,
    ResolutionError,
)
from ioc_kernel.di.markers import Dependency, FieldRef, resolves

__all__ = [
    "Container",
    "Dependency",
    "FieldRef",
    "resolves",
    "MetadataProvider",
    "StaticTypeUniverse",
    "ModuleTypeUniverse",
    "discover_providers",
    "KernelSettings",
    "configure_logging",
    "ResolutionError",
    "DependencyMissing",
    "ConstructionError",
    "AmbiguousProvider",
    "CircularDependency",
]
