# ioc_kernel/di/errors.py
from __future__ import annotations
from typing import Any, Optional, Sequence, Type


class ResolutionError(Exception):
    """Base class for every failure raised while resolving or building up objects."""


class DependencyMissing(ResolutionError):
    """
    A marked attribute could not be filled: neither an explicit binding nor a
    discovery marker provides its declared type.
    """

    def __init__(self, owner: Type[Any], field: Optional[str] = None, wanted: Optional[Type[Any]] = None):
        self.owner = owner
        self.field = field
        self.wanted = wanted
        message = f"Could not resolve dependency for {owner.__name__}"
        if field:
            message += f" (field '{field}'"
            if wanted is not None:
                message += f": {_qualname(wanted)}"
            message += ")"
        super().__init__(message)


class ConstructionError(ResolutionError):
    """The target class cannot be default-constructed."""

    def __init__(self, target: Type[Any], cause: BaseException):
        self.target = target
        super().__init__(f"Could not construct {_qualname(target)} without arguments: {cause}")


class AmbiguousProvider(ResolutionError):
    """Strict discovery found more than one class resolving to the same type."""

    def __init__(self, target: Type[Any], candidates: Sequence[Type[Any]]):
        self.target = target
        self.candidates = list(candidates)
        names = ", ".join(_qualname(c) for c in self.candidates)
        super().__init__(f"Several providers resolve to {_qualname(target)}: {names}")


class CircularDependency(ResolutionError):
    """A binding was requested again while its own instance was still being built."""

    def __init__(self, target: Type[Any]):
        self.target = target
        super().__init__(f"Circular dependency while building {_qualname(target)}")


def _qualname(typ: Any) -> str:
    module = getattr(typ, "__module__", None)
    name = getattr(typ, "__qualname__", None) or getattr(typ, "__name__", None) or repr(typ)
    if module and module != "builtins":
        return f"{module}.{name}"
    return name
