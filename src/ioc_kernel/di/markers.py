from __future__ import annotations
from dataclasses import dataclass
from typing import Annotated, Any, Callable, List, Tuple, Type, TypeVar, get_args, get_origin, get_type_hints

"""
──────────────────────────────────────────────────────────────────────────────
Injection Markers
──────────────────────────────────────────────────────────────────────────────
Purpose:
    Declare what the container may inject and what it may discover.

Markers:
    - Dependency  → attribute marker, used inside typing.Annotated
    - resolves(X) → class decorator stating the class can stand in for X

Example:
    class Mailer: ...

    @resolves(Mailer)
    class SmtpMailer(Mailer): ...

    class SignupService:
        mailer: Annotated[Mailer, Dependency]
──────────────────────────────────────────────────────────────────────────────
"""

T = TypeVar("T")

RESOLVES_ATTR = "__ioc_resolves__"


class Dependency:
    """Marks an annotated attribute as one the container must fill."""

    def __repr__(self) -> str:
        return "Dependency()"


@dataclass(frozen=True)
class FieldRef:
    """An injectable attribute: where it lives, its name and its declared type."""

    owner: type
    name: str
    type: Any


def resolves(*targets: type) -> Callable[[Type[T]], Type[T]]:
    """
    Class decorator recording the types the decorated class can resolve to.
    Can be stacked; targets accumulate in declaration order. Not inherited.
    """
    if not targets:
        raise TypeError("resolves() needs at least one target type")

    def decorator(cls: Type[T]) -> Type[T]:
        existing = cls.__dict__.get(RESOLVES_ATTR, ())
        # decorators apply bottom-up; keep the topmost first
        setattr(cls, RESOLVES_ATTR, tuple(targets) + tuple(existing))
        return cls

    return decorator


def resolve_targets(cls: type) -> Tuple[type, ...]:
    """Targets declared on cls itself (a subclass does not inherit its parent's markers)."""
    return tuple(vars(cls).get(RESOLVES_ATTR, ()))


def _is_dependency_marker(meta: Any) -> bool:
    return meta is Dependency or isinstance(meta, Dependency)


def injectable_fields(cls: type) -> List[FieldRef]:
    """
    Attributes of cls (base classes included) annotated with
    Annotated[SomeType, Dependency].
    """
    hints = get_type_hints(cls, include_extras=True)
    out: List[FieldRef] = []
    for name, typ in hints.items():
        if get_origin(typ) is not Annotated:
            continue
        base_type, *metadata = get_args(typ)
        if any(_is_dependency_marker(m) for m in metadata):
            out.append(FieldRef(cls, name, base_type))
    return out
