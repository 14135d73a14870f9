from __future__ import annotations
import types
from typing import TYPE_CHECKING, Any, Type, TypeVar, Union, get_args, get_origin

from ioc_kernel.config.log_config import get_logger
from .errors import DependencyMissing
from .registry import MISSING

if TYPE_CHECKING:
    from .container import Container

"""
──────────────────────────────────────────────────────────────────────────────
Build-Up (field injection)
──────────────────────────────────────────────────────────────────────────────
Purpose:
    Fill the marked attributes of an existing object from the container.

Mechanics:
    - Reads the injectable fields of type(obj) (own and inherited annotations)
    - Each field is resolved through explicit bindings, then discovery;
      plain default construction is never used here
    - Supports Optional[T]
    - Fails fast with DependencyMissing; fields assigned before the failing
      one keep their values

Example:
    class SignupService:
        mailer: Annotated[Mailer, Dependency]

    svc = build_up(container, SignupService())
──────────────────────────────────────────────────────────────────────────────
"""

log = get_logger(__name__)

T = TypeVar("T")


def _unwrap_optional(typ: Type[Any]) -> Type[Any]:
    if get_origin(typ) in (Union, types.UnionType):
        args = [a for a in get_args(typ) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return typ


def build_up(container: "Container", obj: T) -> T:
    """
    Injects every marked attribute of 'obj' and returns the same object.
    Raises DependencyMissing naming the owning type on the first field that
    has no provider.
    """
    owner = type(obj)
    for field in container.metadata.injectable_fields(owner):
        wanted = _unwrap_optional(field.type)
        instance = container.lookup_or_discover(wanted)
        if instance is MISSING:
            log.debug("buildup.missing", owner=owner.__name__, field=field.name)
            raise DependencyMissing(owner, field.name, wanted)
        setattr(obj, field.name, instance)
    return obj
