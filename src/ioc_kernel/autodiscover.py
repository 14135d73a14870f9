# ioc_kernel/autodiscover.py
from __future__ import annotations
import importlib
import inspect
import pkgutil
import sys
import threading
from types import ModuleType
from typing import Iterable, Iterator, List, Optional, Protocol, Sequence, Type

from ioc_kernel.config.log_config import get_logger
from ioc_kernel.di.markers import FieldRef, injectable_fields, resolve_targets

"""
──────────────────────────────────────────────────────────────────────────────
Type universe & metadata providers
──────────────────────────────────────────────────────────────────────────────
Purpose:
    Answer the two questions the container asks about types:
      - which attributes of a class are injectable?
      - which known classes declare they resolve to a given type?

Implementations:
    - StaticTypeUniverse  → explicit, ordered table of candidate classes
    - ModuleTypeUniverse  → classes defined in imported modules/packages

Scan order is deterministic: table order for the static universe; sorted
module names, then definition order inside each module, for the module one.
The list of marked classes is scanned once and cached until refresh().
──────────────────────────────────────────────────────────────────────────────
"""

log = get_logger(__name__)


class MetadataProvider(Protocol):
    """
    The two questions the container asks. Providers that cache a scan may
    also define refresh(); Container.clear() calls it when present.
    """

    def injectable_fields(self, cls: type) -> List[FieldRef]: ...

    def types_resolving_to(self, target: type) -> List[type]: ...


def _resolves_to(cls: type, target: type) -> bool:
    for declared in resolve_targets(cls):
        try:
            if declared is target or (inspect.isclass(declared) and issubclass(declared, target)):
                return True
        except TypeError:
            # target is not a class (e.g. a typing construct)
            continue
    return False


class _ScanningUniverse:
    """Shared caching of the marked-class scan."""

    def __init__(self) -> None:
        self._marked: Optional[List[type]] = None
        self._lock = threading.Lock()

    def _scan(self) -> Iterable[type]:
        raise NotImplementedError

    def marked_types(self) -> List[type]:
        marked = self._marked
        if marked is None:
            with self._lock:
                if self._marked is None:
                    self._marked = [cls for cls in self._scan() if resolve_targets(cls)]
                    log.debug("universe.scanned", universe=type(self).__name__, marked=len(self._marked))
                marked = self._marked
        return marked

    def injectable_fields(self, cls: type) -> List[FieldRef]:
        return injectable_fields(cls)

    def types_resolving_to(self, target: type) -> List[type]:
        return [cls for cls in self.marked_types() if _resolves_to(cls, target)]

    def refresh(self) -> None:
        with self._lock:
            self._marked = None


class StaticTypeUniverse(_ScanningUniverse):
    """An explicit registration table: candidate classes in the order given."""

    def __init__(self, types: Sequence[type] = ()) -> None:
        super().__init__()
        self._types: List[type] = list(types)

    def add(self, *types: type) -> None:
        self._types.extend(types)
        self.refresh()

    def _scan(self) -> Iterable[type]:
        return list(self._types)


class ModuleTypeUniverse(_ScanningUniverse):
    """
    Classes defined in the given modules. Packages are walked recursively.
    With no modules given, every module already in sys.modules is scanned.
    """

    def __init__(self, modules: Sequence[str] = ()) -> None:
        super().__init__()
        self.modules = list(modules)
        self._loaded_count = -1

    def marked_types(self) -> List[type]:
        if not self.modules and len(sys.modules) != self._loaded_count:
            # new modules were imported since the last scan
            self.refresh()
            self._loaded_count = len(sys.modules)
        return super().marked_types()

    def _iter_modules(self) -> Iterator[ModuleType]:
        if not self.modules:
            for name in sorted(sys.modules):
                module = sys.modules.get(name)
                if isinstance(module, ModuleType):
                    yield module
            return

        seen = set()
        for name in self.modules:
            root = importlib.import_module(name)
            names = [name]
            if hasattr(root, "__path__"):
                found = pkgutil.walk_packages(root.__path__, prefix=name + ".")
                names.extend(sorted(info.name for info in found))
            for modname in names:
                if modname in seen:
                    continue
                seen.add(modname)
                yield importlib.import_module(modname)

    def _scan(self) -> Iterable[type]:
        out: List[type] = []
        for module in self._iter_modules():
            out.extend(_classes_defined_in(module))
        return out


def _classes_defined_in(module: ModuleType) -> List[type]:
    out: List[type] = []
    try:
        members = list(vars(module).values())
    except TypeError:
        return out
    for obj in members:
        if isinstance(obj, type) and obj.__module__ == module.__name__:
            out.append(obj)
    return out


def discover_providers(modules: Sequence[str]) -> List[Type]:
    """Return every class under the given modules carrying a resolves() marker."""
    return ModuleTypeUniverse(modules).marked_types()
