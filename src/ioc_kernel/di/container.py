from __future__ import annotations
import inspect
import threading
from functools import partial
from typing import Any, Callable, Dict, Optional, Set, Tuple, Type, TypeVar

from ioc_kernel.autodiscover import MetadataProvider, ModuleTypeUniverse
from ioc_kernel.config.log_config import get_logger
from .errors import AmbiguousProvider, CircularDependency, ConstructionError
from .inject import build_up
from .registry import MISSING, Binding, BindingStore

"""
──────────────────────────────────────────────────────────────────────────────
Container (resolution engine)
──────────────────────────────────────────────────────────────────────────────
Purpose:
    Hand out lazily-built singletons for requested types and inject the
    marked attributes of the objects it hands out.

Resolution order for resolve(T):
    1. explicit binding for T (identity match, earliest registration wins)
    2. discovery: first class in scan order marked @resolves(X) with X being T
       or a subclass of T; it is built, injected, then bound under T
    3. plain T() — not cached

Field injection only ever uses steps 1 and 2.

Usage:
    container = Container(StaticTypeUniverse([SmtpMailer]))
    container.register(Clock, SystemClock)
    svc = container.resolve(SignupService)
──────────────────────────────────────────────────────────────────────────────
"""

log = get_logger(__name__)

T = TypeVar("T")


class Container:
    """Explicit, non-global registry: one instance per application (or per test)."""

    def __init__(self, metadata: Optional[MetadataProvider] = None, *, strict_discovery: bool = False):
        self.metadata: MetadataProvider = metadata if metadata is not None else ModuleTypeUniverse()
        self.strict_discovery = strict_discovery
        self._store = BindingStore()
        self._discovery_lock = threading.Lock()
        self._discovery_locks: Dict[Type[Any], threading.RLock] = {}
        self._local = threading.local()

    @classmethod
    def from_settings(cls, settings=None) -> "Container":
        from ioc_kernel.config.base_settings import KernelSettings

        settings = settings or KernelSettings()
        return cls(
            ModuleTypeUniverse(settings.discovery_module_names),
            strict_discovery=settings.strict_discovery,
        )

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def register(self, requested: Type[Any], implementation: Optional[Type[Any]] = None) -> None:
        """
        Bind 'requested' to a lazily default-constructed 'implementation'
        (or to 'requested' itself when no implementation is given).
        """
        impl = requested if implementation is None else implementation
        if not inspect.isclass(impl):
            raise TypeError(f"{impl!r} is not a class; use register_factory() for callables")
        if impl is not requested and inspect.isclass(requested):
            try:
                compatible = issubclass(impl, requested)
            except TypeError:
                # non-runtime protocols and typing constructs can't be checked
                compatible = True
            if not compatible:
                raise TypeError(f"{impl.__name__} does not implement {requested.__name__}")
        self._store.register(requested, partial(construct, impl))

    def register_factory(self, requested: Type[Any], factory: Callable[[], Any]) -> None:
        self._store.register(requested, factory)

    def register_instance(self, requested: Type[Any], instance: Any) -> None:
        self._store.register(requested, lambda: instance)

    def is_registered(self, requested: Type[Any]) -> bool:
        return self._store.find(requested) is not None

    def bindings(self) -> Tuple[Binding, ...]:
        return self._store.bindings()

    def clear(self) -> None:
        """
        Drop every binding and cached instance. Providers that cache their
        discovery scan (refresh() is optional) are told to forget it.
        """
        self._store.clear()
        refresh = getattr(self.metadata, "refresh", None)
        if refresh is not None:
            refresh()

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------
    def resolve(self, requested: Type[T]) -> T:
        instance, fresh = self._provide(requested)
        if instance is MISSING:
            log.debug("resolve.default_construct", type=requested.__name__)
            instance = construct(requested)
        elif fresh:
            # already built up while materializing
            return instance
        return build_up(self, instance)

    def try_resolve(self, requested: Type[T]) -> Optional[T]:
        """Binding or discovery only; None when neither provides 'requested'."""
        instance = self.lookup_or_discover(requested)
        return None if instance is MISSING else instance

    def build_up(self, existing: T) -> T:
        return build_up(self, existing)

    def lookup_or_discover(self, requested: Type[Any]) -> Any:
        return self._provide(requested)[0]

    def _provide(self, requested: Type[Any]) -> Tuple[Any, bool]:
        binding = self._store.find(requested)
        if binding is not None:
            return binding.materialize(self.build_up)
        return self._discover(requested)

    def _discover(self, requested: Type[Any]) -> Tuple[Any, bool]:
        candidates = self.metadata.types_resolving_to(requested)
        if not candidates:
            return MISSING, False
        if len(candidates) > 1:
            if self.strict_discovery:
                raise AmbiguousProvider(requested, candidates)
            log.warning(
                "discovery.ambiguous",
                type=requested.__name__,
                candidates=[c.__name__ for c in candidates],
                chosen=candidates[0].__name__,
            )
        provider = candidates[0]

        pending: Set[Type[Any]] = self._pending()
        if requested in pending:
            raise CircularDependency(requested)

        # Only the per-type lock is held while the provider is built. Existing
        # bindings are materialized after it is released.
        with self._discovery_guard(requested):
            existing = self._store.find(requested)
            if existing is None:
                pending.add(requested)
                try:
                    instance = construct(provider)
                    build_up(self, instance)
                finally:
                    pending.discard(requested)
                binding = self._store.register_built(requested, instance)

        if existing is None:
            existing = self._store.find(requested)
            if existing is binding:
                log.debug("discovery.bound", type=requested.__name__, provider=provider.__name__)
                return instance, True
        # bound meanwhile (racing discovery or explicit registration); that binding wins
        return existing.materialize(self.build_up)

    def _discovery_guard(self, requested: Type[Any]) -> threading.RLock:
        with self._discovery_lock:
            lock = self._discovery_locks.get(requested)
            if lock is None:
                lock = self._discovery_locks[requested] = threading.RLock()
            return lock

    def _pending(self) -> Set[Type[Any]]:
        pending = getattr(self._local, "pending", None)
        if pending is None:
            pending = self._local.pending = set()
        return pending


def construct(cls: Type[T]) -> T:
    """Default-construct 'cls', or raise ConstructionError if it needs arguments."""
    if inspect.isabstract(cls):
        raise ConstructionError(cls, TypeError("class is abstract"))
    try:
        inspect.signature(cls).bind()
    except TypeError as e:
        raise ConstructionError(cls, e) from e
    except ValueError:
        # no introspectable signature; let the call decide
        pass
    return cls()
