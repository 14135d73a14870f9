from __future__ import annotations
import enum
import threading
from typing import Any, Callable, Optional, Tuple, Type

from ioc_kernel.config.log_config import get_logger
from .errors import CircularDependency

"""
──────────────────────────────────────────────────────────────────────────────
Binding Store
──────────────────────────────────────────────────────────────────────────────
Purpose:
    Maintain the ordered list of type → factory bindings and the lazily built
    singleton behind each of them.

APIs:
    - register(type, factory) → Binding
    - register_built(type, instance) → Binding (already BUILT)
    - lookup(type)            → instance | MISSING
    - find(type)              → Binding | None
    - clear()

Rules:
    - Lookup is by identity and scans in insertion order: the earliest binding
      for a type wins, later duplicates are unreachable.
    - A binding's factory runs at most once. If the initializer fails, the
      binding stays unbuilt and keeps the constructed object; the next access
      only re-runs the initializer.

Usage:
    store.register(Mailer, SmtpMailer)
    mailer = store.lookup(Mailer)
"""

log = get_logger(__name__)

Initializer = Callable[[Any], None]


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


class BindingState(enum.Enum):
    UNBUILT = "unbuilt"
    BUILDING = "building"
    BUILT = "built"


class Binding:
    """One requested type, its factory and the instance once built."""

    def __init__(self, requested_type: Type[Any], factory: Callable[[], Any]):
        self.requested_type = requested_type
        self.factory = factory
        self.state = BindingState.UNBUILT
        self._instance: Any = MISSING
        # factory output waiting for a successful initializer run
        self._constructed: Any = MISSING
        self._lock = threading.RLock()

    @classmethod
    def of_instance(cls, requested_type: Type[Any], instance: Any) -> "Binding":
        """A binding that is BUILT from the start; its factory never runs."""
        binding = cls(requested_type, lambda: instance)
        binding._instance = instance
        binding.state = BindingState.BUILT
        return binding

    @property
    def built(self) -> bool:
        return self.state is BindingState.BUILT

    def materialize(self, initializer: Optional[Initializer] = None) -> Tuple[Any, bool]:
        """
        Return (instance, fresh). The first call runs the factory, then the
        optional initializer, and only then caches the instance. fresh is True
        only for that call.

        A failing factory leaves nothing behind. A failing initializer leaves
        the binding UNBUILT but keeps the factory's object, so a later call
        retries the initializer on it without running the factory again.
        """
        if self.state is BindingState.BUILT:
            return self._instance, False

        with self._lock:
            if self.state is BindingState.BUILT:
                return self._instance, False
            if self.state is BindingState.BUILDING:
                # the lock is re-entrant, so only the building thread gets here
                raise CircularDependency(self.requested_type)

            self.state = BindingState.BUILDING
            try:
                instance = self._constructed
                if instance is MISSING:
                    instance = self._constructed = self.factory()
                if initializer is not None:
                    initializer(instance)
            except BaseException:
                self.state = BindingState.UNBUILT
                raise

            self._instance = instance
            self._constructed = MISSING
            self.state = BindingState.BUILT
            log.debug("binding.built", type=self.requested_type.__name__)
            return instance, True

    @property
    def instance(self) -> Any:
        return self.materialize()[0]

    def __repr__(self) -> str:
        return f"<Binding {self.requested_type.__name__} {self.state.value}>"


class BindingStore:
    """Insertion-ordered bindings, copy-on-write so scans always see a snapshot."""

    def __init__(self) -> None:
        self._bindings: Tuple[Binding, ...] = ()
        self._lock = threading.Lock()

    def register(self, requested_type: Type[Any], factory: Callable[[], Any]) -> Binding:
        return self._append(Binding(requested_type, factory))

    def register_built(self, requested_type: Type[Any], instance: Any) -> Binding:
        return self._append(Binding.of_instance(requested_type, instance))

    def _append(self, binding: Binding) -> Binding:
        with self._lock:
            self._bindings = self._bindings + (binding,)
        log.debug(
            "binding.registered",
            type=binding.requested_type.__name__,
            position=len(self._bindings),
            built=binding.built,
        )
        return binding

    def find(self, requested_type: Type[Any]) -> Optional[Binding]:
        for binding in self._bindings:
            if binding.requested_type is requested_type:
                return binding
        return None

    def lookup(self, requested_type: Type[Any], initializer: Optional[Initializer] = None) -> Any:
        binding = self.find(requested_type)
        if binding is None:
            return MISSING
        return binding.materialize(initializer)[0]

    def bindings(self) -> Tuple[Binding, ...]:
        return self._bindings

    def clear(self) -> None:
        with self._lock:
            self._bindings = ()
        log.debug("bindings.cleared")

    def __len__(self) -> int:
        return len(self._bindings)
