"""Tests for the binding store."""

import threading
import time

import pytest

from ioc_kernel.di.errors import CircularDependency
from ioc_kernel.di.registry import MISSING, Binding, BindingState, BindingStore


class IService:
    pass


class ServiceImpl(IService):
    pass


class TestBinding:
    """Tests for a single lazily built binding."""

    def test_factory_not_called_until_first_access(self, counter):
        """Test that registering a binding does not build it."""

        def factory():
            counter.hit()
            return ServiceImpl()

        binding = Binding(IService, factory)

        assert counter.calls == 0
        assert binding.state is BindingState.UNBUILT
        assert not binding.built

    def test_materialize_caches_instance(self, counter):
        """Test that the factory runs once and the instance is reused."""

        def factory():
            counter.hit()
            return ServiceImpl()

        binding = Binding(IService, factory)

        first, first_fresh = binding.materialize()
        second, second_fresh = binding.materialize()

        assert first is second
        assert first_fresh is True
        assert second_fresh is False
        assert counter.calls == 1
        assert binding.built

    def test_initializer_runs_before_caching(self):
        """Test that the initializer sees the instance before it is cached."""
        seen = []
        binding = Binding(IService, ServiceImpl)

        instance = binding.materialize(seen.append)[0]

        assert seen == [instance]

    def test_failed_factory_caches_nothing(self, counter):
        """Test that a raising factory leaves the binding unbuilt and retryable."""

        def factory():
            counter.hit()
            if counter.calls == 1:
                raise RuntimeError("boom")
            return ServiceImpl()

        binding = Binding(IService, factory)

        with pytest.raises(RuntimeError):
            binding.materialize()
        assert binding.state is BindingState.UNBUILT

        assert isinstance(binding.instance, ServiceImpl)
        assert counter.calls == 2

    def test_failed_initializer_is_retried_without_rebuilding(self, counter):
        """Test that a raising initializer leaves the binding unbuilt but reuses the object."""
        attempts = []

        def factory():
            counter.hit()
            return ServiceImpl()

        def initializer(instance):
            attempts.append(instance)
            if len(attempts) == 1:
                raise ValueError("cannot inject")

        binding = Binding(IService, factory)

        with pytest.raises(ValueError):
            binding.materialize(initializer)
        assert binding.state is BindingState.UNBUILT

        instance, fresh = binding.materialize(initializer)

        assert fresh is True
        assert binding.built
        assert attempts == [instance, instance]
        assert counter.calls == 1

    def test_of_instance_is_built(self):
        """Test that a binding made from an instance never runs a factory."""
        impl = ServiceImpl()

        binding = Binding.of_instance(IService, impl)

        assert binding.built
        assert binding.materialize() == (impl, False)

    def test_reentrant_build_raises_circular_dependency(self):
        """Test that a factory asking for its own binding fails instead of recursing."""
        holder = {}

        def factory():
            return holder["binding"].instance

        holder["binding"] = Binding(IService, factory)

        with pytest.raises(CircularDependency) as exc_info:
            holder["binding"].instance

        assert exc_info.value.target is IService
        assert holder["binding"].state is BindingState.UNBUILT

    def test_concurrent_first_access_builds_once(self, counter):
        """Test that racing first accesses invoke the factory exactly once."""
        lock = threading.Lock()

        def factory():
            with lock:
                counter.hit()
            time.sleep(0.05)
            return ServiceImpl()

        binding = Binding(IService, factory)
        barrier = threading.Barrier(8)
        results = []

        def worker():
            barrier.wait()
            results.append(binding.instance)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert counter.calls == 1
        assert len(results) == 8
        assert all(r is results[0] for r in results)


class TestBindingStore:
    """Tests for the BindingStore class."""

    def test_register_and_lookup(self):
        """Test registering a factory and looking the type up."""
        store = BindingStore()
        store.register(IService, ServiceImpl)

        resolved = store.lookup(IService)

        assert isinstance(resolved, ServiceImpl)
        assert store.lookup(IService) is resolved

    def test_lookup_unregistered_returns_missing(self):
        """Test that an unknown type yields the MISSING sentinel."""
        store = BindingStore()

        assert store.lookup(IService) is MISSING
        assert not MISSING

    def test_lookup_is_exact_identity(self):
        """Test that a binding for a base type does not answer for a subtype."""
        store = BindingStore()
        store.register(IService, ServiceImpl)

        assert store.lookup(ServiceImpl) is MISSING

    def test_first_registration_wins(self):
        """Test that duplicates are kept but only the earliest is reachable."""
        store = BindingStore()
        first = ServiceImpl()
        second = ServiceImpl()

        store.register(IService, lambda: first)
        store.register(IService, lambda: second)

        assert store.lookup(IService) is first
        assert len(store) == 2

    def test_find_does_not_build(self, counter):
        """Test that find() returns the binding without materializing it."""
        store = BindingStore()

        def factory():
            counter.hit()
            return ServiceImpl()

        registered = store.register(IService, factory)

        assert store.find(IService) is registered
        assert counter.calls == 0

    def test_bindings_snapshot_is_insertion_ordered(self):
        """Test that bindings() reports registrations in order."""
        store = BindingStore()
        store.register(IService, ServiceImpl)
        store.register(ServiceImpl, ServiceImpl)

        snapshot = store.bindings()
        store.register(object, object)

        assert [b.requested_type for b in snapshot] == [IService, ServiceImpl]
        assert len(store.bindings()) == 3

    def test_clear(self):
        """Test clearing drops bindings and cached instances."""
        store = BindingStore()
        store.register(IService, ServiceImpl)
        before = store.lookup(IService)

        store.clear()

        assert store.lookup(IService) is MISSING
        assert len(store) == 0
        assert isinstance(before, ServiceImpl)

    def test_register_built_is_reachable_and_built(self):
        """Test that register_built() appends a binding that is already built."""
        store = BindingStore()
        impl = ServiceImpl()

        binding = store.register_built(IService, impl)

        assert binding.built
        assert store.find(IService) is binding
        assert store.lookup(IService) is impl
