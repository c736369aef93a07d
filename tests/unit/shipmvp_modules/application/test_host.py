"""Unit tests for ModuleHost."""

from unittest.mock import MagicMock

import pytest

from shipmvp_modules.application.host import ModuleHost, ModuleList
from shipmvp_modules.application.registry import ModuleRegistry
from shipmvp_modules.application.resolver import ModuleResolver
from shipmvp_modules.domain import (
    ActivationStateError,
    CircularDependencyError,
    HostState,
    LifecyclePhase,
    ModuleActivationError,
    UnknownModuleError,
)
from shipmvp_modules.infrastructure.environment import HostEnvironment
from shipmvp_modules.infrastructure.services import ServiceCollection
from shipmvp_modules.infrastructure.testing import LifecycleRecorder, make_module, module_catalog


class TestModuleHost:
    """Test cases for ModuleHost class."""

    def test_host_initialization(self):
        """Test that a new host has its components and no modules."""
        host = ModuleHost()

        assert host.state is HostState.CREATED
        assert host.modules == ()
        assert len(host.catalog) == 0
        assert len(host.registry) == 0

    def test_host_uses_given_registry(self):
        """Test that an explicit registry is used for instances."""
        registry = ModuleRegistry()
        catalog = module_catalog(("A", []))
        host = ModuleHost(catalog=catalog, registry=registry)

        host.add_modules(ServiceCollection(), "A")

        assert "A" in registry

    def test_activate_chain(self):
        """Test full phase ordering for A -> B -> C."""
        recorder = LifecycleRecorder()
        catalog = module_catalog(("A", ["B"]), ("B", ["C"]), ("C", []), recorder=recorder)
        host = ModuleHost(catalog=catalog)

        report = host.activate(["A"], ServiceCollection(), MagicMock(), HostEnvironment(name="Testing"))

        assert recorder.calls == [
            ("C", "configure_services"),
            ("B", "configure_services"),
            ("A", "configure_services"),
            ("C", "configure"),
            ("B", "configure"),
            ("A", "configure"),
        ]
        assert report.order == ("C", "B", "A")
        assert report.environment == "Testing"
        assert host.state is HostState.ACTIVATED
        assert host.module_keys == ("C", "B", "A")

    def test_activate_twice_raises(self):
        """Test that a host activates at most once."""
        catalog = module_catalog(("A", []))
        host = ModuleHost(catalog=catalog)
        host.activate(["A"], ServiceCollection(), MagicMock(), "Development")

        with pytest.raises(ActivationStateError):
            host.activate(["A"], ServiceCollection(), MagicMock(), "Development")

    def test_add_modules_registers_module_list(self):
        """Test that the ordered modules are registered into the collection."""
        catalog = module_catalog(("A", ["B"]), ("B", []))
        host = ModuleHost(catalog=catalog)
        services = ServiceCollection()

        modules = host.add_modules(services, "A")

        provider = services.build_provider()
        registered = provider.get_required(ModuleList)
        assert list(registered) == modules
        assert [type(module).__name__ for module in registered] == ["B", "A"]

    def test_add_modules_with_opaque_services(self):
        """Test that a collection without add_instance is passed through untouched."""
        seen = []
        catalog = module_catalog()
        catalog.add_module(make_module("A", on_configure_services=seen.append))
        host = ModuleHost(catalog=catalog)
        services = object()

        host.add_modules(services, "A")

        assert seen == [services]
        assert host.state is HostState.SERVICES_CONFIGURED

    def test_configure_before_add_modules_raises(self):
        """Test that phase B requires phase A."""
        host = ModuleHost()

        with pytest.raises(ActivationStateError):
            host.configure_modules(MagicMock(), "Development")

    def test_cycle_fails_activation_without_callbacks(self):
        """Test P <-> Q fails with no lifecycle calls."""
        recorder = LifecycleRecorder()
        catalog = module_catalog(("P", ["Q"]), ("Q", ["P"]), recorder=recorder)
        host = ModuleHost(catalog=catalog)

        with pytest.raises(CircularDependencyError):
            host.activate(["P"], ServiceCollection(), MagicMock(), "Development")

        assert recorder.calls == []
        assert recorder.constructions == {}
        assert host.state is HostState.FAILED
        assert host.modules == ()

    def test_unknown_module_fails_activation(self):
        """Test that an undeclared root fails and marks the host failed."""
        host = ModuleHost()

        with pytest.raises(UnknownModuleError):
            host.activate(["Missing"], ServiceCollection(), MagicMock(), "Development")

        assert host.state is HostState.FAILED

    def test_configure_services_failure_stops_everything(self):
        """Test that modules after a failing one are never configured."""
        recorder = LifecycleRecorder()
        catalog = module_catalog()
        catalog.add_module(make_module("C", recorder=recorder))
        catalog.add_module(make_module("M", ["C"], recorder, fail_on=LifecyclePhase.CONFIGURE_SERVICES))
        catalog.add_module(make_module("A", ["M"], recorder))
        host = ModuleHost(catalog=catalog)

        with pytest.raises(ModuleActivationError) as exc_info:
            host.activate(["A"], ServiceCollection(), MagicMock(), "Development")

        assert exc_info.value.module_key == "M"
        assert recorder.calls == [("C", "configure_services"), ("M", "configure_services")]
        assert recorder.keys_for(LifecyclePhase.CONFIGURE) == []
        assert host.state is HostState.FAILED

    def test_failed_host_cannot_be_reactivated(self):
        """Test that a failed host stays failed."""
        catalog = module_catalog(("P", ["P"]))
        host = ModuleHost(catalog=catalog)
        with pytest.raises(CircularDependencyError):
            host.activate(["P"], ServiceCollection(), MagicMock(), "Development")

        with pytest.raises(ActivationStateError):
            host.add_modules(ServiceCollection(), "P")

    def test_configure_failure_marks_host_failed(self):
        """Test that a phase B failure marks the host failed."""
        catalog = module_catalog()
        catalog.add_module(make_module("A", fail_on=LifecyclePhase.CONFIGURE))
        host = ModuleHost(catalog=catalog)

        with pytest.raises(ModuleActivationError):
            host.activate(["A"], ServiceCollection(), MagicMock(), "Development")

        assert host.state is HostState.FAILED

    def test_environment_is_passed_to_configure(self):
        """Test that the environment object reaches modules unchanged."""
        received = []
        catalog = module_catalog()
        catalog.add_module(make_module("A", on_configure=lambda pipeline, env: received.append((pipeline, env))))
        host = ModuleHost(catalog=catalog)
        pipeline = MagicMock()
        environment = HostEnvironment(name="Production")

        host.activate(["A"], ServiceCollection(), pipeline, environment)

        assert received == [(pipeline, environment)]

    def test_resolver_with_catalog_raises(self):
        """Test that a resolver cannot be combined with a catalog or registry."""
        resolver = ModuleResolver()

        with pytest.raises(ValueError):
            ModuleHost(catalog=module_catalog(), resolver=resolver)
        with pytest.raises(ValueError):
            ModuleHost(registry=ModuleRegistry(), resolver=resolver)

    def test_host_uses_resolver_components(self):
        """Test that a given resolver supplies the catalog and registry."""
        resolver = ModuleResolver(catalog=module_catalog(("A", [])))

        host = ModuleHost(resolver=resolver)

        assert host.catalog is resolver.catalog
        assert host.registry is resolver.registry

    def test_add_modules_from_callback_raises(self):
        """Test that re-entering the host during service registration fails instead of blocking."""
        host = ModuleHost()
        host.catalog.add_module(make_module("A", on_configure_services=lambda services: host.add_modules(services, "A")))

        with pytest.raises(ModuleActivationError) as exc_info:
            host.add_modules(ServiceCollection(), "A")

        assert isinstance(exc_info.value.__cause__, ActivationStateError)
        assert host.state is HostState.FAILED

    def test_configure_modules_from_callback_raises(self):
        """Test that re-entering the host during pipeline configuration fails instead of blocking."""
        host = ModuleHost()
        host.catalog.add_module(
            make_module("A", on_configure=lambda pipeline, env: host.configure_modules(pipeline, env))
        )

        with pytest.raises(ModuleActivationError) as exc_info:
            host.activate(["A"], ServiceCollection(), MagicMock(), "Development")

        assert isinstance(exc_info.value.__cause__, ActivationStateError)
        assert host.state is HostState.FAILED
