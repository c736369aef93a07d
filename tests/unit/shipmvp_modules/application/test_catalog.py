"""Unit tests for ModuleCatalog."""

import pytest

from shipmvp_modules.application.catalog import ModuleCatalog
from shipmvp_modules.domain import DuplicateModuleError, Module, ModuleDescriptor, UnknownModuleError


class DatabaseModule(Module):
    pass


class AnalyticsModule(Module):
    depends_on = (DatabaseModule,)


class ApplicationModule(Module):
    depends_on = (DatabaseModule, AnalyticsModule, "EmailModule")


class TestModuleCatalog:
    """Test cases for ModuleCatalog class."""

    def test_catalog_starts_empty(self):
        """Test that a new catalog has no declarations."""
        catalog = ModuleCatalog()

        assert len(catalog) == 0
        assert catalog.keys() == []

    def test_catalog_with_static_table(self):
        """Test initializing the catalog from a descriptor table."""
        catalog = ModuleCatalog(
            [
                ModuleDescriptor(key="Z", factory=DatabaseModule),
                ModuleDescriptor(key="Y", dependencies=["Z"], factory=DatabaseModule),
            ]
        )

        assert catalog.keys() == ["Z", "Y"]
        assert "Y" in catalog

    def test_add_and_get(self):
        """Test declaring and looking up a descriptor."""
        catalog = ModuleCatalog()
        descriptor = ModuleDescriptor(key="X", factory=DatabaseModule)

        catalog.add(descriptor)

        assert catalog.get("X") is descriptor

    def test_add_equal_descriptor_is_noop(self):
        """Test that re-declaring the same module keeps the first descriptor."""
        catalog = ModuleCatalog()
        first = ModuleDescriptor(key="X", dependencies=["Y"], factory=DatabaseModule)
        second = ModuleDescriptor(key="X", dependencies=["Y"], factory=DatabaseModule)

        catalog.add(first)
        catalog.add(second)

        assert catalog.get("X") is first
        assert len(catalog) == 1

    def test_add_conflicting_descriptor_raises(self):
        """Test that a different module under the same key is rejected."""
        catalog = ModuleCatalog()
        catalog.add(ModuleDescriptor(key="X", factory=DatabaseModule))

        with pytest.raises(DuplicateModuleError) as exc_info:
            catalog.add(ModuleDescriptor(key="X", dependencies=["Y"], factory=DatabaseModule))

        assert exc_info.value.module_key == "X"

    def test_get_unknown_key_raises(self):
        """Test that looking up an undeclared key fails."""
        catalog = ModuleCatalog()

        with pytest.raises(UnknownModuleError) as exc_info:
            catalog.get("Missing")

        assert exc_info.value.module_key == "Missing"

    def test_add_module_declares_class_dependencies(self):
        """Test that module classes in depends_on are declared recursively."""
        catalog = ModuleCatalog()

        descriptor = catalog.add_module(ApplicationModule)

        assert descriptor.key == "ApplicationModule"
        assert descriptor.dependencies == ("DatabaseModule", "AnalyticsModule", "EmailModule")
        assert "DatabaseModule" in catalog
        assert "AnalyticsModule" in catalog
        # Key dependencies are not followed
        assert "EmailModule" not in catalog

    def test_add_module_twice(self):
        """Test that adding the same class twice is harmless."""
        catalog = ModuleCatalog()

        catalog.add_module(AnalyticsModule)
        catalog.add_module(AnalyticsModule)

        assert catalog.keys() == ["AnalyticsModule", "DatabaseModule"]

    def test_add_module_with_class_cycle_terminates(self):
        """Test that classes depending on each other do not recurse forever."""

        class PModule(Module):
            pass

        class QModule(Module):
            depends_on = (PModule,)

        PModule.depends_on = (QModule,)

        catalog = ModuleCatalog()
        catalog.add_module(PModule)

        assert set(catalog.keys()) == {"PModule", "QModule"}

    def test_declare(self):
        """Test declaring a module from a key and a factory."""
        catalog = ModuleCatalog()

        descriptor = catalog.declare("Storage", DatabaseModule, depends_on=[DatabaseModule])

        assert descriptor.key == "Storage"
        assert descriptor.dependencies == ("DatabaseModule",)
        assert catalog.get("Storage") is descriptor

    def test_register_decorator(self):
        """Test declaring a module class with the decorator."""
        catalog = ModuleCatalog()

        @catalog.register
        class EmailModule(Module):
            depends_on = (DatabaseModule,)

        assert EmailModule.__name__ == "EmailModule"
        assert catalog.keys() == ["EmailModule", "DatabaseModule"]

    def test_add_module_rejects_plain_class(self):
        """Test that non-module classes are rejected."""
        catalog = ModuleCatalog()

        class Plain:
            pass

        with pytest.raises(TypeError):
            catalog.add_module(Plain)
