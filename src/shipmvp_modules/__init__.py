"""
shipmvp-modules: Dependency-ordered module activation for web application backends.

Public API exports for the shipmvp-modules package.
"""

# Application exports
from shipmvp_modules.application.catalog import ModuleCatalog
from shipmvp_modules.application.host import ModuleHost, ModuleList
from shipmvp_modules.application.lifecycle_runner import LifecycleRunner
from shipmvp_modules.application.registry import ModuleRegistry
from shipmvp_modules.application.resolver import ModuleResolver

# Domain exports
from shipmvp_modules.domain.enums import HostState, LifecyclePhase, ServiceLifetime
from shipmvp_modules.domain.exceptions import (
    ActivationStateError,
    CircularDependencyError,
    DuplicateModuleError,
    ModuleActivationError,
    ModuleConstructionError,
    ModuleException,
    ServiceRegistrationError,
    ServiceResolutionError,
    UnknownModuleError,
)
from shipmvp_modules.domain.interfaces import IModule, Module, module_key
from shipmvp_modules.domain.models import ActivationReport, ModuleDescriptor, ResolvedModules

# Infrastructure exports
from shipmvp_modules.infrastructure.environment import HostEnvironment, HostSettings
from shipmvp_modules.infrastructure.services import ServiceCollection, ServiceProvider

__version__ = "0.1.0"

__all__ = [
    # Host
    "ModuleHost",
    "ModuleList",
    "ModuleCatalog",
    "ModuleRegistry",
    "ModuleResolver",
    "LifecycleRunner",
    # Modules
    "IModule",
    "Module",
    "module_key",
    "ModuleDescriptor",
    "ActivationReport",
    "ResolvedModules",
    # Enums
    "HostState",
    "LifecyclePhase",
    "ServiceLifetime",
    # Exceptions
    "ModuleException",
    "CircularDependencyError",
    "UnknownModuleError",
    "ModuleConstructionError",
    "DuplicateModuleError",
    "ModuleActivationError",
    "ActivationStateError",
    "ServiceRegistrationError",
    "ServiceResolutionError",
    # Collaborators
    "ServiceCollection",
    "ServiceProvider",
    "HostEnvironment",
    "HostSettings",
]
