"""
Domain layer - Core module system models.

This layer contains the fundamental rules and models for module declaration
and activation. It has no dependencies on other layers.
"""

from .enums import HostState, LifecyclePhase, ServiceLifetime
from .exceptions import (
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
from .interfaces import ILifecycleRunner, IModule, IModuleCatalog, IModuleRegistry, IModuleResolver, Module, module_key
from .models import ActivationReport, ModuleDescriptor, ResolutionContext, ResolvedModules

__all__ = [
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
    # Interfaces
    "IModule",
    "Module",
    "module_key",
    "IModuleCatalog",
    "IModuleRegistry",
    "IModuleResolver",
    "ILifecycleRunner",
    # Models
    "ModuleDescriptor",
    "ResolutionContext",
    "ActivationReport",
    "ResolvedModules",
]
