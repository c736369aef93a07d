"""
Application layer - Use cases and orchestration.

This layer contains the use cases that orchestrate domain objects.
It depends only on the Domain layer.
"""

from .catalog import ModuleCatalog
from .circular_detector import CircularDependencyDetector
from .host import ModuleHost, ModuleList
from .lifecycle_runner import LifecycleRunner
from .registry import ModuleRegistry
from .resolver import ModuleResolver

__all__ = [
    "ModuleHost",
    "ModuleList",
    "ModuleCatalog",
    "ModuleRegistry",
    "ModuleResolver",
    "LifecycleRunner",
    "CircularDependencyDetector",
]
