"""
Testing utilities module.

Provides helpers for testing applications built from modules.
"""

from .utilities import LifecycleRecorder, make_module, module_catalog

__all__ = [
    "LifecycleRecorder",
    "make_module",
    "module_catalog",
]
