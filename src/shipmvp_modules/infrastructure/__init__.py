"""
Infrastructure layer - External integrations.

This layer contains the service collection handed to modules, host settings,
logging and integrations with external frameworks and tools.
It depends on both Application and Domain layers.
"""

from . import fastapi_integration, testing
from .environment import HostEnvironment, HostSettings, get_settings
from .logging_utils import configure_logging
from .services import ServiceCollection, ServiceProvider, ServiceRegistration

__all__ = [
    "fastapi_integration",
    "testing",
    "HostEnvironment",
    "HostSettings",
    "get_settings",
    "configure_logging",
    "ServiceCollection",
    "ServiceProvider",
    "ServiceRegistration",
]
