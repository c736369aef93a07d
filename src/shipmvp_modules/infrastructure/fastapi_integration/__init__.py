"""
FastAPI integration module.

Builds a FastAPI application from modules and exposes registered services
to endpoints.
"""

from .integration import (
    ScopedServicesMiddleware,
    create_app,
    create_service_dependency,
    get_service_provider,
)

__all__ = [
    "create_app",
    "create_service_dependency",
    "get_service_provider",
    "ScopedServicesMiddleware",
]
