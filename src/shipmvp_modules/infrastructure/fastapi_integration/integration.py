import logging
from typing import Any, Awaitable, Callable, Iterable, Optional, Type, TypeVar

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from shipmvp_modules.application import ModuleHost
from shipmvp_modules.infrastructure.environment import HostEnvironment, HostSettings, get_settings
from shipmvp_modules.infrastructure.logging_utils import configure_logging
from shipmvp_modules.infrastructure.services import ServiceCollection, ServiceProvider

T = TypeVar("T")

logger = logging.getLogger(__name__)


def create_app(
    host: ModuleHost,
    roots: Iterable[Any],
    *,
    settings: Optional[HostSettings] = None,
    services: Optional[ServiceCollection] = None,
    app: Optional[FastAPI] = None,
) -> FastAPI:
    """Build a FastAPI application by activating the given root modules.

    Modules register services into a ``ServiceCollection``; the resulting
    provider is stored on ``app.state.services`` before modules configure
    the application, so ``configure`` can read what phase one registered.

    Args:
        host: The module host, created once at process start.
        roots: Module keys, module classes or descriptors to activate.
        settings: Host settings. Read from the environment if omitted.
        services: Service collection to fill. A new one is created if omitted.
        app: Application to configure. A new one is created if omitted.

    Returns:
        The configured application.

    Raises:
        ModuleException: Any resolution or activation failure. Startup must not continue.

    Example:
        >>> host = ModuleHost()
        >>> app = create_app(host, [HostModule])
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, json_output=settings.log_json)

    environment = HostEnvironment.from_settings(settings)
    services = services if services is not None else ServiceCollection()
    app = app or FastAPI(title=settings.application_name)

    services.try_add_singleton(HostEnvironment, lambda provider: environment)
    services.try_add_singleton(HostSettings, lambda provider: settings)
    host.add_modules(services, *roots)

    app.state.services = services.build_provider()
    app.state.module_host = host
    app.state.environment = environment

    host.configure_modules(app, environment)
    logger.info(
        "Application %s started in %s environment with modules: %s",
        environment.application_name,
        environment.name,
        ", ".join(host.module_keys),
    )
    return app


def get_service_provider(request: Request) -> ServiceProvider:
    """Return the request-scoped provider, falling back to the application provider.

    Raises:
        RuntimeError: If the application was not built with ``create_app``.
    """
    provider = getattr(request.state, "services", None)
    if provider is None:
        provider = getattr(request.app.state, "services", None)
    if provider is None:
        raise RuntimeError("Application has no service provider. Was it built with create_app()?")
    return provider


def create_service_dependency(service_type: Type[T]) -> Callable[[Request], T]:
    """Create a FastAPI Depends() callable resolving a required service.

    Scoped services need ``ScopedServicesMiddleware`` to be installed.

    Args:
        service_type: The type to resolve when the dependency is called.

    Returns:
        A callable that FastAPI can use with Depends().

    Example:
        >>> get_users = create_service_dependency(UserService)
        >>>
        >>> @app.get("/users")
        >>> async def list_users(service: UserService = Depends(get_users)):
        ...     return await service.get_all()
    """

    def dependency(request: Request) -> T:
        """Resolve the service from the request's provider."""
        return get_service_provider(request).get_required(service_type)

    return dependency


class ScopedServicesMiddleware(BaseHTTPMiddleware):
    """Middleware that opens a service scope for each request.

    The scope is stored on ``request.state.services`` and closed once the
    response has been produced.

    Example:
        >>> app = create_app(host, [HostModule])
        >>> app.add_middleware(ScopedServicesMiddleware)
    """

    def __init__(self, app: Any, provider: Optional[ServiceProvider] = None):
        """Initialize the middleware.

        Args:
            app: The ASGI application.
            provider: Root provider to create scopes from. Defaults to
                ``request.app.state.services``.
        """
        super().__init__(app)
        self.provider = provider

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        """Create a scope for the request and execute the endpoint."""
        root = self.provider or request.app.state.services
        scope = root.create_scope()
        request.state.services = scope

        try:
            response = await call_next(request)
            return response
        finally:
            scope.close()
