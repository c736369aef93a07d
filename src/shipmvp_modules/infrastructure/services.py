import threading
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from shipmvp_modules.domain import ServiceLifetime, ServiceRegistrationError, ServiceResolutionError

T = TypeVar("T")

ServiceBuilder = Callable[["ServiceProvider"], Any]


class ServiceRegistration(BaseModel):
    """Value object representing a service registration.

    Attributes:
        service_type: The type being registered.
        builder: Factory function that receives the provider and returns an instance.
        lifetime: How long the instance should live.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    service_type: Type = Field(..., description="The service type to be registered.")
    builder: ServiceBuilder = Field(..., description="The builder function to create an instance of the service.")
    lifetime: ServiceLifetime = Field(..., description="The lifetime of the registered service.")


class ServiceCollection:
    """Write-only table of service registrations filled by modules.

    Modules add registrations during the service registration phase. Nothing
    can be resolved from the collection itself; ``build_provider`` freezes it
    and returns the read side.

    Attributes:
        _registrations: Dictionary mapping service types to their registrations.
        _frozen: Whether ``build_provider`` has been called.
    """

    def __init__(self) -> None:
        self._registrations: Dict[Type, ServiceRegistration] = {}
        self._frozen = False

    def _register(self, service_type: Type, builder: ServiceBuilder, lifetime: ServiceLifetime) -> None:
        """Internal registration method with validation.

        Raises:
            ServiceRegistrationError: If the collection is frozen or the type is
                already registered with a different lifetime.
        """
        if self._frozen:
            raise ServiceRegistrationError(
                f"Cannot register {service_type.__name__}: the service collection has already been built"
            )

        existing = self._registrations.get(service_type)
        if existing is not None and existing.lifetime != lifetime:
            raise ServiceRegistrationError(
                f"Service {service_type.__name__} is already registered "
                f"with lifetime {existing.lifetime.value}, "
                f"cannot re-register with {lifetime.value}"
            )

        # Last registration wins for the same lifetime
        self._registrations[service_type] = ServiceRegistration(
            service_type=service_type,
            builder=builder,
            lifetime=lifetime,
        )

    def add_singleton(self, service_type: Type[T], builder: Callable[["ServiceProvider"], T]) -> "ServiceCollection":
        """Register a service created once and shared by the whole application.

        Example:
            >>> services.add_singleton(DatabaseConnection, lambda p: DatabaseConnection(p.get_required(Settings)))
        """
        self._register(service_type, builder, ServiceLifetime.SINGLETON)
        return self

    def add_transient(self, service_type: Type[T], builder: Callable[["ServiceProvider"], T]) -> "ServiceCollection":
        """Register a service created fresh on each resolution."""
        self._register(service_type, builder, ServiceLifetime.TRANSIENT)
        return self

    def add_scoped(self, service_type: Type[T], builder: Callable[["ServiceProvider"], T]) -> "ServiceCollection":
        """Register a service created once per scope (e.g., per HTTP request)."""
        self._register(service_type, builder, ServiceLifetime.SCOPED)
        return self

    def add_instance(self, service_type: Type[T], instance: T) -> "ServiceCollection":
        """Register an already built object as a singleton."""
        self._register(service_type, lambda provider: instance, ServiceLifetime.SINGLETON)
        return self

    def try_add_singleton(
        self, service_type: Type[T], builder: Callable[["ServiceProvider"], T]
    ) -> "ServiceCollection":
        """Register a singleton unless the type is already registered."""
        if service_type not in self._registrations:
            self.add_singleton(service_type, builder)
        return self

    def descriptors(self) -> List[ServiceRegistration]:
        """Return the registrations in registration order."""
        return list(self._registrations.values())

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def build_provider(self) -> "ServiceProvider":
        """Freeze the collection and build the provider resolving from it.

        Returns:
            Root service provider.
        """
        self._frozen = True
        return ServiceProvider(dict(self._registrations))

    def __contains__(self, service_type: object) -> bool:
        return service_type in self._registrations

    def __len__(self) -> int:
        return len(self._registrations)


class ServiceProvider:
    """Resolves services from a frozen set of registrations.

    A root provider owns the singleton cache; scopes created from it share
    that cache and keep their own scoped cache.

    Attributes:
        _registrations: Registrations by service type.
        _singleton_cache: Cache for singleton instances, shared with scopes.
        _scoped_cache: Cache for scoped instances of this scope.
        _is_scope: Whether this provider is a scope.
    """

    def __init__(
        self,
        registrations: Dict[Type, ServiceRegistration],
        parent_singleton_cache: Optional[Dict[Type, Any]] = None,
        parent_lock: Optional[threading.RLock] = None,
    ) -> None:
        self._registrations = registrations
        self._is_scope = parent_singleton_cache is not None
        self._singleton_cache: Dict[Type, Any] = parent_singleton_cache if self._is_scope else {}
        self._singleton_lock = parent_lock or threading.RLock()
        self._scoped_cache: Dict[Type, Any] = {}

    def _create(self, registration: ServiceRegistration) -> Any:
        try:
            return registration.builder(self)
        except ServiceResolutionError:
            raise
        except Exception as e:
            raise ServiceResolutionError(registration.service_type, f"Failed to create instance: {e}") from e

    def get(self, service_type: Type[T]) -> Optional[T]:
        """Resolve a service, or return None if it is not registered.

        Raises:
            ServiceResolutionError: If the registered builder fails, or a scoped
                service is requested from the root provider.
        """
        registration = self._registrations.get(service_type)
        if registration is None:
            return None

        if registration.lifetime == ServiceLifetime.SINGLETON:
            if service_type not in self._singleton_cache:
                with self._singleton_lock:
                    if service_type not in self._singleton_cache:
                        self._singleton_cache[service_type] = self._create(registration)
            return self._singleton_cache[service_type]

        if registration.lifetime == ServiceLifetime.SCOPED:
            if not self._is_scope:
                raise ServiceResolutionError(service_type, "scoped services require a scope")
            if service_type not in self._scoped_cache:
                self._scoped_cache[service_type] = self._create(registration)
            return self._scoped_cache[service_type]

        return self._create(registration)

    def get_required(self, service_type: Type[T]) -> T:
        """Resolve a service that must be registered.

        Raises:
            ServiceResolutionError: If the service is not registered or cannot be built.
        """
        if service_type not in self._registrations:
            raise ServiceResolutionError(service_type, "no registration exists for this type")
        return self.get(service_type)

    def create_scope(self) -> "ServiceProvider":
        """Create a child provider sharing singletons, with its own scoped cache.

        Example:
            >>> with provider.create_scope() as scope:
            ...     ctx1 = scope.get_required(RequestContext)
            ...     ctx2 = scope.get_required(RequestContext)
            ...     assert ctx1 is ctx2
        """
        return ServiceProvider(self._registrations, self._singleton_cache, self._singleton_lock)

    def close(self) -> None:
        """Drop the scoped instances of this provider."""
        self._scoped_cache.clear()

    def __contains__(self, service_type: object) -> bool:
        return service_type in self._registrations

    def __enter__(self) -> "ServiceProvider":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        self.close()
        return False


# Resolve the forward reference to ServiceProvider in the builder annotation
ServiceRegistration.model_rebuild()
