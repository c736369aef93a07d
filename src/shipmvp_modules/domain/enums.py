from enum import Enum


class LifecyclePhase(str, Enum):
    """The two global lifecycle phases a module goes through during activation.

    Attributes:
        CONFIGURE_SERVICES: Service registration into the shared service collection.
        CONFIGURE: Request pipeline configuration.
    """

    CONFIGURE_SERVICES = "configure_services"
    CONFIGURE = "configure"

    def __str__(self) -> str:
        return self.value


class ServiceLifetime(str, Enum):
    """Defines the lifetime of a service registered by a module.

    Attributes:
        SINGLETON: Single instance shared across entire application.
        TRANSIENT: New instance created on each resolution.
        SCOPED: Single instance per scope (e.g., per HTTP request).
    """

    TRANSIENT = "transient"
    SCOPED = "scoped"
    SINGLETON = "singleton"

    def __str__(self) -> str:
        return self.value


class HostState(str, Enum):
    """Activation progress of a module host."""

    CREATED = "created"
    SERVICES_CONFIGURED = "services_configured"
    ACTIVATED = "activated"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value
