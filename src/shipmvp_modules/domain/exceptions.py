from typing import List, Optional

from shipmvp_modules.domain.enums import LifecyclePhase


class ModuleException(Exception):
    """Base exception for module system errors."""


class CircularDependencyError(ModuleException):
    """Raised when the declared module dependencies contain a cycle.

    Attributes:
        dependency_chain: Module keys forming the cycle, the closing key repeated at the end.
        module_key: The key at which the cycle was closed.
    """

    def __init__(self, dependency_chain: List[str]) -> None:
        self.dependency_chain = dependency_chain
        self.module_key = dependency_chain[-1] if dependency_chain else None
        message = f"Circular dependency detected: {' -> '.join(dependency_chain)}"
        super().__init__(message)


class UnknownModuleError(ModuleException):
    """Raised when a module key has no corresponding declaration.

    Attributes:
        module_key: The key that could not be found.
        reason: Optional reason for the failure.
    """

    def __init__(self, module_key: str, reason: Optional[str] = None) -> None:
        self.module_key = module_key
        self.reason = reason
        message = f"Unknown module: {module_key}"
        if reason:
            message += f". Reason: {reason}"
        super().__init__(message)


class ModuleConstructionError(UnknownModuleError):
    """Raised when a declared module cannot be instantiated.

    This occurs when:
    - The module factory raises.
    - The factory returns something that is not a module.
    """

    def __init__(self, module_key: str, reason: Optional[str] = None) -> None:
        super().__init__(module_key, reason)
        message = f"Cannot construct module: {module_key}"
        if reason:
            message += f". Reason: {reason}"
        self.args = (message,)


class DuplicateModuleError(ModuleException):
    """Raised when two different declarations share a module key."""

    def __init__(self, module_key: str) -> None:
        self.module_key = module_key
        super().__init__(f"Module {module_key} is already declared with a different definition")


class ModuleActivationError(ModuleException):
    """Raised when a module lifecycle callback fails.

    Attributes:
        module_key: The module whose callback raised.
        phase: The lifecycle phase that was running.
        cause: The underlying exception.
    """

    def __init__(self, module_key: str, phase: LifecyclePhase, cause: BaseException) -> None:
        self.module_key = module_key
        self.phase = phase
        self.cause = cause
        super().__init__(f"Module {module_key} failed during {phase.value}: {cause}")


class ActivationStateError(ModuleException):
    """Raised for lifecycle operations invoked out of order.

    This occurs when:
    - Activating a host that was already activated (or failed).
    - Configuring the pipeline before services were configured.
    """


class ServiceRegistrationError(ModuleException):
    """Raised for invalid service registrations.

    This occurs when:
    - Registering the same type with conflicting lifetimes.
    - Registering into a collection that has already been built.
    """


class ServiceResolutionError(ModuleException):
    """Raised when a service cannot be resolved from a provider.

    Attributes:
        service_type: The requested type.
        reason: Optional reason for the failure.
    """

    def __init__(self, service_type: type, reason: Optional[str] = None) -> None:
        self.service_type = service_type
        self.reason = reason
        message = f"Cannot resolve service: {getattr(service_type, '__name__', service_type)}"
        if reason:
            message += f". Reason: {reason}"
        super().__init__(message)
