from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, Iterable, List, Mapping, Optional, Sequence, Tuple, Type, Union

if TYPE_CHECKING:
    from shipmvp_modules.domain.models import ModuleDescriptor


class IModule(ABC):
    """Abstract interface for an application module.

    A module registers services during the first lifecycle phase and
    configures the request pipeline during the second one.
    """

    @abstractmethod
    def configure_services(self, services: Any) -> None:
        """Register this module's services.

        Args:
            services: The shared service collection. Write-only during this phase.
        """

    @abstractmethod
    def configure(self, pipeline: Any, environment: Any) -> None:
        """Configure the request pipeline.

        Args:
            pipeline: The application/pipeline builder.
            environment: The hosting environment descriptor.
        """


class Module(IModule):
    """Convenience base class for modules declared as classes.

    Dependencies are declared statically through ``depends_on``, holding
    either module classes or module keys.

    Example:
        >>> class DatabaseModule(Module):
        ...     def configure_services(self, services):
        ...         services.add_singleton(Database, lambda p: Database())
        >>>
        >>> class ApplicationModule(Module):
        ...     depends_on = (DatabaseModule,)
    """

    depends_on: ClassVar[Tuple[Union[Type["Module"], str], ...]] = ()
    module_name: ClassVar[Optional[str]] = None

    def configure_services(self, services: Any) -> None:
        return None

    def configure(self, pipeline: Any, environment: Any) -> None:
        return None


def module_key(module: Union[str, type, IModule]) -> str:
    """Return the stable key identifying a module kind.

    Args:
        module: A key, a module class or a module instance.

    Returns:
        ``module_name`` when the class sets one, else the class name.
        Strings are returned unchanged.
    """
    if isinstance(module, str):
        return module
    cls = module if isinstance(module, type) else type(module)
    return getattr(cls, "module_name", None) or cls.__name__


class IModuleCatalog(ABC):
    """Abstract interface for the table of declared modules."""

    @abstractmethod
    def add(self, descriptor: "ModuleDescriptor") -> None:
        """Declare a module.

        Args:
            descriptor: The module descriptor to store.
        """

    @abstractmethod
    def add_module(self, module_cls: Type[Module]) -> "ModuleDescriptor":
        """Declare a module class and, recursively, the classes it depends on."""

    @abstractmethod
    def get(self, key: str) -> "ModuleDescriptor":
        """Return the descriptor declared under ``key``.

        Raises:
            UnknownModuleError: If nothing is declared under the key.
        """

    @abstractmethod
    def __contains__(self, key: object) -> bool:
        """Whether a module is declared under ``key``."""


class IModuleRegistry(ABC):
    """Abstract interface for the module instance cache."""

    @abstractmethod
    def get_or_create(self, descriptor: "ModuleDescriptor") -> IModule:
        """Return the cached instance for the descriptor, constructing it at most once.

        Args:
            descriptor: The module to instantiate.
        """

    @abstractmethod
    def clear(self) -> None:
        """Drop every cached instance."""


class IModuleResolver(ABC):
    """Abstract interface for dependency resolution of modules."""

    @abstractmethod
    def resolve(self, roots: Iterable[Any]) -> List[IModule]:
        """Resolve root modules and their dependencies into dependency order.

        Args:
            roots: Module keys, module classes or descriptors to activate.

        Returns:
            Module instances, dependencies first.

        Raises:
            CircularDependencyError: If the reachable graph contains a cycle.
            UnknownModuleError: If a key has no declaration.
        """


class ILifecycleRunner(ABC):
    """Abstract interface for running module lifecycle phases."""

    @abstractmethod
    def configure_services(self, modules: Union[Mapping[str, IModule], Sequence[IModule]], services: Any) -> None:
        """Run the service registration phase over ``modules`` in order."""

    @abstractmethod
    def configure(
        self, modules: Union[Mapping[str, IModule], Sequence[IModule]], pipeline: Any, environment: Any
    ) -> None:
        """Run the pipeline configuration phase over ``modules`` in order."""
