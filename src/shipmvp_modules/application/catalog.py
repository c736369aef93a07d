import logging
import threading
from typing import Callable, Dict, Iterable, List, Type, TypeVar, Union

from shipmvp_modules.domain import (
    DuplicateModuleError,
    IModule,
    IModuleCatalog,
    Module,
    ModuleDescriptor,
    UnknownModuleError,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=Type[Module])


class ModuleCatalog(IModuleCatalog):
    """Table of declared modules, keyed by module key.

    Modules are declared explicitly, either as classes carrying a
    ``depends_on`` declaration or through ``declare`` with a factory.

    Attributes:
        _descriptors: Dictionary mapping module keys to their descriptors.
        _lock: Guards concurrent declarations.
    """

    def __init__(self, descriptors: Iterable[ModuleDescriptor] = ()) -> None:
        """Initialize the catalog, optionally with a static descriptor table.

        Args:
            descriptors: Descriptors to declare up front.
        """
        self._descriptors: Dict[str, ModuleDescriptor] = {}
        self._lock = threading.RLock()
        for descriptor in descriptors:
            self.add(descriptor)

    def add(self, descriptor: ModuleDescriptor) -> None:
        """Declare a module.

        Re-declaring an equal descriptor is a no-op.

        Args:
            descriptor: The descriptor to store.

        Raises:
            DuplicateModuleError: If a different descriptor already uses the key.
        """
        with self._lock:
            existing = self._descriptors.get(descriptor.key)
            if existing is not None:
                if existing != descriptor:
                    raise DuplicateModuleError(descriptor.key)
                return
            self._descriptors[descriptor.key] = descriptor
        logger.debug("Declared module %s depending on %s", descriptor.key, list(descriptor.dependencies))

    def add_module(self, module_cls: Type[Module]) -> ModuleDescriptor:
        """Declare a module class and every module class it depends on.

        Dependencies given as keys are not followed; they must be declared
        separately before resolution.

        Args:
            module_cls: The module class to declare.

        Returns:
            The descriptor of ``module_cls``.

        Example:
            >>> catalog = ModuleCatalog()
            >>> catalog.add_module(HostModule)  # also declares ApplicationModule, DatabaseModule...
        """
        with self._lock:
            return self._add_class(module_cls, [])

    def _add_class(self, module_cls: Type[Module], path: List[type]) -> ModuleDescriptor:
        descriptor = ModuleDescriptor.for_class(module_cls)
        self.add(descriptor)
        # Cycles between classes are reported by the resolver, not here
        if module_cls in path:
            return descriptor
        path.append(module_cls)
        for dependency in getattr(module_cls, "depends_on", ()):
            if isinstance(dependency, type):
                self._add_class(dependency, path)
        path.pop()
        return descriptor

    def declare(
        self,
        key: str,
        factory: Callable[[], IModule],
        depends_on: Iterable[Union[str, type]] = (),
    ) -> ModuleDescriptor:
        """Declare a module from a key and a factory.

        Args:
            key: The module key.
            factory: No-argument callable creating the module.
            depends_on: Keys or classes of the modules it depends on.

        Returns:
            The stored descriptor.
        """
        descriptor = ModuleDescriptor(key=key, dependencies=tuple(depends_on), factory=factory)
        self.add(descriptor)
        return descriptor

    def register(self, module_cls: M) -> M:
        """Class decorator declaring a module class.

        Example:
            >>> catalog = ModuleCatalog()
            >>>
            >>> @catalog.register
            ... class EmailModule(Module):
            ...     depends_on = (DatabaseModule,)
        """
        self.add_module(module_cls)
        return module_cls

    def get(self, key: str) -> ModuleDescriptor:
        try:
            return self._descriptors[key]
        except KeyError:
            raise UnknownModuleError(key, "no module is declared under this key") from None

    def keys(self) -> List[str]:
        """Return the declared module keys in declaration order."""
        return list(self._descriptors)

    def __contains__(self, key: object) -> bool:
        return key in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)
