from typing import Any, Callable, Iterable, List, Tuple, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shipmvp_modules.domain.exceptions import CircularDependencyError
from shipmvp_modules.domain.interfaces import IModule, Module, module_key


class ModuleDescriptor(BaseModel):
    """Value object declaring a module kind and what it depends on.

    Attributes:
        key: Stable identity of the module kind.
        dependencies: Keys of the modules this one depends on, in declaration order.
        factory: No-argument callable creating the module instance.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    key: str = Field(..., min_length=1, description="Stable identity of the module kind.")
    dependencies: Tuple[str, ...] = Field(
        default=(),
        description="Keys of the modules this module depends on.",
    )
    factory: Callable[[], IModule] = Field(..., description="No-argument factory creating the module.")

    @field_validator("key", mode="before")
    @classmethod
    def _normalize_key(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("dependencies", mode="before")
    @classmethod
    def _normalize_dependencies(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, (str, type)):
            value = (value,)
        keys: List[str] = []
        for dependency in value:
            key = module_key(dependency).strip()
            if not key:
                raise ValueError("dependency keys must not be empty")
            if key not in keys:
                keys.append(key)
        return tuple(keys)

    @classmethod
    def for_class(cls, module_cls: Type[Module]) -> "ModuleDescriptor":
        """Build a descriptor from a module class and its ``depends_on`` declaration.

        Args:
            module_cls: The module class. It must be constructible without arguments.

        Example:
            >>> descriptor = ModuleDescriptor.for_class(ApplicationModule)
            >>> descriptor.dependencies
            ('DatabaseModule',)
        """
        if not isinstance(module_cls, type) or not issubclass(module_cls, IModule):
            raise TypeError(f"{module_cls!r} is not a module class")
        return cls(
            key=module_key(module_cls),
            dependencies=getattr(module_cls, "depends_on", ()),
            factory=module_cls,
        )


class ResolutionContext(BaseModel):
    """Tracks the module keys currently being resolved.

    Used for circular dependency detection: a key that is pushed while
    already on the stack closes a cycle.

    Attributes:
        stack: Module keys on the current resolution path.
    """

    stack: List[str] = Field(
        default_factory=list,
        description="Stack of module keys currently being resolved.",
    )

    def push(self, key: str) -> None:
        """Add a module key to the resolution stack.

        Args:
            key: The module being resolved.

        Raises:
            CircularDependencyError: If the key is already in the stack.
        """
        if key in self.stack:
            cycle = self.stack[self.stack.index(key) :] + [key]
            raise CircularDependencyError(cycle)
        self.stack.append(key)

    def pop(self) -> None:
        """Remove the last (most recent) key from the stack."""
        if self.stack:
            self.stack.pop()

    def clear(self) -> None:
        """Clear the entire resolution stack."""
        self.stack.clear()


class ActivationReport(BaseModel):
    """Outcome of a successful host activation.

    Attributes:
        order: Module keys in the order their lifecycle callbacks ran.
        environment: Name of the hosting environment.
    """

    model_config = ConfigDict(frozen=True)

    order: Tuple[str, ...] = Field(default=(), description="Activated module keys, dependencies first.")
    environment: str = Field(default="", description="Name of the hosting environment.")


class ResolvedModules(List[IModule]):
    """Module instances in dependency order, each paired with its declared key.

    Behaves as a plain list of modules; ``keys`` keeps the key every
    module was declared under, which may differ from its class name.

    Example:
        >>> modules = resolver.resolve(["Billing"])
        >>> modules.keys
        ('Database', 'Billing')
    """

    def __init__(self, items: Iterable[Tuple[str, IModule]] = ()) -> None:
        pairs = list(items)
        super().__init__(module for _, module in pairs)
        self.keys: Tuple[str, ...] = tuple(key for key, _ in pairs)

    def items(self) -> List[Tuple[str, IModule]]:
        """Return ``(key, module)`` pairs in dependency order."""
        return list(zip(self.keys, self))
