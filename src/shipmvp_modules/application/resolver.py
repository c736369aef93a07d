import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set, Tuple

from shipmvp_modules.application.catalog import ModuleCatalog
from shipmvp_modules.application.circular_detector import CircularDependencyDetector
from shipmvp_modules.application.registry import ModuleRegistry
from shipmvp_modules.domain import (
    IModule,
    IModuleCatalog,
    IModuleRegistry,
    IModuleResolver,
    ModuleDescriptor,
    ResolvedModules,
    UnknownModuleError,
    module_key,
)

logger = logging.getLogger(__name__)


class ModuleResolver(IModuleResolver):
    """Resolves root modules and their transitive dependencies into dependency order.

    Ordering is a depth-first walk over the declared dependency graph.
    Keys on the current path are tracked by the circular dependency
    detector, finished keys by a visited set; a key emitted in post-order
    always follows all of its dependencies. Module instances are only
    obtained from the registry once the whole order is known, so an invalid
    graph never constructs anything.

    Attributes:
        _catalog: Declared modules.
        _registry: Module instance cache.
        _circular_detector: Component detecting circular dependencies.
    """

    def __init__(
        self,
        catalog: Optional[IModuleCatalog] = None,
        registry: Optional[IModuleRegistry] = None,
        circular_detector: Optional[CircularDependencyDetector] = None,
    ) -> None:
        self._catalog: IModuleCatalog = catalog if catalog is not None else ModuleCatalog()
        self._registry: IModuleRegistry = registry if registry is not None else ModuleRegistry()
        self._circular_detector = circular_detector or CircularDependencyDetector()

    @property
    def catalog(self) -> IModuleCatalog:
        return self._catalog

    @property
    def registry(self) -> IModuleRegistry:
        return self._registry

    def _declare_root(self, root: Any) -> str:
        """Turn a root (key, module class or descriptor) into a declared key."""
        if isinstance(root, ModuleDescriptor):
            self._catalog.add(root)
            return root.key
        if isinstance(root, type):
            return self._catalog.add_module(root).key
        key = module_key(root)
        if key not in self._catalog:
            raise UnknownModuleError(key, "requested as a root module but never declared")
        return key

    def resolve_order(self, roots: Iterable[Any]) -> List[str]:
        """Compute the dependency order of the given roots.

        Args:
            roots: Module keys, module classes or descriptors.

        Returns:
            Every reachable module key exactly once, dependencies first.

        Raises:
            CircularDependencyError: If the reachable graph contains a cycle.
            UnknownModuleError: If a root or dependency key has no declaration.

        Example:
            >>> catalog.declare("Z", ZModule)
            >>> catalog.declare("Y", YModule, depends_on=["Z"])
            >>> catalog.declare("X", XModule, depends_on=["Y"])
            >>> resolver.resolve_order(["X"])
            ['Z', 'Y', 'X']
        """
        root_keys = [self._declare_root(root) for root in roots]
        order: List[str] = []
        visited: Set[str] = set()

        try:
            for key in root_keys:
                self._visit(key, visited, order)
        except Exception:
            self._circular_detector.clear()
            raise

        logger.debug("Resolved module order: %s", " -> ".join(order))
        return order

    def _visit(self, root: str, visited: Set[str], order: List[str]) -> None:
        if root in visited:
            return

        # Explicit stack of (key, remaining dependencies) so chain depth is not
        # bounded by the interpreter recursion limit
        self._circular_detector.push(root)
        stack: List[Tuple[str, Iterator[str]]] = [(root, iter(self._catalog.get(root).dependencies))]

        while stack:
            key, dependencies = stack[-1]
            for dependency in dependencies:
                if dependency in visited:
                    continue
                if dependency not in self._catalog:
                    raise UnknownModuleError(dependency, f"declared as a dependency of {key}")
                # Raises CircularDependencyError when dependency is already on the path
                self._circular_detector.push(dependency)
                stack.append((dependency, iter(self._catalog.get(dependency).dependencies)))
                break
            else:
                stack.pop()
                self._circular_detector.pop()
                visited.add(key)
                order.append(key)

    def resolve(self, roots: Iterable[Any]) -> ResolvedModules:
        """Resolve root modules into instances ordered dependencies first.

        Each module is constructed at most once per registry; resolving the
        same roots again returns the same instances.

        Args:
            roots: Module keys, module classes or descriptors.

        Returns:
            Module instances in dependency order, carrying their declared keys.

        Raises:
            CircularDependencyError: If the reachable graph contains a cycle.
            UnknownModuleError: If a root or dependency key has no declaration.
            ModuleConstructionError: If a module cannot be instantiated.
        """
        order = self.resolve_order(roots)
        return ResolvedModules((key, self._registry.get_or_create(self._catalog.get(key))) for key in order)

    def resolve_map(self, roots: Iterable[Any]) -> Dict[str, IModule]:
        """Resolve root modules into an ordered mapping of module key to instance.

        Same semantics as ``resolve``; the mapping iterates in dependency order.
        """
        order = self.resolve_order(roots)
        return {key: self._registry.get_or_create(self._catalog.get(key)) for key in order}
