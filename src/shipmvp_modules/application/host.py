import logging
import threading
from typing import Any, Dict, Iterable, List, Optional, Tuple

from shipmvp_modules.application.lifecycle_runner import LifecycleRunner
from shipmvp_modules.application.resolver import ModuleResolver
from shipmvp_modules.domain import (
    ActivationReport,
    ActivationStateError,
    HostState,
    ILifecycleRunner,
    LifecyclePhase,
    IModule,
    IModuleCatalog,
    IModuleRegistry,
)

logger = logging.getLogger(__name__)


class ModuleList(tuple):
    """Activated modules in dependency order, as registered in the service collection."""


class ModuleHost:
    """Activation entry point for an application composed of modules.

    Orchestrates resolution and the two lifecycle phases. A host is meant to
    be created once at process start and handed to the bootstrap code; it
    activates at most once.

    Attributes:
        _catalog: Declared modules.
        _registry: Module instance cache.
        _resolver: Component ordering modules by dependency.
        _runner: Component running lifecycle phases.
        _modules: Resolved modules keyed by module key, in dependency order.
        _state: Activation progress.
    """

    def __init__(
        self,
        catalog: Optional[IModuleCatalog] = None,
        registry: Optional[IModuleRegistry] = None,
        resolver: Optional[ModuleResolver] = None,
        runner: Optional[ILifecycleRunner] = None,
    ) -> None:
        """Initialize the host and its components.

        Args:
            catalog: Catalog of declared modules. A new one is created if omitted.
            registry: Module instance cache. A new one is created if omitted.
            resolver: Resolver to use. Built from catalog and registry if omitted;
                when given, the host uses its catalog and registry.
            runner: Lifecycle runner to use.

        Raises:
            ValueError: If a resolver is given together with a catalog or registry.
        """
        if resolver is not None and (catalog is not None or registry is not None):
            raise ValueError("Pass either a resolver or a catalog/registry, not both")
        if resolver is None:
            resolver = ModuleResolver(catalog=catalog, registry=registry)
        self._resolver = resolver
        self._catalog = resolver.catalog
        self._registry = resolver.registry
        self._runner: ILifecycleRunner = runner or LifecycleRunner()
        self._modules: Dict[str, IModule] = {}
        self._state = HostState.CREATED
        self._lock = threading.RLock()
        self._running: Optional[LifecyclePhase] = None

    @property
    def catalog(self) -> IModuleCatalog:
        return self._catalog

    @property
    def registry(self) -> IModuleRegistry:
        return self._registry

    @property
    def state(self) -> HostState:
        return self._state

    @property
    def modules(self) -> Tuple[IModule, ...]:
        """Resolved modules in dependency order."""
        return tuple(self._modules.values())

    @property
    def module_keys(self) -> Tuple[str, ...]:
        return tuple(self._modules)

    def _ensure_idle(self) -> None:
        """Reject lifecycle calls made from inside a running module callback."""
        if self._running is not None:
            raise ActivationStateError(f"Cannot re-enter the host while {self._running.value} is running")

    def add_modules(self, services: Any, *roots: Any) -> List[IModule]:
        """Resolve the root modules and run the service registration phase.

        The ordered module list is also registered into ``services`` as a
        ``ModuleList`` instance when the collection supports ``add_instance``.

        Args:
            services: The shared service collection.
            *roots: Module keys, module classes or descriptors to activate.

        Returns:
            Modules in dependency order.

        Raises:
            ActivationStateError: If services were already configured.
            CircularDependencyError: If the module graph contains a cycle.
            UnknownModuleError: If a module key has no declaration.
            ModuleActivationError: If a module's ``configure_services`` raises.
        """
        with self._lock:
            self._ensure_idle()
            if self._state != HostState.CREATED:
                raise ActivationStateError(f"Cannot add modules to a host in state {self._state.value}")

            self._running = LifecyclePhase.CONFIGURE_SERVICES
            try:
                modules = self._resolver.resolve_map(roots)
                self._runner.configure_services(modules, services)
            except Exception:
                self._state = HostState.FAILED
                logger.error("Module service registration failed", exc_info=True)
                raise
            finally:
                self._running = None

            self._modules = modules
            register_instance = getattr(services, "add_instance", None)
            if callable(register_instance):
                register_instance(ModuleList, ModuleList(modules.values()))

            self._state = HostState.SERVICES_CONFIGURED
            return list(modules.values())

    def configure_modules(self, pipeline: Any, environment: Any) -> None:
        """Run the pipeline configuration phase over the resolved modules.

        Args:
            pipeline: The application/pipeline builder.
            environment: The hosting environment.

        Raises:
            ActivationStateError: If services have not been configured yet.
            ModuleActivationError: If a module's ``configure`` raises.
        """
        with self._lock:
            self._ensure_idle()
            if self._state != HostState.SERVICES_CONFIGURED:
                raise ActivationStateError(f"Cannot configure modules of a host in state {self._state.value}")

            self._running = LifecyclePhase.CONFIGURE
            try:
                self._runner.configure(self._modules, pipeline, environment)
            except Exception:
                self._state = HostState.FAILED
                logger.error("Module pipeline configuration failed", exc_info=True)
                raise
            finally:
                self._running = None

            self._state = HostState.ACTIVATED

    def activate(self, roots: Iterable[Any], services: Any, pipeline: Any, environment: Any) -> ActivationReport:
        """Activate the application: resolve, register services, configure the pipeline.

        Args:
            roots: Module keys, module classes or descriptors to activate.
            services: The shared service collection.
            pipeline: The application/pipeline builder.
            environment: The hosting environment.

        Returns:
            Report with the activation order.

        Raises:
            ActivationStateError: If the host was already activated.
            CircularDependencyError: If the module graph contains a cycle.
            UnknownModuleError: If a module key has no declaration.
            ModuleActivationError: If a lifecycle callback raises.

        Example:
            >>> host = ModuleHost()
            >>> report = host.activate([HostModule], services, app, environment)
            >>> report.order
            ('DatabaseModule', 'ApplicationModule', 'HostModule')
        """
        self.add_modules(services, *roots)
        self.configure_modules(pipeline, environment)
        environment_name = getattr(environment, "name", environment)
        report = ActivationReport(
            order=self.module_keys,
            environment=environment_name if isinstance(environment_name, str) else "",
        )
        logger.info("Activated %d modules: %s", len(report.order), ", ".join(report.order))
        return report
