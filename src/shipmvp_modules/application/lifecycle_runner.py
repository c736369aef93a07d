import logging
from typing import Any, List, Mapping, Sequence, Tuple, Union

from shipmvp_modules.domain import (
    ILifecycleRunner,
    IModule,
    LifecyclePhase,
    ModuleActivationError,
    ResolvedModules,
    module_key,
)

logger = logging.getLogger(__name__)

ModuleSequence = Union[Mapping[str, IModule], Sequence[IModule]]


def _named(modules: ModuleSequence) -> List[Tuple[str, IModule]]:
    """Pair each module with its key, keeping order."""
    if isinstance(modules, (Mapping, ResolvedModules)):
        return list(modules.items())
    return [(module_key(module), module) for module in modules]


class LifecycleRunner(ILifecycleRunner):
    """Runs the two module lifecycle phases over an ordered module sequence.

    Phase A (``configure_services``) runs on every module before phase B
    (``configure``) runs on any. The first failing callback aborts the
    phase and is raised as ``ModuleActivationError``.

    Modules may be given as the result of ``ModuleResolver.resolve``, as an
    ordered mapping of module key to instance, or as a plain sequence. The
    first two keep declared keys in log lines and errors; a plain sequence
    falls back to each module's own key.
    """

    def configure_services(self, modules: ModuleSequence, services: Any) -> None:
        """Invoke ``configure_services`` on each module, in order.

        Args:
            modules: Modules in dependency order.
            services: The shared service collection.

        Raises:
            ModuleActivationError: If a module raises; later modules are not called.
        """
        for key, module in _named(modules):
            logger.info("Configuring services for module: %s", key)
            try:
                module.configure_services(services)
            except Exception as e:
                raise ModuleActivationError(key, LifecyclePhase.CONFIGURE_SERVICES, e) from e

    def configure(self, modules: ModuleSequence, pipeline: Any, environment: Any) -> None:
        """Invoke ``configure`` on each module, in order.

        Args:
            modules: Modules in dependency order.
            pipeline: The application/pipeline builder.
            environment: The hosting environment.

        Raises:
            ModuleActivationError: If a module raises; later modules are not called.
        """
        for key, module in _named(modules):
            logger.info("Configuring application pipeline for module: %s", key)
            try:
                module.configure(pipeline, environment)
            except Exception as e:
                raise ModuleActivationError(key, LifecyclePhase.CONFIGURE, e) from e

    def run(self, modules: ModuleSequence, services: Any, pipeline: Any, environment: Any) -> None:
        """Run phase A over all modules, then phase B over all modules."""
        self.configure_services(modules, services)
        self.configure(modules, pipeline, environment)
