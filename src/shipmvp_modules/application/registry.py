import logging
import threading
from typing import Dict, Optional

from shipmvp_modules.domain import (
    IModule,
    IModuleRegistry,
    ModuleConstructionError,
    ModuleDescriptor,
)

logger = logging.getLogger(__name__)


class ModuleRegistry(IModuleRegistry):
    """Caches one module instance per module key.

    Construction is guarded by a lock per key, so concurrent first access
    to the same key builds the module only once while different keys can
    be built in parallel.

    Attributes:
        _instances: Cache of constructed modules.
        _key_locks: One lock per module key.
        _lock: Guards creation of per-key locks.
    """

    def __init__(self) -> None:
        """Initialize the registry with an empty cache."""
        self._instances: Dict[str, IModule] = {}
        self._key_locks: Dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def _lock_for(self, key: str) -> threading.Lock:
        with self._lock:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = self._key_locks[key] = threading.Lock()
            return lock

    def get_or_create(self, descriptor: ModuleDescriptor) -> IModule:
        """Get the cached module or construct and cache it.

        Args:
            descriptor: The module to instantiate.

        Returns:
            The single instance for ``descriptor.key``.

        Raises:
            ModuleConstructionError: If the factory raises or returns a non-module.
                Nothing is cached in that case.
        """
        key = descriptor.key
        instance = self._instances.get(key)
        if instance is not None:
            return instance

        with self._lock_for(key):
            instance = self._instances.get(key)
            if instance is not None:
                return instance

            try:
                instance = descriptor.factory()
            except Exception as e:
                raise ModuleConstructionError(key, f"Failed to create instance: {e}") from e
            if not isinstance(instance, IModule):
                raise ModuleConstructionError(key, f"Factory returned {type(instance).__name__}, not a module")

            self._instances[key] = instance
            logger.debug("Constructed module %s", key)
            return instance

    def get(self, key: str) -> Optional[IModule]:
        """Return the cached instance for ``key``, if any."""
        return self._instances.get(key)

    def instances(self) -> Dict[str, IModule]:
        """Return a copy of the instance cache."""
        return dict(self._instances)

    def clear(self) -> None:
        with self._lock:
            self._instances.clear()
            self._key_locks.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._instances

    def __len__(self) -> int:
        return len(self._instances)
