"""Application layer - Circular dependency detection."""

import threading

from shipmvp_modules.domain import ResolutionContext


class CircularDependencyDetector:
    """Detects circular module dependencies during resolution.

    Uses thread-local storage to track the current resolution path, so
    resolvers running on different threads never see each other's paths.

    Attributes:
        _local: Thread-local storage for resolution contexts.
    """

    def __init__(self) -> None:
        """Initialize the circular dependency detector with thread-local storage."""
        self._local = threading.local()

    def _get_context(self) -> ResolutionContext:
        """Get the current thread's resolution context."""
        if not hasattr(self._local, "context"):
            self._local.context = ResolutionContext()
        return self._local.context

    def push(self, key: str) -> None:
        """Mark a module key as currently being resolved.

        Args:
            key: The module being resolved.

        Raises:
            CircularDependencyError: If the key is already on the path.

        Example:
            >>> detector = CircularDependencyDetector()
            >>> detector.push("HostModule")
            >>> detector.push("ApiModule")
            >>> detector.push("HostModule")  # Raises CircularDependencyError
        """
        self._get_context().push(key)

    def pop(self) -> None:
        """Remove the last key from the resolution path."""
        self._get_context().pop()

    def is_resolving(self, key: str) -> bool:
        """Whether ``key`` is on the current thread's resolution path."""
        return key in self._get_context().stack

    def clear(self) -> None:
        """Clear the current thread's resolution path.

        Called after a failed resolution so the detector can be reused.
        """
        if hasattr(self._local, "context"):
            self._local.context.clear()
