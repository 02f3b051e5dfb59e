"""Application layer - Circular dependency detection."""

import logging
import threading
from typing import List

from keystone_di.domain import CircularDependencyError, ResolutionContext

logger = logging.getLogger(__name__)


class CircularDependencyDetector:
    """Detects circular dependencies during resolution.

    Uses thread-local storage to track the current resolution stack, so
    resolutions running on different threads never see each other's keys.
    When a key appears twice in the stack, a circular dependency is detected.

    Attributes:
        _local: Thread-local storage for resolution contexts.
    """

    def __init__(self) -> None:
        """Initialize the circular dependency detector with thread-local storage."""
        self._local = threading.local()

    def _get_context(self) -> ResolutionContext:
        """Get the current thread's resolution context.

        Returns:
            The resolution context for the current thread.
        """
        if not hasattr(self._local, "context"):
            self._local.context = ResolutionContext()
        return self._local.context

    def get_stack(self) -> List[str]:
        """Return a copy of the current thread's resolution stack."""
        return list(self._get_context().stack)

    def push(self, key: str) -> None:
        """Add a key to the resolution stack.

        Args:
            key: The key being resolved.

        Raises:
            CircularDependencyError: If the key is already in the stack.

        Example:
            >>> detector = CircularDependencyDetector()
            >>> detector.push("app.ServiceA")
            >>> detector.push("app.ServiceB")
            >>> detector.push("app.ServiceA")  # Raises CircularDependencyError
        """
        try:
            self._get_context().push(key)
        except CircularDependencyError as error:
            logger.debug("Circular dependency detected: %s", " -> ".join(error.dependency_chain))
            raise

    def pop(self) -> None:
        """Remove the last key from the resolution stack.

        Called on every exit path of a resolution.
        """
        self._get_context().pop()

    def clear(self) -> None:
        """Clear the current thread's resolution stack.

        Useful for testing or error recovery.
        """
        if hasattr(self._local, "context"):
            self._local.context.clear()
