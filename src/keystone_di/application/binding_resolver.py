"""Application layer - Alias chain resolution."""

import logging
from typing import Dict, Set

from keystone_di.domain import BindingLoopError

logger = logging.getLogger(__name__)


class BindingResolver:
    """Follows alias bindings to the key that is actually registered.

    Reads the container's binding map by reference, so bindings added after
    construction are seen immediately.
    """

    def __init__(self, bindings: Dict[str, str]) -> None:
        self._bindings = bindings

    def resolve(self, key: str) -> str:
        """Follow bindings from ``key`` until a key with no binding is reached.

        Args:
            key: The key to start from.

        Returns:
            The terminal key of the chain (``key`` itself when unbound).

        Raises:
            BindingLoopError: If the chain revisits a key.

        Example:
            >>> resolver = BindingResolver({"db": "app.Database", "app.Database": "app.Postgres"})
            >>> resolver.resolve("db")
            'app.Postgres'
        """
        seen: Set[str] = set()
        while key in self._bindings:
            if key in seen:
                logger.debug("Binding loop detected at '%s'", key)
                raise BindingLoopError(key)
            seen.add(key)
            key = self._bindings[key]
        return key
