from typing import Any, Callable, Dict

from keystone_di.domain import ConstructionError, ILifetimeManager, Lifetime, Registration

_MISSING = object()


class LifetimeManager(ILifetimeManager):
    """Owns the instance tier and applies registration lifetimes.

    Shared registrations are built once and cached; factory registrations are
    built on every call. Explicitly registered and autowired instances live in
    the same cache.

    Attributes:
        _instances: Cache of instances keyed by container key.
    """

    def __init__(self) -> None:
        """Initialize the lifetime manager with an empty cache."""
        self._instances: Dict[str, Any] = {}

    def has_instance(self, key: str) -> bool:
        return key in self._instances

    def get_instance(self, key: str) -> Any:
        return self._instances[key]

    def store(self, key: str, instance: Any) -> None:
        self._instances[key] = instance

    def discard(self, key: str) -> bool:
        return self._instances.pop(key, _MISSING) is not _MISSING

    def get_or_create(self, registration: Registration, factory: Callable[[], Any]) -> Any:
        """Get existing instance or create new one based on lifetime.

        Args:
            registration: Registration containing the lifetime.
            factory: Function to create new instance if needed.

        Returns:
            Instance according to lifetime rules:
            - Shared: Returns cached instance or creates and caches new one
            - Factory: Always creates new instance

        Raises:
            ConstructionError: If the factory returned None.

        Example:
            >>> registration = Registration(
            ...     key="app.Mailer",
            ...     factory=lambda c: Mailer(),
            ...     lifetime=Lifetime.SHARED,
            ... )
            >>> instance = manager.get_or_create(registration, lambda: Mailer())
        """
        key = registration.key

        if registration.lifetime == Lifetime.SHARED:
            if key not in self._instances:
                self._instances[key] = self._checked(registration, factory())
            return self._instances[key]

        # Lifetime.FACTORY
        return self._checked(registration, factory())

    def clear_cache(self) -> None:
        """Clear all cached instances.

        Registrations are untouched, so shared entries are rebuilt on demand.
        """
        self._instances.clear()

    def get_instances_copy(self) -> Dict[str, Any]:
        """Get a copy of the instance cache.

        Returns:
            Copy of the cached instances keyed by container key.
        """
        return dict(self._instances)

    @staticmethod
    def _checked(registration: Registration, instance: Any) -> Any:
        if instance is None:
            raise ConstructionError(
                registration.key,
                f"{registration.lifetime.value.capitalize()} entry did not return an object",
            )
        return instance

