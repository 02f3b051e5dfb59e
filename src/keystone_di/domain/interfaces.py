from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Type

from keystone_di.domain.models import KeyLike, ParameterDescriptor, Registration


class IContainer(ABC):
    """Abstract interface for dependency injection container operations."""

    @abstractmethod
    def register_shared(self, key: KeyLike, factory: Callable[["IContainer"], Any]) -> None:
        """Register a factory whose result is built once and shared.

        Args:
            key: The key to register.
            factory: Function receiving the container and returning an instance.
        """

    @abstractmethod
    def register_factory(self, key: KeyLike, factory: Callable[["IContainer"], Any]) -> None:
        """Register a factory invoked fresh on every lookup.

        Args:
            key: The key to register.
            factory: Function receiving the container and returning an instance.
        """

    @abstractmethod
    def register_instance(self, key: KeyLike, instance: Any) -> None:
        """Register an already-built instance for a key.

        Args:
            key: The key to register.
            instance: The instance returned for the key.
        """

    @abstractmethod
    def get(self, key: KeyLike) -> Any:
        """Resolve and return the entry for a key.

        Args:
            key: The key to resolve.
        """

    @abstractmethod
    def has(self, key: KeyLike) -> bool:
        """Check whether a key has a registration or a cached instance.

        Args:
            key: The key to check.
        """

    @abstractmethod
    def resolve_binding(self, key: KeyLike) -> str:
        """Follow alias bindings from a key to its terminal key.

        Args:
            key: The key to start from.
        """

    @abstractmethod
    def is_autowiring_enabled(self) -> bool:
        """Whether unregistered classes may be built by autowiring."""

    @abstractmethod
    def clear(self) -> None:
        """Clear all registrations, instances, bindings and tags."""

    @abstractmethod
    def get_registry_copy(self) -> Dict[str, Registration]:
        """Get a copy of the current shared and factory registrations."""


class IResolver(ABC):
    """Abstract interface for constructing classes by autowiring."""

    @abstractmethod
    def resolve(self, key: str) -> Any:
        """Resolve all constructor dependencies of a class and create an instance.

        Args:
            key: The key of the class to build.

        Returns:
            Instance with all dependencies injected.

        Raises:
            ClassResolutionError: If the class cannot be found, instantiated,
                or one of its parameters cannot be resolved.
        """


class ILifetimeManager(ABC):
    """Abstract interface for the cached instance tier."""

    @abstractmethod
    def has_instance(self, key: str) -> bool:
        """Whether an instance is cached for a key."""

    @abstractmethod
    def get_instance(self, key: str) -> Any:
        """Return the cached instance for a key."""

    @abstractmethod
    def store(self, key: str, instance: Any) -> None:
        """Cache an instance for a key."""

    @abstractmethod
    def discard(self, key: str) -> bool:
        """Drop the cached instance for a key, returning whether one existed."""

    @abstractmethod
    def get_or_create(self, registration: Registration, factory: Callable[[], Any]) -> Any:
        """Get existing instance or create a new one based on lifetime.

        Args:
            registration: The registration being resolved.
            factory: A callable to create a new instance if needed.
        """

    @abstractmethod
    def clear_cache(self) -> None:
        """Clear every cached instance."""


class ITypeIntrospector(ABC):
    """Abstract interface for the host's type-introspection capability."""

    @abstractmethod
    def key_for(self, key: KeyLike) -> str:
        """Normalize a string or class to a key."""

    @abstractmethod
    def find_type(self, key: str) -> Optional[Type]:
        """Return the class defined for a key, or None."""

    @abstractmethod
    def is_constructible(self, key: str) -> bool:
        """Whether the class for a key exists and can be instantiated."""

    @abstractmethod
    def describe_constructor(self, key: str) -> Optional[List[ParameterDescriptor]]:
        """Describe the constructor parameters of the class for a key.

        Returns:
            None when the class declares no constructor, the ordered
            parameter descriptors otherwise.
        """

    @abstractmethod
    def describe_callable(self, func: Callable[..., Any]) -> List[ParameterDescriptor]:
        """Describe the parameters of an arbitrary callable."""
