import logging
import threading
from typing import Any, Callable, Dict, List, Mapping, Optional

from keystone_di.application.binding_resolver import BindingResolver
from keystone_di.application.circular_detector import CircularDependencyDetector
from keystone_di.application.introspection import TypeIntrospector
from keystone_di.application.invoker import CallableInvoker
from keystone_di.application.lifetime_manager import LifetimeManager
from keystone_di.application.parameter_resolver import ParameterResolver
from keystone_di.application.resolver import ConstructorResolver
from keystone_di.domain import (
    BindingLoopError,
    ConstructionError,
    ContainerConfig,
    DuplicateKeyError,
    IContainer,
    ILifetimeManager,
    IResolver,
    ITypeIntrospector,
    KeyLike,
    Lifetime,
    NotFoundError,
    Registration,
)

logger = logging.getLogger(__name__)

Factory = Callable[[IContainer], Any]


class DIContainer(IContainer):
    """Main dependency injection container.

    Keys are strings; classes are accepted anywhere a key is and are
    normalized to ``"<module>.<qualname>"``.

    Resolution order for ``get``:
        1. bindings/aliases
        2. cached instance (registered, shared, or autowired when caching is on)
        3. shared registration
        4. factory registration
        5. autowiring (if enabled)

    All public operations run under one re-entrant lock, so a container may
    be shared between threads.

    Attributes:
        _registry: Shared and factory registrations keyed by key.
        _bindings: Alias edges, alias key to target key.
        _tags: Tag name to the ordered list of tagged keys.
        _config: Autowiring switches.
        _introspector: Component reading classes and signatures.
        _binding_resolver: Component following alias chains.
        _lifetime_manager: Component owning the instance tier.
        _circular_detector: Component detecting circular dependencies.
        _resolver: Component responsible for auto-wiring classes.
        _invoker: Component calling callables with injected arguments.
    """

    def __init__(
        self,
        autowiring: bool = True,
        cache_autowired: bool = True,
        introspector: Optional[ITypeIntrospector] = None,
    ) -> None:
        """Initialize the container with empty tiers and its components.

        Args:
            autowiring: Whether unregistered classes may be built by autowiring.
            cache_autowired: Whether autowired instances are cached.
            introspector: Type introspection capability; defaults to ``TypeIntrospector``.
        """
        self._registry: Dict[str, Registration] = {}
        self._bindings: Dict[str, str] = {}
        self._tags: Dict[str, List[str]] = {}
        self._config = ContainerConfig(autowiring=autowiring, cache_autowired=cache_autowired)
        self._lock = threading.RLock()

        self._introspector: ITypeIntrospector = introspector or TypeIntrospector()
        self._binding_resolver = BindingResolver(self._bindings)
        self._lifetime_manager: ILifetimeManager = LifetimeManager()
        self._circular_detector = CircularDependencyDetector()
        parameter_resolver = ParameterResolver(self, self._introspector)
        self._resolver: IResolver = ConstructorResolver(parameter_resolver, self._introspector, self._circular_detector)
        self._invoker = CallableInvoker(parameter_resolver, self._introspector)

    @classmethod
    def from_config(cls, config: ContainerConfig, introspector: Optional[ITypeIntrospector] = None) -> "DIContainer":
        """Create a container from a ``ContainerConfig``.

        Example:
            >>> container = DIContainer.from_config(ContainerConfig(autowiring=False))
        """
        return cls(
            autowiring=config.autowiring,
            cache_autowired=config.cache_autowired,
            introspector=introspector,
        )

    @property
    def config(self) -> ContainerConfig:
        return self._config

    def key_for(self, key: KeyLike) -> str:
        """Normalize a string or class to the key used internally."""
        return self._introspector.key_for(key)

    def _register(self, key: KeyLike, factory: Factory, lifetime: Lifetime) -> None:
        """Internal registration method with validation.

        Args:
            key: The key to register.
            factory: Function to create the instance.
            lifetime: Whether the result is shared or rebuilt.

        Raises:
            DuplicateKeyError: If the key already has a shared or factory registration.
        """
        key = self.key_for(key)
        with self._lock:
            if key in self._registry:
                raise DuplicateKeyError(key)
            self._registry[key] = Registration(key=key, factory=factory, lifetime=lifetime)
        logger.debug("Registered %s entry '%s'", lifetime.value, key)

    def register_shared(self, key: KeyLike, factory: Factory) -> None:
        """Register a shared (singleton) entry.

        The factory runs on the first ``get``; later calls return the same object.

        Args:
            key: The key to register.
            factory: Function receiving the container and returning an instance.

        Raises:
            DuplicateKeyError: If the key already has a shared or factory registration.

        Example:
            >>> container.register_shared(DatabaseConnection, lambda c: DatabaseConnection(c.get(DatabaseConfig)))
        """
        self._register(key, factory, Lifetime.SHARED)

    def singleton(self, key: KeyLike, factory: Factory) -> None:
        """Alias for ``register_shared``."""
        self.register_shared(key, factory)

    def register_factory(self, key: KeyLike, factory: Factory) -> None:
        """Register a factory entry, built fresh on every ``get``.

        Args:
            key: The key to register.
            factory: Function receiving the container and returning an instance.

        Raises:
            DuplicateKeyError: If the key already has a shared or factory registration.

        Example:
            >>> container.register_factory(RequestHandler, lambda c: RequestHandler(c.get(DatabaseConnection)))
        """
        self._register(key, factory, Lifetime.FACTORY)

    def register_all(self, definitions: Mapping[KeyLike, Factory]) -> None:
        """Register multiple shared entries at once.

        Args:
            definitions: Mapping of keys to factories, registered in order.

        Raises:
            DuplicateKeyError: If one of the keys is already registered.

        Example:
            >>> container.register_all({
            ...     DatabaseConfig: lambda c: DatabaseConfig.from_env(),
            ...     "mailer": lambda c: SmtpMailer(),
            ... })
        """
        for key, factory in definitions.items():
            self.register_shared(key, factory)

    def register_instance(self, key: KeyLike, instance: Any) -> None:
        """Register an existing instance, always returned as-is.

        The instance tier is checked before registrations, so this overrides
        any shared or factory registration for the key.

        Args:
            key: The key to register.
            instance: The object returned for the key.
        """
        key = self.key_for(key)
        with self._lock:
            self._lifetime_manager.store(key, instance)
        logger.debug("Registered instance for '%s'", key)

    def bind(self, alias_key: KeyLike, target_key: KeyLike) -> None:
        """Bind an abstract key (typically an interface) to a target key.

        Re-binding an alias replaces its target.

        Example:
            >>> container.bind(Logger, StdoutLogger)
        """
        alias_key = self.key_for(alias_key)
        target_key = self.key_for(target_key)
        with self._lock:
            self._bindings[alias_key] = target_key
        logger.debug("Bound '%s' to '%s'", alias_key, target_key)

    def alias(self, alias_key: KeyLike, target_key: KeyLike) -> None:
        """Alias a key to another key.

        Example:
            >>> container.alias("db", DatabaseConnection)
        """
        self.bind(alias_key, target_key)

    def tag(self, key: KeyLike, tag_name: str) -> None:
        """Add a key to a tag. Tagging a key twice lists it twice."""
        key = self.key_for(key)
        with self._lock:
            self._tags.setdefault(tag_name, []).append(key)

    def tagged(self, tag_name: str) -> List[Any]:
        """Resolve every key under a tag, in tagging order.

        Returns:
            The resolved entries; empty for an unknown tag.
        """
        with self._lock:
            keys = list(self._tags.get(tag_name, []))
            return [self.get(key) for key in keys]

    def resolve_binding(self, key: KeyLike) -> str:
        """Follow alias bindings from a key to its terminal key.

        Raises:
            BindingLoopError: If the alias chain revisits a key.
        """
        key = self.key_for(key)
        with self._lock:
            return self._binding_resolver.resolve(key)

    def get(self, key: KeyLike) -> Any:
        """Resolve and return the entry for a key.

        Args:
            key: The key (or class) to resolve.

        Returns:
            The registered instance, the shared or factory result, or an
            autowired instance of the class named by the key.

        Raises:
            NotFoundError: If nothing can produce the key.
            BindingLoopError: If the key's alias chain loops.
            ConstructionError: For any failure while producing the entry;
                the original error is chained as ``__cause__``.

        Example:
            >>> user_service = container.get(UserService)
        """
        with self._lock:
            key = self.resolve_binding(key)
            try:
                if self._lifetime_manager.has_instance(key):
                    return self._lifetime_manager.get_instance(key)

                registration = self._registry.get(key)
                if registration is not None:
                    return self._lifetime_manager.get_or_create(
                        registration,
                        lambda: self._build(registration),
                    )

                if self._config.autowiring and self._introspector.find_type(key) is not None:
                    instance = self._resolver.resolve(key)
                    if self._config.cache_autowired:
                        self._lifetime_manager.store(key, instance)
                    return instance

                raise NotFoundError(key)
            except (NotFoundError, BindingLoopError, ConstructionError):
                raise
            except Exception as e:
                # Keep a consistent exception type for anything that went wrong.
                raise ConstructionError(key, str(e)) from e

    def try_get(self, key: KeyLike) -> Optional[Any]:
        """Like ``get``, but return None when nothing can produce the key.

        Failures for other keys (for example a missing nested dependency) and
        construction errors still propagate.
        """
        key = self.key_for(key)
        try:
            return self.get(key)
        except NotFoundError as e:
            if e.key == self.resolve_binding(key):
                return None
            raise

    def _build(self, registration: Registration) -> Any:
        # A factory that asks for its own key is a cycle too.
        self._circular_detector.push(registration.key)
        try:
            return registration.factory(self)
        finally:
            self._circular_detector.pop()

    def has(self, key: KeyLike) -> bool:
        """Check whether a key has a registration or cached instance.

        Bindings are followed; nothing is constructed.
        """
        with self._lock:
            key = self.resolve_binding(key)
            return key in self._registry or self._lifetime_manager.has_instance(key)

    def remove(self, key: KeyLike) -> None:
        """Remove a key from the instance, registration and binding tiers.

        Tag references to the key are left as they are.

        Raises:
            NotFoundError: If the key appears in none of the tiers.
        """
        key = self.key_for(key)
        with self._lock:
            removed = self._lifetime_manager.discard(key)
            removed = self._registry.pop(key, None) is not None or removed
            removed = self._bindings.pop(key, None) is not None or removed
        if not removed:
            raise NotFoundError(key)
        logger.debug("Removed '%s'", key)

    def clear(self) -> None:
        """Clear all registrations, instances, bindings and tags.

        Useful for testing or resetting the container state.
        """
        with self._lock:
            self._registry.clear()
            self._bindings.clear()
            self._tags.clear()
            self._lifetime_manager.clear_cache()
            self._circular_detector.clear()

    def flush_instances(self) -> None:
        """Clear only cached instances, keeping every registration.

        Shared entries are rebuilt on their next ``get``.
        """
        with self._lock:
            self._lifetime_manager.clear_cache()

    def set_autowiring(self, enabled: bool) -> None:
        """Enable or disable autowiring at runtime."""
        with self._lock:
            self._config = self._config.model_copy(update={"autowiring": enabled})

    def is_autowiring_enabled(self) -> bool:
        return self._config.autowiring

    def invoke(self, func: Callable[..., Any], named_overrides: Optional[Mapping[str, Any]] = None) -> Any:
        """Call a callable, letting the container resolve its type-hinted parameters.

        Args:
            func: The callable to invoke.
            named_overrides: Values to pass by parameter name instead of resolving.

        Returns:
            The callable's return value.

        Example:
            >>> def show_user(repository: UserRepository, user_id: int) -> User:
            ...     return repository.find(user_id)
            >>> container.invoke(show_user, {"user_id": 42})
        """
        with self._lock:
            return self._invoker.invoke(func, named_overrides)

    def all(self) -> Dict[str, Any]:
        """Return every tier merged into one mapping.

        Later tiers win on key collision: registrations, instances, bindings, tags.
        """
        with self._lock:
            entries: Dict[str, Any] = {key: reg.factory for key, reg in self._registry.items()}
            entries.update(self._lifetime_manager.get_instances_copy())
            entries.update(self._bindings)
            entries.update({tag: list(keys) for tag, keys in self._tags.items()})
            return entries

    def all_shared(self) -> Dict[str, Factory]:
        """Return the shared registrations as a key to factory mapping."""
        return self._factories_for(Lifetime.SHARED)

    def all_factories(self) -> Dict[str, Factory]:
        """Return the factory registrations as a key to factory mapping."""
        return self._factories_for(Lifetime.FACTORY)

    def _factories_for(self, lifetime: Lifetime) -> Dict[str, Factory]:
        with self._lock:
            return {key: reg.factory for key, reg in self._registry.items() if reg.lifetime == lifetime}

    def get_registry_copy(self) -> Dict[str, Registration]:
        """Get a copy of the registrations.

        Returns:
            Copy of the current registration map.
        """
        with self._lock:
            return self._registry.copy()

    def get_bindings_copy(self) -> Dict[str, str]:
        with self._lock:
            return self._bindings.copy()

    def get_tags_copy(self) -> Dict[str, List[str]]:
        with self._lock:
            return {tag: list(keys) for tag, keys in self._tags.items()}
