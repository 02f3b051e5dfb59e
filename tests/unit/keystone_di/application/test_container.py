"""Unit tests for DIContainer."""

import pytest

from deferred_annotation_fixtures import Formatter, Reporter

from keystone_di.application.container import DIContainer
from keystone_di.domain import (
    BindingLoopError,
    CircularDependencyError,
    ConstructionError,
    ContainerConfig,
    DuplicateKeyError,
    IContainer,
    Lifetime,
    NotFoundError,
    NotInstantiableError,
    UnresolvableError,
)


class Foo:
    pass


class Bar:
    pass


class Baz:
    def __init__(self, foo: Foo, bar: Bar):
        self.foo = foo
        self.bar = bar


class SomeClass:
    pass


class CircularA:
    def __init__(self, b: "CircularB"):
        self.b = b


class CircularB:
    def __init__(self, a: CircularA):
        self.a = a


class NeedsMissingDependency:
    def __init__(self, port: int):
        self.port = port


class TestContainerInitialization:
    """Test cases for DIContainer initialization."""

    def test_container_initialization(self):
        """Test that container initializes correctly."""
        container = DIContainer()
        assert container._registry == {}
        assert container._bindings == {}
        assert container._tags == {}
        assert container._resolver is not None
        assert container._lifetime_manager is not None
        assert container._circular_detector is not None

    def test_container_implements_interface(self):
        """Test that DIContainer implements IContainer."""
        assert isinstance(DIContainer(), IContainer)

    def test_default_config(self):
        """Test that autowiring and caching are enabled by default."""
        container = DIContainer()
        assert container.is_autowiring_enabled() is True
        assert container.config.cache_autowired is True

    def test_from_config(self):
        """Test building a container from a ContainerConfig."""
        container = DIContainer.from_config(ContainerConfig(autowiring=False, cache_autowired=False))
        assert container.is_autowiring_enabled() is False
        assert container.config.cache_autowired is False

    def test_get_and_set_autowiring(self):
        """Test toggling autowiring at runtime."""
        container = DIContainer()

        container.set_autowiring(False)
        assert container.is_autowiring_enabled() is False

        container.set_autowiring(True)
        assert container.is_autowiring_enabled() is True


class TestKeys:
    """Test cases for key handling."""

    def test_class_and_string_keys_are_equivalent(self):
        """Test that a class and its normalized key address the same entry."""
        container = DIContainer()
        container.register_shared(Foo, lambda c: Foo())

        assert container.get(f"{__name__}.Foo") is container.get(Foo)

    def test_arbitrary_string_key(self):
        """Test that any string is a valid key."""
        container = DIContainer()
        container.register_shared("config value", lambda c: {"debug": True})

        assert container.get("config value") == {"debug": True}

    def test_invalid_key_type(self):
        """Test that keys must be strings or classes."""
        with pytest.raises(TypeError):
            DIContainer().register_shared(42, lambda c: Foo())


class TestSharedRegistration:
    """Test cases for shared registration."""

    def test_register_shared(self):
        """Test registering a shared entry."""
        container = DIContainer()
        container.register_shared(SomeClass, lambda c: SomeClass())

        registration = container._registry[container.key_for(SomeClass)]
        assert registration.lifetime == Lifetime.SHARED
        assert container.has(SomeClass)

    def test_shared_returns_same_instance(self):
        """Test that get returns the identical object every time."""
        container = DIContainer()
        container.register_shared(Foo, lambda c: Foo())

        assert container.get(Foo) is container.get(Foo)

    def test_shared_factory_receives_container(self):
        """Test that the factory is called with the container."""
        container = DIContainer()
        container.register_shared(Foo, lambda c: Foo())
        container.register_shared(Baz, lambda c: Baz(c.get(Foo), Bar()))

        assert container.get(Baz).foo is container.get(Foo)

    def test_register_shared_twice_raises(self):
        """Test that registering the same key twice raises DuplicateKeyError."""
        container = DIContainer()
        container.register_shared(SomeClass, lambda c: SomeClass())

        with pytest.raises(DuplicateKeyError) as exc_info:
            container.register_shared(SomeClass, lambda c: SomeClass())

        assert exc_info.value.key == container.key_for(SomeClass)

    def test_register_factory_after_shared_raises(self):
        """Test that a key cannot be both shared and factory."""
        container = DIContainer()
        container.register_shared(SomeClass, lambda c: SomeClass())

        with pytest.raises(DuplicateKeyError):
            container.register_factory(SomeClass, lambda c: SomeClass())

    def test_singleton_is_alias(self):
        """Test that singleton() registers a shared entry."""
        container = DIContainer()
        container.singleton("service", lambda c: Foo())
        assert "service" in container.all_shared()

    def test_register_all(self):
        """Test registering several shared entries at once."""
        container = DIContainer()
        container.register_all({Foo: lambda c: Foo(), "bar": lambda c: Bar()})

        assert container.has(Foo)
        assert container.get("bar") is container.get("bar")
        assert set(container.all_shared()) == {container.key_for(Foo), "bar"}

    def test_shared_none_result_raises(self):
        """Test that a shared factory returning None fails."""
        container = DIContainer()
        container.register_shared("nothing", lambda c: None)

        with pytest.raises(ConstructionError, match="did not return an object"):
            container.get("nothing")


class TestFactoryRegistration:
    """Test cases for factory registration."""

    def test_factory_returns_new_instance_each_time(self):
        """Test that factory entries are never cached."""
        container = DIContainer()
        container.register_factory(Foo, lambda c: Foo())

        a = container.get(Foo)
        b = container.get(Foo)

        assert isinstance(a, Foo)
        assert isinstance(b, Foo)
        assert a is not b

    def test_register_factory_twice_raises(self):
        """Test the duplicate check for factories."""
        container = DIContainer()
        container.register_factory(Foo, lambda c: Foo())

        with pytest.raises(DuplicateKeyError):
            container.register_factory(Foo, lambda c: Foo())

    def test_factory_none_result_raises(self):
        """Test that a factory returning None fails."""
        container = DIContainer()
        container.register_factory("nothing", lambda c: None)

        with pytest.raises(ConstructionError):
            container.get("nothing")


class TestInstanceRegistration:
    """Test cases for instance registration."""

    def test_instance_is_returned_as_is(self):
        """Test that the registered object is returned exactly."""
        container = DIContainer()
        instance = Foo()
        container.register_instance(Foo, instance)

        assert container.get(Foo) is instance

    def test_instance_wins_over_shared(self):
        """Test that the instance tier overrides a shared registration."""
        container = DIContainer()
        container.register_shared(Foo, lambda c: Foo())
        instance = Foo()
        container.register_instance(Foo, instance)

        assert container.get(Foo) is instance

    def test_instance_wins_over_factory(self):
        """Test that the instance tier overrides a factory registration."""
        container = DIContainer()
        container.register_factory(Foo, lambda c: Foo())
        instance = Foo()
        container.register_instance(Foo, instance)

        assert container.get(Foo) is instance
        assert container.get(Foo) is instance

    def test_instance_can_be_registered_twice(self):
        """Test that instances are not subject to the duplicate check."""
        container = DIContainer()
        first, second = Foo(), Foo()
        container.register_instance(Foo, first)
        container.register_instance(Foo, second)

        assert container.get(Foo) is second


class TestBindings:
    """Test cases for bindings and aliases."""

    def test_bind_alias_to_registered_key(self):
        """Test resolving through a single alias."""
        container = DIContainer()
        container.register_shared(Foo, lambda c: Foo())
        container.bind("foo", Foo)

        assert container.get("foo") is container.get(Foo)

    def test_binding_chain_preserves_singleton_identity(self):
        """Test that a -> b -> c resolves to the shared c."""
        container = DIContainer()
        container.bind("a", "b")
        container.bind("b", "c")
        container.register_shared("c", lambda c: Foo())

        assert container.get("a") is container.get("c")
        assert container.get("b") is container.get("c")

    def test_rebinding_replaces_target(self):
        """Test that binding an alias again silently replaces it."""
        container = DIContainer()
        container.register_instance("one", 1)
        container.register_instance("two", 2)

        container.bind("number", "one")
        container.bind("number", "two")

        assert container.get("number") == 2

    def test_alias_is_bind(self):
        """Test that alias() records a binding."""
        container = DIContainer()
        container.register_instance("target", "value")
        container.alias("name", "target")

        assert container.get("name") == "value"
        assert container.resolve_binding("name") == "target"

    def test_binding_loop_raises(self):
        """Test that a looping chain fails on get."""
        container = DIContainer()
        container.bind("a", "b")
        container.bind("b", "a")

        with pytest.raises(BindingLoopError):
            container.get("a")
        with pytest.raises(BindingLoopError):
            container.get("b")

    def test_interface_bound_to_concrete_class_is_autowired(self):
        """Test binding a key to a class that is then autowired."""
        container = DIContainer()
        container.bind("foo", Foo)

        assert isinstance(container.get("foo"), Foo)

    def test_has_follows_bindings(self):
        """Test that has() checks the terminal key."""
        container = DIContainer()
        container.bind("alias", "target")
        assert container.has("alias") is False

        container.register_shared("target", lambda c: Foo())
        assert container.has("alias") is True


class TestGet:
    """Test cases for lookup and autowiring."""

    def test_get_registered_entry(self):
        """Test that get returns the registered entry."""
        container = DIContainer()
        container.register_shared(SomeClass, lambda c: SomeClass())

        assert isinstance(container.get(SomeClass), SomeClass)

    def test_autowire_unregistered_class(self):
        """Test that an unregistered class is autowired."""
        instance = DIContainer().get(Baz)

        assert isinstance(instance, Baz)
        assert isinstance(instance.foo, Foo)
        assert isinstance(instance.bar, Bar)

    def test_autowired_instances_are_cached_by_default(self):
        """Test that autowired instances are shared when caching is on."""
        container = DIContainer()

        assert container.get(Baz) is container.get(Baz)
        assert container.has(Baz)

    def test_autowired_instances_not_cached_when_disabled(self):
        """Test that caching of autowired instances can be turned off."""
        container = DIContainer(cache_autowired=False)

        assert container.get(Baz) is not container.get(Baz)
        assert container.has(Baz) is False

    def test_autowire_by_dotted_path(self):
        """Test that an importable class path is autowired."""
        import string

        assert isinstance(DIContainer().get("string.Formatter"), string.Formatter)

    def test_unregistered_class_without_autowiring_raises_not_found(self):
        """Test that disabling autowiring turns class lookups into NotFound."""
        container = DIContainer()
        container.set_autowiring(False)

        with pytest.raises(NotFoundError):
            container.get(SomeClass)

    def test_non_existent_key_raises_not_found(self):
        """Test that an unknown key raises NotFoundError."""
        with pytest.raises(NotFoundError) as exc_info:
            DIContainer().get("NonExistentClass")

        assert exc_info.value.key == "NonExistentClass"

    @pytest.mark.parametrize("key", [".x.Y", "..pkg.Service", ".Y"])
    def test_key_with_leading_dot_raises_not_found(self, key):
        """Test that keys shaped like relative imports are plain unknown keys."""
        with pytest.raises(NotFoundError) as exc_info:
            DIContainer().get(key)

        assert exc_info.value.key == key

    def test_autowire_with_postponed_annotations(self):
        """Test that a type-checking-only import does not break its sibling parameters."""
        reporter = DIContainer().get(Reporter)

        assert reporter.label is None
        assert isinstance(reporter.formatter, Formatter)
        assert reporter.retries == 3
        assert reporter.context is None

    def test_not_found_names_terminal_key(self):
        """Test that NotFoundError names the end of the alias chain."""
        container = DIContainer()
        container.bind("alias", "missing")

        with pytest.raises(NotFoundError) as exc_info:
            container.get("alias")

        assert exc_info.value.key == "missing"

    def test_factory_exception_is_wrapped(self):
        """Test that factory exceptions become ConstructionError with the cause kept."""
        container = DIContainer()

        def failing(c):
            raise RuntimeError("database unavailable")

        container.register_shared("db", failing)

        with pytest.raises(ConstructionError) as exc_info:
            container.get("db")

        assert exc_info.value.key == "db"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_abstract_class_is_not_instantiable(self):
        """Test that abstract classes fail as ConstructionError wrapping NotInstantiableError."""
        from abc import ABC, abstractmethod

        class Port(ABC):
            @abstractmethod
            def send(self):
                pass

        with pytest.raises(ConstructionError) as exc_info:
            DIContainer().get(Port)

        assert isinstance(exc_info.value.__cause__, NotInstantiableError)

    def test_parameter_failure_is_wrapped(self):
        """Test that an unresolvable constructor parameter is reported with its cause chain."""
        with pytest.raises(ConstructionError) as exc_info:
            DIContainer().get(NeedsMissingDependency)

        assert isinstance(exc_info.value.__cause__, UnresolvableError)

    def test_nested_not_found_propagates(self):
        """Test that a missing key requested by a factory surfaces as NotFoundError."""
        container = DIContainer()
        container.register_shared("service", lambda c: c.get("missing"))

        with pytest.raises(NotFoundError) as exc_info:
            container.get("service")

        assert exc_info.value.key == "missing"


class TestTryGet:
    """Test cases for try_get."""

    def test_try_get_returns_entry(self):
        """Test that try_get returns resolvable entries."""
        container = DIContainer()
        container.register_instance("x", 1)
        assert container.try_get("x") == 1

    def test_try_get_returns_none_for_missing_key(self):
        """Test that try_get returns None when nothing resolves the key."""
        assert DIContainer().try_get("missing") is None

    def test_try_get_returns_none_for_key_with_leading_dot(self):
        """Test that a relative-looking key is simply missing."""
        assert DIContainer().try_get(".x.Y") is None

    def test_try_get_follows_bindings(self):
        """Test that a missing alias target also yields None."""
        container = DIContainer()
        container.bind("alias", "missing")
        assert container.try_get("alias") is None

    def test_try_get_propagates_nested_not_found(self):
        """Test that missing nested dependencies still raise."""
        container = DIContainer()
        container.register_shared("service", lambda c: c.get("missing"))

        with pytest.raises(NotFoundError):
            container.try_get("service")

    def test_try_get_propagates_construction_errors(self):
        """Test that construction failures still raise."""
        container = DIContainer()
        container.register_shared("nothing", lambda c: None)

        with pytest.raises(ConstructionError):
            container.try_get("nothing")


class TestHasAndRemove:
    """Test cases for has, remove, clear and flush_instances."""

    def test_has_does_not_construct(self):
        """Test that has() never calls a factory."""
        container = DIContainer()
        calls = []
        container.register_shared("svc", lambda c: calls.append(1) or Foo())

        assert container.has("svc") is True
        assert calls == []

    def test_has_false_for_autowirable_class(self):
        """Test that has() reports registrations only, not autowiring candidates."""
        assert DIContainer().has(Foo) is False

    def test_remove_registered_entry(self):
        """Test that a removed key is gone and cannot be removed twice."""
        container = DIContainer()
        container.register_shared(SomeClass, lambda c: SomeClass())
        assert container.has(SomeClass)

        container.remove(SomeClass)
        assert container.has(SomeClass) is False

        with pytest.raises(NotFoundError):
            container.remove(SomeClass)

    def test_remove_clears_every_tier(self):
        """Test that remove drops instance, registration and binding for the key."""
        container = DIContainer()
        container.register_shared("k", lambda c: Foo())
        container.get("k")
        container.bind("k", "other")

        container.remove("k")

        assert "k" not in container.all()

    def test_remove_binding_only(self):
        """Test that removing an alias key removes the binding."""
        container = DIContainer()
        container.register_instance("target", 1)
        container.bind("alias", "target")

        container.remove("alias")

        assert container.resolve_binding("alias") == "alias"
        assert container.get("target") == 1

    def test_remove_unknown_key_raises(self):
        """Test that removing an unknown key raises NotFoundError."""
        with pytest.raises(NotFoundError):
            DIContainer().remove("never registered")

    def test_remove_leaves_stale_tag_references(self):
        """Test that tags keep removed keys and fail at lookup time."""
        container = DIContainer()
        container.register_instance("handler", "h")
        container.tag("handler", "handlers")

        container.remove("handler")

        with pytest.raises(NotFoundError):
            container.tagged("handlers")

    def test_clear_registered_entries(self):
        """Test that clear empties every tier."""
        container = DIContainer()
        container.register_shared(SomeClass, lambda c: SomeClass())
        container.register_factory(Baz, lambda c: Baz(Foo(), Bar()))
        container.register_instance("x", 1)
        container.bind("alias", "x")
        container.tag("x", "group")

        container.clear()

        assert container.has(SomeClass) is False
        assert container.has(Baz) is False
        assert container.all() == {}
        assert container.all_shared() == {}
        assert container.all_factories() == {}
        assert container.tagged("group") == []

    def test_flush_instances_keeps_registrations(self):
        """Test that flushing rebuilds shared entries on next get."""
        container = DIContainer()
        container.register_shared(Foo, lambda c: Foo())
        first = container.get(Foo)

        container.flush_instances()

        assert container.has(Foo) is True
        second = container.get(Foo)
        assert second is not first
        assert container.get(Foo) is second

    def test_flush_instances_drops_registered_instances(self):
        """Test that explicitly registered instances are flushed too."""
        container = DIContainer()
        container.register_instance("x", 1)

        container.flush_instances()

        assert container.has("x") is False


class TestTags:
    """Test cases for tagging."""

    def test_tagged_returns_instances_in_order(self):
        """Test that tagged() resolves keys in tagging order."""
        container = DIContainer()
        container.register_instance("first", 1)
        container.register_instance("second", 2)
        container.tag("second", "numbers")
        container.tag("first", "numbers")

        assert container.tagged("numbers") == [2, 1]

    def test_tagging_twice_lists_twice(self):
        """Test that the count equals the number of tag calls."""
        container = DIContainer()
        container.register_factory(Foo, lambda c: Foo())
        container.tag(Foo, "things")
        container.tag(Foo, "things")

        instances = container.tagged("things")

        assert len(instances) == 2
        assert instances[0] is not instances[1]

    def test_unknown_tag_is_empty(self):
        """Test that an unknown tag yields an empty list."""
        assert DIContainer().tagged("nothing") == []

    def test_tagged_autowires(self):
        """Test that tagged classes are autowired."""
        container = DIContainer()
        container.tag(Foo, "auto")
        container.tag(Bar, "auto")

        foo, bar = container.tagged("auto")

        assert isinstance(foo, Foo)
        assert isinstance(bar, Bar)


class TestListing:
    """Test cases for all(), all_shared() and all_factories()."""

    def test_all_registered_entries(self):
        """Test that all() lists every registered key."""
        container = DIContainer()
        container.register_shared(SomeClass, lambda c: SomeClass())
        container.register_shared(Baz, lambda c: Baz(Foo(), Bar()))

        entries = container.all()

        assert container.key_for(SomeClass) in entries
        assert container.key_for(Baz) in entries

    def test_all_includes_instances_bindings_and_tags(self):
        """Test that all() merges every tier."""
        container = DIContainer()
        container.register_instance("instance", 1)
        container.bind("alias", "instance")
        container.tag("instance", "group")

        assert container.all() == {"instance": 1, "alias": "instance", "group": ["instance"]}

    def test_all_shared_and_all_factories_split_by_lifetime(self):
        """Test that each listing only contains its tier."""
        container = DIContainer()
        shared = lambda c: Foo()
        factory = lambda c: Bar()
        container.register_shared("shared", shared)
        container.register_factory("factory", factory)

        assert container.all_shared() == {"shared": shared}
        assert container.all_factories() == {"factory": factory}

    def test_registry_copy_is_independent(self):
        """Test that mutating the copy leaves the container untouched."""
        container = DIContainer()
        container.register_shared("k", lambda c: Foo())

        copy = container.get_registry_copy()
        copy.clear()

        assert container.has("k")


class TestCircularDependencies:
    """Test cases for circular dependency handling at the container level."""

    def test_circular_dependency_is_wrapped(self):
        """Test that a constructor cycle surfaces as ConstructionError naming both keys."""
        container = DIContainer()

        with pytest.raises(ConstructionError) as exc_info:
            container.get(CircularA)

        cause = exc_info.value.__cause__
        assert isinstance(cause, CircularDependencyError)
        assert "CircularA" in str(cause)
        assert "CircularB" in str(cause)

    def test_stack_is_empty_after_cycle(self):
        """Test that a later independent get succeeds normally."""
        container = DIContainer()

        with pytest.raises(ConstructionError):
            container.get(CircularA)

        assert container._circular_detector.get_stack() == []
        assert isinstance(container.get(Baz), Baz)

    def test_factory_requesting_its_own_key(self):
        """Test that a factory asking for its own key is a cycle, not a RecursionError."""
        container = DIContainer()
        container.register_shared("loop", lambda c: c.get("loop"))

        with pytest.raises(ConstructionError) as exc_info:
            container.get("loop")

        assert exc_info.value.__cause__.dependency_chain == ["loop", "loop"]
        assert container._circular_detector.get_stack() == []

    def test_cycle_through_factories(self):
        """Test a cycle spanning two registered factories."""
        container = DIContainer()
        container.register_factory("a", lambda c: c.get("b"))
        container.register_factory("b", lambda c: c.get("a"))

        with pytest.raises(ConstructionError) as exc_info:
            container.get("a")

        assert exc_info.value.__cause__.dependency_chain == ["a", "b", "a"]
