"""Application layer - Parameter resolution policy."""

from typing import Any

from keystone_di.domain import (
    IContainer,
    ITypeIntrospector,
    ParameterDescriptor,
    TypeShape,
    UnresolvableParameterError,
    UnresolvedDependencyError,
)


class ParameterResolver:
    """Decides the value of one declared parameter from container state.

    Resolution rules, in order:

    - Variadic, untyped, union and otherwise unsupported types are rejected.
    - For class types:
        1. if the container has the key, use it
        2. if autowiring is enabled and the class is constructible, autowire it
        3. if nullable, use None
        4. if a default exists, use the default
        5. otherwise fail
    - For built-in types (``str``, ``int``, ``list[int]``, ``Any``...):
        1. if a default exists, use the default
        2. if nullable, use None
        3. otherwise fail

    The autowiring switch is read from the container on every call.
    """

    def __init__(self, container: IContainer, introspector: ITypeIntrospector) -> None:
        self._container = container
        self._introspector = introspector

    def resolve_parameter(self, parameter: ParameterDescriptor) -> Any:
        """Resolve a single parameter.

        Args:
            parameter: Descriptor of the declared parameter.

        Returns:
            The value to pass for the parameter.

        Raises:
            UnresolvableParameterError: If no value can be chosen.
        """
        name = parameter.name

        if parameter.variadic:
            raise UnresolvableParameterError(name, "variadic parameters are not supported for autowiring")
        if parameter.shape == TypeShape.UNTYPED:
            raise UnresolvableParameterError(name, "parameter is not type hinted")
        if parameter.shape == TypeShape.UNION:
            raise UnresolvableParameterError(name, f"union types are not supported ({parameter.type_key})")
        if parameter.shape != TypeShape.NAMED:
            raise UnresolvableParameterError(name, f"unsupported type {parameter.type_key}")

        if not parameter.builtin:
            return self._resolve_object(parameter)

        if parameter.has_default:
            return parameter.default
        if parameter.nullable:
            return None
        raise UnresolvableParameterError(name, f"built-in type {parameter.type_key} has no default value")

    def _resolve_object(self, parameter: ParameterDescriptor) -> Any:
        key = parameter.type_key

        if self._container.has(key):
            return self._container.get(key)

        if self._container.is_autowiring_enabled() and self._introspector.is_constructible(
            self._container.resolve_binding(key)
        ):
            return self._container.get(key)

        # Fallbacks apply only after the container had its chance.
        if parameter.nullable:
            return None
        if parameter.has_default:
            return parameter.default

        raise UnresolvedDependencyError(parameter.name, key)
