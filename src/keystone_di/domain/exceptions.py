from typing import List, Optional


class DIException(Exception):
    """Base exception for DI-related errors."""


class DuplicateKeyError(DIException):
    """Raised when a shared or factory registration already exists for a key.

    Attributes:
        key: The key that is already registered.
    """

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Entry for '{key}' already exists in the container.")


class NotFoundError(DIException):
    """Raised when nothing in the container can produce the requested key.

    This occurs when:
    - No instance, registration or resolvable class exists for the key.
    - Autowiring is disabled and the key is not registered.
    - Removing a key that appears in no tier.

    Attributes:
        key: The key that could not be found.
    """

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"No entry found in the container for key: {key}")


class ConstructionError(DIException):
    """Raised when retrieving an entry fails after it was found.

    The original failure, if any, is available as ``__cause__``.

    Attributes:
        key: The key being retrieved.
        reason: Optional reason for the failure.
    """

    def __init__(self, key: str, reason: Optional[str] = None) -> None:
        self.key = key
        self.reason = reason
        message = f"Error retrieving entry '{key}'"
        if reason:
            message += f". Reason: {reason}"
        super().__init__(message)


class BindingLoopError(DIException):
    """Raised when an alias chain revisits a key.

    Attributes:
        key: The key where the loop closed.
    """

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Binding loop detected at '{key}'.")


class ClassResolutionError(DIException):
    """Base exception for failures while autowiring a class.

    Attributes:
        key: The key of the class being resolved.
    """

    def __init__(self, key: str, message: str) -> None:
        self.key = key
        super().__init__(message)


class ClassNotFoundError(ClassResolutionError):
    """Raised when no class can be found for a key."""

    def __init__(self, key: str) -> None:
        super().__init__(key, f"Class {key} is not a valid resolvable class.")


class NotInstantiableError(ClassResolutionError):
    """Raised when the class for a key is abstract, a protocol or an enum."""

    def __init__(self, key: str) -> None:
        super().__init__(key, f"Class {key} is not instantiable.")


class CircularDependencyError(ClassResolutionError):
    """Raised when a circular dependency is detected.

    Attributes:
        dependency_chain: List of keys involved in the circular dependency,
            starting and ending with the same key.
    """

    def __init__(self, dependency_chain: List[str]) -> None:
        self.dependency_chain = dependency_chain
        message = f"Circular dependency detected: {' -> '.join(dependency_chain)}"
        super().__init__(dependency_chain[0] if dependency_chain else "", message)


class UnresolvableError(ClassResolutionError):
    """Raised when a constructor parameter of an autowired class cannot be resolved.

    The parameter failure is available as ``__cause__``.

    Attributes:
        key: The key of the class that could not be resolved.
        reason: Optional reason for the failure.
    """

    def __init__(self, key: str, reason: Optional[str] = None) -> None:
        self.reason = reason
        message = f"Cannot resolve dependency for key: {key}"
        if reason:
            message += f". Reason: {reason}"
        super().__init__(key, message)


class UnresolvableParameterError(DIException):
    """Raised when a single parameter cannot be given a value.

    This occurs when the parameter:
    - Is variadic (``*args`` or ``**kwargs``).
    - Lacks a type hint.
    - Has a union type or another unsupported typing construct.
    - Has a built-in type with neither a default nor ``None`` allowed.

    Attributes:
        parameter_name: Name of the parameter.
        reason: Why the parameter could not be resolved.
    """

    def __init__(self, parameter_name: str, reason: str) -> None:
        self.parameter_name = parameter_name
        self.reason = reason
        super().__init__(f"Cannot resolve parameter '{parameter_name}': {reason}")


class UnresolvedDependencyError(UnresolvableParameterError):
    """Raised when an object-typed parameter has no registration and no fallback.

    Attributes:
        type_key: The key of the parameter's declared type.
    """

    def __init__(self, parameter_name: str, type_key: str) -> None:
        self.type_key = type_key
        super().__init__(
            parameter_name,
            f"type {type_key} is not registered in the container and cannot be autowired",
        )
