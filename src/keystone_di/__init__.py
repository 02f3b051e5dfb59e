"""
keystone-di: Key-based inversion-of-control container with auto-wiring.

Public API exports for the keystone-di package.
"""

# Application exports
from keystone_di.application.container import DIContainer

# Domain exports
from keystone_di.domain.enums import Lifetime
from keystone_di.domain.exceptions import (
    BindingLoopError,
    CircularDependencyError,
    ClassNotFoundError,
    ClassResolutionError,
    ConstructionError,
    DIException,
    DuplicateKeyError,
    NotFoundError,
    NotInstantiableError,
    UnresolvableError,
    UnresolvableParameterError,
    UnresolvedDependencyError,
)
from keystone_di.domain.models import ContainerConfig

__version__ = "0.1.0"

__all__ = [
    # Container
    "DIContainer",
    "ContainerConfig",
    # Enums
    "Lifetime",
    # Exceptions
    "DIException",
    "DuplicateKeyError",
    "NotFoundError",
    "ConstructionError",
    "BindingLoopError",
    "ClassResolutionError",
    "ClassNotFoundError",
    "NotInstantiableError",
    "CircularDependencyError",
    "UnresolvableError",
    "UnresolvableParameterError",
    "UnresolvedDependencyError",
]
