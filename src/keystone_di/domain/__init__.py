"""
Domain layer - Core business logic and models.

This layer contains the fundamental rules and models for the container.
It has no dependencies on other layers.
"""

from .enums import Lifetime, TypeShape
from .exceptions import (
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
from .interfaces import IContainer, ILifetimeManager, IResolver, ITypeIntrospector
from .models import ContainerConfig, KeyLike, ParameterDescriptor, Registration, ResolutionContext

# Rebuild Pydantic models to resolve forward references
Registration.model_rebuild()

__all__ = [
    # Enums
    "Lifetime",
    "TypeShape",
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
    # Interfaces
    "IContainer",
    "IResolver",
    "ILifetimeManager",
    "ITypeIntrospector",
    # Models
    "ContainerConfig",
    "KeyLike",
    "Registration",
    "ParameterDescriptor",
    "ResolutionContext",
]
