"""
Application layer - Container and the components it drives.

Binding resolution, lifetimes, cycle detection, introspection, parameter
resolution, autowiring and invocation each live in their own module; the
container wires them together.
"""

from .binding_resolver import BindingResolver
from .circular_detector import CircularDependencyDetector
from .container import DIContainer
from .introspection import TypeIntrospector
from .invoker import CallableInvoker
from .lifetime_manager import LifetimeManager
from .parameter_resolver import ParameterResolver
from .resolver import ConstructorResolver

__all__ = [
    "DIContainer",
    "BindingResolver",
    "ConstructorResolver",
    "ParameterResolver",
    "CallableInvoker",
    "TypeIntrospector",
    "LifetimeManager",
    "CircularDependencyDetector",
]
