from typing import TYPE_CHECKING, Any, Callable, List, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field

from keystone_di.domain.enums import Lifetime, TypeShape
from keystone_di.domain.exceptions import CircularDependencyError

if TYPE_CHECKING:
    from keystone_di.domain.interfaces import IContainer

# A key is a plain string; classes are accepted wherever a key is and are
# normalized to "<module>.<qualname>".
KeyLike = Union[str, Type]


class ContainerConfig(BaseModel):
    """Runtime switches for a container.

    Attributes:
        autowiring: Build unregistered classes by introspecting their constructors.
        cache_autowired: Keep autowired instances in the instance tier.
    """

    model_config = ConfigDict(frozen=True)

    autowiring: bool = Field(default=True, description="Whether autowiring is enabled.")
    cache_autowired: bool = Field(
        default=True,
        description="Whether autowired instances are cached like shared entries.",
    )


class Registration(BaseModel):
    """Value object representing a shared or factory registration.

    Attributes:
        key: The key being registered.
        factory: Function that receives the container and returns an instance.
        lifetime: Whether the result is cached (shared) or rebuilt (factory).
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    key: str = Field(..., description="The key to be registered.")
    factory: Callable[["IContainer"], Any] = Field(
        ..., description="The factory function that builds the instance."
    )
    lifetime: Lifetime = Field(..., description="The lifetime of the registered entry.")


class ParameterDescriptor(BaseModel):
    """Describes one declared parameter of a constructor or callable.

    Attributes:
        name: Parameter name.
        shape: Shape of the declared type.
        type_key: Key of the declared type for ``NAMED`` shapes, a readable
            form of the annotation otherwise.
        builtin: Whether a ``NAMED`` type is a built-in/primitive type.
        nullable: Whether ``None`` is an accepted value.
        has_default: Whether a default value is declared.
        default: The declared default value.
        variadic: Whether the parameter is ``*args`` or ``**kwargs``.
        keyword_only: Whether the parameter must be passed by name.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    shape: TypeShape
    type_key: Optional[str] = None
    builtin: bool = False
    nullable: bool = False
    has_default: bool = False
    default: Any = None
    variadic: bool = False
    keyword_only: bool = False


class ResolutionContext(BaseModel):
    """Tracks the keys currently being constructed.

    Used for circular dependency detection.

    Attributes:
        stack: List of keys currently being resolved.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    stack: List[str] = Field(
        default_factory=list,
        description="Stack of keys currently being resolved.",
    )

    def push(self, key: str) -> None:
        """Add a key to the resolution stack.

        Args:
            key: The key being resolved.

        Raises:
            CircularDependencyError: If the key is already in the stack.
        """
        if key in self.stack:
            cycle = self.stack[self.stack.index(key) :] + [key]
            raise CircularDependencyError(cycle)
        self.stack.append(key)

    def pop(self) -> None:
        """Remove the last (most recent) key from the stack."""
        if self.stack:
            self.stack.pop()

    def clear(self) -> None:
        """Clear the entire resolution stack."""
        self.stack.clear()
