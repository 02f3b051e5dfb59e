from enum import Enum


class Lifetime(str, Enum):
    """Defines how a registered factory's result is cached.

    Attributes:
        SHARED: Built once on first lookup and shared afterwards.
        FACTORY: Built fresh on every lookup, never cached.
    """

    SHARED = "shared"
    FACTORY = "factory"

    def __str__(self) -> str:
        return self.value


class TypeShape(str, Enum):
    """Shape of a parameter's declared type, as seen by the parameter resolver.

    Attributes:
        NAMED: A single named type (a class or a built-in), optionally nullable.
        UNTYPED: No annotation at all.
        UNION: A union with more than one non-None member.
        UNSUPPORTED: Any other typing construct (Callable, Literal, TypeVar...).
    """

    NAMED = "named"
    UNTYPED = "untyped"
    UNION = "union"
    UNSUPPORTED = "unsupported"

    def __str__(self) -> str:
        return self.value
