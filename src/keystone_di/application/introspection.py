"""Application layer - Type introspection for autowiring."""

import importlib
import inspect
import types
from enum import Enum
from typing import Any, Callable, Dict, ForwardRef, List, Optional, Type, Union, get_args, get_origin, get_type_hints

from keystone_di.domain import ITypeIntrospector, KeyLike, ParameterDescriptor, TypeShape

_NONE_TYPE = type(None)
_UNION_ORIGINS = (Union, types.UnionType)


class TypeIntrospector(ITypeIntrospector):
    """Reads constructor and callable signatures using ``inspect`` and type hints.

    Classes passed as keys (or met as parameter annotations) are remembered
    under their normalized key, so locally defined classes can be autowired
    even though they cannot be imported by name.

    Attributes:
        _known_types: Classes seen so far, keyed by normalized key.
    """

    def __init__(self) -> None:
        """Initialize the introspector with no known types."""
        self._known_types: Dict[str, Type] = {}

    def key_for(self, key: KeyLike) -> str:
        """Normalize a key.

        Args:
            key: A string key, or a class.

        Returns:
            The string itself, or ``"<module>.<qualname>"`` for a class.

        Raises:
            TypeError: If the key is neither a string nor a class.

        Example:
            >>> introspector.key_for(collections.OrderedDict)
            'collections.OrderedDict'
        """
        if isinstance(key, str):
            return key
        if inspect.isclass(key):
            name = f"{key.__module__}.{key.__qualname__}"
            self._known_types[name] = key
            return name
        raise TypeError(f"Container keys must be strings or classes, got {type(key).__name__}")

    def find_type(self, key: str) -> Optional[Type]:
        if key in self._known_types:
            return self._known_types[key]
        found = _locate(key)
        if found is not None:
            self._known_types[key] = found
        return found

    def is_constructible(self, key: str) -> bool:
        cls = self.find_type(key)
        if cls is None or inspect.isabstract(cls):
            return False
        if getattr(cls, "_is_protocol", False):
            return False
        return not issubclass(cls, Enum)

    def describe_constructor(self, key: str) -> Optional[List[ParameterDescriptor]]:
        cls = self.find_type(key)
        if cls is None:
            return None
        return self._describe_init(cls)

    def describe_callable(self, func: Callable[..., Any]) -> List[ParameterDescriptor]:
        if inspect.isclass(func):
            # Calling a class runs its __init__, whose hints live on the function.
            return self._describe_init(func) or []
        return self._describe(func)

    def _describe_init(self, cls: Type) -> Optional[List[ParameterDescriptor]]:
        init = cls.__init__
        if init is object.__init__:
            return None
        # The first parameter of an unbound __init__ is the instance.
        return self._describe(init)[1:]

    def _describe(self, func: Callable[..., Any]) -> List[ParameterDescriptor]:
        signature = inspect.signature(func)
        hints = _type_hints(func)
        return [
            self._describe_parameter(param, hints.get(name, param.annotation))
            for name, param in signature.parameters.items()
        ]

    def _describe_parameter(self, param: inspect.Parameter, annotation: Any) -> ParameterDescriptor:
        has_default = param.default is not inspect.Parameter.empty
        base = {
            "name": param.name,
            "has_default": has_default,
            "default": param.default if has_default else None,
            "variadic": param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD),
            "keyword_only": param.kind in (inspect.Parameter.KEYWORD_ONLY, inspect.Parameter.VAR_KEYWORD),
        }

        if annotation is inspect.Parameter.empty:
            return ParameterDescriptor(shape=TypeShape.UNTYPED, **base)

        nullable = False
        if get_origin(annotation) in _UNION_ORIGINS:
            members = [arg for arg in get_args(annotation) if arg is not _NONE_TYPE]
            nullable = len(members) < len(get_args(annotation))
            if len(members) != 1:
                return ParameterDescriptor(shape=TypeShape.UNION, type_key=repr(annotation), nullable=nullable, **base)
            annotation = members[0]

        if isinstance(annotation, ForwardRef):
            annotation = annotation.__forward_arg__
        if isinstance(annotation, str):
            # An annotation that could not be evaluated names its key directly.
            return ParameterDescriptor(shape=TypeShape.NAMED, type_key=annotation, nullable=nullable, **base)

        if annotation is Any or annotation is None or annotation is _NONE_TYPE:
            # Both accept None as a value.
            return ParameterDescriptor(shape=TypeShape.NAMED, type_key=repr(annotation), builtin=True, nullable=True, **base)

        if inspect.isclass(annotation):
            if annotation.__module__ == "builtins":
                return ParameterDescriptor(
                    shape=TypeShape.NAMED, type_key=annotation.__name__, builtin=True, nullable=nullable, **base
                )
            return ParameterDescriptor(
                shape=TypeShape.NAMED, type_key=self.key_for(annotation), nullable=nullable, **base
            )

        origin = get_origin(annotation)
        if inspect.isclass(origin) and origin.__module__ == "builtins":
            # Parametrized containers such as list[int] or Dict[str, int].
            return ParameterDescriptor(
                shape=TypeShape.NAMED, type_key=repr(annotation), builtin=True, nullable=nullable, **base
            )

        return ParameterDescriptor(shape=TypeShape.UNSUPPORTED, type_key=repr(annotation), nullable=nullable, **base)


def _type_hints(func: Callable[..., Any]) -> Dict[str, Any]:
    try:
        return get_type_hints(func)
    except (NameError, TypeError, AttributeError):
        pass

    # Evaluate annotations one by one; only the ones that fail stay strings.
    namespace = getattr(inspect.unwrap(func), "__globals__", {})
    hints: Dict[str, Any] = {}
    for name, annotation in getattr(func, "__annotations__", {}).items():
        if isinstance(annotation, str):
            try:
                annotation = eval(annotation, namespace)
            except (NameError, TypeError, AttributeError, SyntaxError):
                pass
        hints[name] = annotation
    return hints


def _locate(key: str) -> Optional[Type]:
    """Find a class by dotted path, importing the longest importable module prefix."""
    parts = key.split(".")
    for index in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:index])
        if module_name.startswith("."):
            # Relative module names cannot be imported without a package.
            continue
        try:
            target: Any = importlib.import_module(module_name)
        except (ImportError, ValueError):
            continue
        for attribute in parts[index:]:
            target = getattr(target, attribute, None)
            if target is None:
                return None
        if inspect.isclass(target) and target.__module__ != "builtins":
            return target
        return None
    return None
