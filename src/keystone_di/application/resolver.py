import logging
from typing import Any, Dict, List, Tuple

from keystone_di.application.circular_detector import CircularDependencyDetector
from keystone_di.application.parameter_resolver import ParameterResolver
from keystone_di.domain import (
    ClassNotFoundError,
    IResolver,
    ITypeIntrospector,
    NotInstantiableError,
    ParameterDescriptor,
    UnresolvableError,
    UnresolvableParameterError,
)

logger = logging.getLogger(__name__)


class ConstructorResolver(IResolver):
    """Builds classes by resolving their constructor parameters.

    Reads constructor signatures through the type introspector, resolves each
    parameter with the parameter resolver (which may re-enter the container
    for nested dependencies) and instantiates the class. Keys being built are
    tracked by the circular dependency detector.
    """

    def __init__(
        self,
        parameter_resolver: ParameterResolver,
        introspector: ITypeIntrospector,
        circular_detector: CircularDependencyDetector,
    ) -> None:
        self._parameter_resolver = parameter_resolver
        self._introspector = introspector
        self._circular_detector = circular_detector

    def resolve(self, key: str) -> Any:
        """Resolve all constructor dependencies and create instance.

        Args:
            key: The key of the class to instantiate.

        Returns:
            Instance with all dependencies injected.

        Raises:
            ClassNotFoundError: If no class exists for the key.
            NotInstantiableError: If the class is abstract, a protocol or an enum.
            CircularDependencyError: If the key is already being constructed.
            UnresolvableError: If any constructor parameter cannot be resolved.

        Example:
            >>> class UserService:
            ...     def __init__(self, db: DatabaseConnection, logger: Logger):
            ...         self.db = db
            ...         self.logger = logger
            >>>
            >>> instance = resolver.resolve(container.key_for(UserService))
        """
        cls = self._introspector.find_type(key)
        if cls is None:
            raise ClassNotFoundError(key)
        if not self._introspector.is_constructible(key):
            raise NotInstantiableError(key)

        self._circular_detector.push(key)
        try:
            parameters = self._introspector.describe_constructor(key)
            if parameters is None:
                logger.debug("Autowiring %s without constructor arguments", key)
                return cls()

            values = []
            for parameter in parameters:
                try:
                    values.append(self._parameter_resolver.resolve_parameter(parameter))
                except UnresolvableParameterError as e:
                    raise UnresolvableError(key, str(e)) from e

            args, kwargs = split_arguments(parameters, values)
            logger.debug("Autowiring %s with %d argument(s)", key, len(values))
            return cls(*args, **kwargs)
        finally:
            self._circular_detector.pop()


def split_arguments(parameters: List[ParameterDescriptor], values: List[Any]) -> Tuple[List[Any], Dict[str, Any]]:
    """Arrange resolved values into positional and keyword arguments.

    Variadic values are unpacked: an iterable for ``*args``, a mapping for
    ``**kwargs``.

    Args:
        parameters: Descriptors in declaration order.
        values: One value per descriptor.

    Returns:
        Tuple of positional arguments and keyword arguments.
    """
    args: List[Any] = []
    kwargs: Dict[str, Any] = {}
    for parameter, value in zip(parameters, values):
        if parameter.variadic and parameter.keyword_only:
            kwargs.update(value)
        elif parameter.variadic:
            args.extend(value)
        elif parameter.keyword_only:
            kwargs[parameter.name] = value
        else:
            args.append(value)
    return args, kwargs
