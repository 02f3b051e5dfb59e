"""Application layer - Callable invocation with injected arguments."""

from typing import Any, Callable, List, Mapping, Optional

from keystone_di.application.parameter_resolver import ParameterResolver
from keystone_di.application.resolver import split_arguments
from keystone_di.domain import ITypeIntrospector


class CallableInvoker:
    """Calls arbitrary callables, resolving their parameters from the container.

    Parameters named in the overrides are passed verbatim; all others go
    through the parameter resolver.
    """

    def __init__(self, parameter_resolver: ParameterResolver, introspector: ITypeIntrospector) -> None:
        self._parameter_resolver = parameter_resolver
        self._introspector = introspector

    def invoke(self, func: Callable[..., Any], named_overrides: Optional[Mapping[str, Any]] = None) -> Any:
        """Call ``func`` with its parameters resolved.

        Args:
            func: Any callable: function, lambda, bound method or class.
            named_overrides: Values to pass by parameter name instead of resolving.

        Returns:
            Whatever ``func`` returns.

        Raises:
            UnresolvableParameterError: If a parameter without override cannot be resolved.

        Example:
            >>> def handler(mailer: Mailer, subject: str) -> str:
            ...     return mailer.send(subject)
            >>> invoker.invoke(handler, {"subject": "Welcome"})
        """
        overrides = dict(named_overrides or {})
        parameters = self._introspector.describe_callable(func)

        values: List[Any] = []
        for parameter in parameters:
            if parameter.name in overrides:
                values.append(overrides[parameter.name])
            else:
                values.append(self._parameter_resolver.resolve_parameter(parameter))

        args, kwargs = split_arguments(parameters, values)
        return func(*args, **kwargs)
