from typing import Any, Awaitable, Callable

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from keystone_di.domain import IContainer, KeyLike


def create_fastapi_dependency(container: IContainer, key: KeyLike) -> Callable[[], Any]:
    """Wrap a container lookup as a zero-argument FastAPI dependency.

    The key is looked up on every call, so whatever the container holds at
    request time (shared, factory, instance or autowired) is returned.

    Args:
        container: Container to look the key up in.
        key: The key (or class) to return.

    Returns:
        A callable suitable for ``Depends()``.

    Example:
        >>> get_orders = create_fastapi_dependency(container, OrderRepository)
        >>>
        >>> @app.get("/orders")
        >>> def list_orders(orders: OrderRepository = Depends(get_orders)):
        ...     return orders.all()
    """

    def dependency() -> Any:
        return container.get(key)

    return dependency


def create_request_dependency(key: KeyLike) -> Callable[[Request], Any]:
    """Wrap a lookup in the container attached to the current request.

    ``ContainerMiddleware`` must be installed on the application.

    Args:
        key: The key (or class) to return.

    Returns:
        A callable taking the request, suitable for ``Depends()``.

    Raises:
        RuntimeError: When called for a request without an attached container.

    Example:
        >>> app.add_middleware(ContainerMiddleware, container=container)
        >>>
        >>> @app.post("/welcome")
        >>> def welcome(mailer: Mailer = Depends(create_request_dependency("mailer"))):
        ...     return mailer.send("Welcome")
    """

    def request_dependency(request: Request) -> Any:
        if not hasattr(request.state, "di_container"):
            raise RuntimeError("Request does not have a DI container. Did you forget to add ContainerMiddleware?")
        container: IContainer = request.state.di_container
        return container.get(key)

    return request_dependency


class ContainerMiddleware(BaseHTTPMiddleware):
    """Middleware exposing one container as ``request.state.di_container``.

    Every request sees the same container; nothing is cleaned up afterwards.

    Attributes:
        container: The container attached to each request.

    Example:
        >>> app = FastAPI()
        >>> app.add_middleware(ContainerMiddleware, container=container)
        >>>
        >>> @app.get("/health")
        >>> def health(request: Request):
        ...     return {"db": request.state.di_container.get(Database).ping()}
    """

    def __init__(self, app: FastAPI, container: IContainer):
        super().__init__(app)
        self.container = container

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        """Attach the container, then hand the request on.

        Exceptions raised further down propagate unchanged.
        """
        request.state.di_container = self.container
        return await call_next(request)
