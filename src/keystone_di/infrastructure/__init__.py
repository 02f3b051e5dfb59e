"""
Infrastructure layer - Framework adapters and test helpers.

Adapters expose the container to FastAPI applications; the testing helpers
build throwaway containers with overridden entries.
"""

from keystone_di.infrastructure.fastapi_integration import (
    ContainerMiddleware,
    create_fastapi_dependency,
    create_request_dependency,
)
from keystone_di.infrastructure.testing import TestContainer, create_mock_container

__all__ = [
    "ContainerMiddleware",
    "create_fastapi_dependency",
    "create_request_dependency",
    "TestContainer",
    "create_mock_container",
]
