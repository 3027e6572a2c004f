"""
servicebox: a runtime dependency injection container.

This package contains:
- Container (registration, lookup and invocation)
- Resolver (autowiring of constructor and callable arguments)
- Configuration and structured logging helpers
"""

from servicebox.config import ContainerConfig
from servicebox.core.container import (
    Container,
    ContainerInterface,
    get_container,
    reset_container,
)
from servicebox.errors import (
    CircularDependencyError,
    ContainerError,
    NotCallableError,
    NotFoundError,
    NotInstantiableError,
    ResolutionDepthError,
)

__version__ = "0.1.0"

__all__ = [
    "CircularDependencyError",
    "Container",
    "ContainerConfig",
    "ContainerError",
    "ContainerInterface",
    "NotCallableError",
    "NotFoundError",
    "NotInstantiableError",
    "ResolutionDepthError",
    "get_container",
    "reset_container",
]
