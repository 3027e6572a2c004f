"""
Dependency injection container.

Usage:
    container = Container()
    container.set("clock", SystemClock)
    container.once("db", lambda: Database("sqlite://"))
    container.instance("settings", settings)

    db = container.get("db")
    report = container.make("app.reports.Report", "2024-Q1")
    container.call("app.jobs.Cleanup@run", 30)
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from servicebox.config import ContainerConfig
from servicebox.core.introspection import is_object_value
from servicebox.core.registry import InstanceStore, Recipe, Registry, ServiceEntry
from servicebox.logging_config import get_logger
from servicebox.resolver.dispatch import Resolver

logger = get_logger(__name__)


@runtime_checkable
class ContainerInterface(Protocol):
    """Read-only lookup surface for consumers of a container."""

    def get(self, service_id: str) -> Any: ...

    def has(self, service_id: str) -> bool: ...


class Container:
    """Registry of recipes plus the resolver that turns them into values."""

    def __init__(self, config: ContainerConfig | None = None) -> None:
        self.config = config or ContainerConfig()
        self.registry = Registry(thread_safe=self.config.thread_safe)
        self.instances = InstanceStore(thread_safe=self.config.thread_safe)
        self._resolver = Resolver(self)

    @property
    def resolver(self) -> Resolver:
        return self._resolver

    def get(self, service_id: str) -> Any:
        """Resolve a registered service.

        Raises:
            NotFoundError: If ``service_id`` is not registered
        """
        return self._resolver.resolve_service(service_id)

    def make(self, service_id: str, *args: Any) -> Any:
        """Resolve ``service_id``, registering it as a class path first if absent.

        Explicit ``args`` are passed through to argument resolution.
        """
        if not self.has(service_id):
            self.set(service_id, service_id)
        return self._resolver.resolve_service(service_id, args)

    def has(self, service_id: str) -> bool:
        return self.registry.exists(service_id)

    def set(self, service_id: str, recipe: Any = None) -> Container:
        self.registry.set(ServiceEntry(service_id, Recipe.classify(recipe)))
        return self

    def once(self, service_id: str, recipe: Any = None) -> Container:
        self.registry.set(ServiceEntry(service_id, Recipe.classify(recipe), resolve_once=True))
        return self

    def instance(self, service_id: str, obj: Any) -> Container:
        """Register an already-built object, returned as-is on resolution.

        Classes and scalar values are not objects; registering one is a no-op.
        """
        if not is_object_value(obj):
            logger.warning(
                "instance_rejected", service_id=service_id, value_type=type(obj).__name__
            )
            return self
        self.registry.set(ServiceEntry(service_id, Recipe.classify(obj, prebuilt=True)))
        return self

    def remove(self, service_id: str) -> Container:
        self.registry.remove(service_id)
        return self

    def call(self, target: Any, *args: Any) -> Any:
        """Invoke a function, ``(receiver, method)`` pair or ``"Class@method"`` string.

        Raises:
            NotCallableError: If ``target`` cannot be turned into a callable
        """
        return self._resolver.call(target, args)

    def ids(self) -> list[str]:
        return self.registry.ids()

    def reset(self) -> None:
        """Forget memoized resolve-once values (useful for testing)."""
        self.instances.clear()

    def clear(self) -> None:
        """Drop all registrations and memoized values."""
        self.registry.clear()
        self.instances.clear()

    def __contains__(self, service_id: object) -> bool:
        return isinstance(service_id, str) and self.has(service_id)

    def __len__(self) -> int:
        return len(self.registry)


# Global container instance
_container: Container | None = None


def get_container() -> Container:
    """Get global container instance.

    Returns:
        Global Container instance (created on first call)
    """
    global _container
    if _container is None:
        _container = Container(ContainerConfig.from_env())
    return _container


def reset_container() -> None:
    """Reset global container (for testing)."""
    global _container
    _container = None
