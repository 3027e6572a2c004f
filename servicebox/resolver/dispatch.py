"""
Resolution dispatch for registered services.

A service is resolved by trying, in order, callable resolution, class
resolution and finally the literal recipe. Resolve-once services are
produced under a per-id lock and memoized in the container's instance
store. A per-thread resolution stack detects cycles and bounds depth.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from servicebox.core.introspection import check_instantiable, class_path
from servicebox.core.registry import RecipeKind, ServiceEntry
from servicebox.errors import CircularDependencyError, ResolutionDepthError
from servicebox.logging_config import get_logger
from servicebox.resolver.callables import CallableResolver
from servicebox.resolver.classes import NOT_APPLICABLE, ClassResolver
from servicebox.resolver.parameters import ParameterResolver

if TYPE_CHECKING:
    from servicebox.core.container import Container

logger = get_logger(__name__)


class Resolver:
    """Turns registered recipes into values against a live container.

    Example:
        resolver = container.resolver
        mailer = resolver.resolve_service("mailer")
        resolver.call("app.views.Home@show", request)
    """

    def __init__(self, container: Container):
        self._container = container
        self._local = threading.local()
        self.parameters = ParameterResolver(self)
        self.classes = ClassResolver(self)
        self.callables = CallableResolver(self)

    @property
    def container(self) -> Container:
        return self._container

    # =========================================================================
    # Services
    # =========================================================================

    def resolve_service(self, service_id: str, args: Sequence[Any] = ()) -> Any:
        """Resolve a registered id, honouring resolve-once memoization."""
        entry = self._container.registry.get(service_id)
        store = self._container.instances

        if not entry.resolve_once:
            if store.has(service_id):
                return store.get(service_id)
            return self._produce(entry, args)

        with store.claim(service_id):
            if store.has(service_id):
                return store.get(service_id)
            value = self._produce(entry, args)
            store.put(service_id, value)
            return value

    def _produce(self, entry: ServiceEntry, args: Sequence[Any]) -> Any:
        with self._tracking(entry.id):
            value = self.callables.resolve(entry, args)
            if value is NOT_APPLICABLE:
                value = self.classes.resolve(entry, args)
            if value is NOT_APPLICABLE:
                value = entry.recipe.value
        logger.debug(
            "service_resolved",
            service_id=entry.id,
            kind=entry.recipe.kind.value,
            resolve_once=entry.resolve_once,
        )
        return value

    def call(self, target: Any, args: Sequence[Any] = ()) -> Any:
        return self.callables.call(target, args)

    # =========================================================================
    # Autowiring
    # =========================================================================

    def autowire(self, cls: type) -> Any:
        """Return the first registered object of exactly ``cls`` or a bare new one."""
        check_instantiable(cls)
        match = self.find_instance(cls)
        if match is not None:
            logger.debug("autowire_matched", class_name=class_path(cls))
            return match
        return self.classes.construct_bare(cls)

    def find_instance(self, cls: type) -> Any:
        """First object of exactly ``cls`` among the registry's entries.

        An entry contributes its memoized value when it has one, otherwise
        its registered object. Closures are never matched.
        """
        store = self._container.instances
        for entry in self._container.registry:
            if store.has(entry.id):
                value = store.get(entry.id)
                if type(value) is cls:
                    return value
                continue
            if entry.recipe.is_object and type(entry.recipe.value) is cls:
                return entry.recipe.value
        return None

    def produces(self, entry: ServiceEntry, cls: type) -> bool:
        """Whether resolving ``entry`` yields an object of exactly ``cls``.

        Decided without running factories: callables count only once
        memoized.
        """
        store = self._container.instances
        if store.has(entry.id):
            return type(store.get(entry.id)) is cls
        if entry.recipe.kind in (RecipeKind.CALLABLE, RecipeKind.LITERAL):
            return False
        return entry.recipe.target_class() is cls

    # =========================================================================
    # Cycle and depth tracking
    # =========================================================================

    def _stack(self) -> list[str]:
        stack = getattr(self._local, "stack", None)
        if stack is None:
            stack = self._local.stack = []
        return stack

    @contextmanager
    def _tracking(self, service_id: str) -> Iterator[None]:
        stack = self._stack()
        config = self._container.config
        if config.detect_cycles and service_id in stack:
            chain = [*stack[stack.index(service_id):], service_id]
            logger.warning("resolution_failed", service_id=service_id, reason="circular")
            raise CircularDependencyError(chain)
        if len(stack) >= config.max_depth:
            logger.warning("resolution_failed", service_id=service_id, reason="depth")
            raise ResolutionDepthError([*stack, service_id], config.max_depth)
        stack.append(service_id)
        try:
            yield
        finally:
            stack.pop()

    @property
    def resolving(self) -> list[str]:
        """Ids currently being resolved on this thread, outermost first."""
        return list(self._stack())
