"""
Invocation of functions, closures and (receiver, method) pairs.

Accepted target shapes:

- a function, lambda, bound method or other callable object
- a two-item list/tuple ``(receiver, "method")`` where the receiver is an
  object, a class or a dotted class path
- a ``"pkg.mod.Class@method"`` string
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from servicebox.core.introspection import class_path, describe_callable, locate_class
from servicebox.core.registry import RecipeKind, ServiceEntry
from servicebox.errors import NotCallableError
from servicebox.logging_config import get_logger
from servicebox.resolver.classes import NOT_APPLICABLE

if TYPE_CHECKING:
    from servicebox.resolver.dispatch import Resolver

logger = get_logger(__name__)

GENERIC_TARGET = "function or closure"


class CallableResolver:
    """Normalizes call targets and invokes them with autowired arguments."""

    def __init__(self, resolver: Resolver) -> None:
        self._resolver = resolver

    @staticmethod
    def normalize(target: Any) -> Any:
        """Reduce ``target`` to a callable or a ``(receiver, method)`` tuple.

        Lists and tuples of any length other than two become an empty tuple,
        which is never callable.
        """
        if isinstance(target, str) and "@" in target:
            parts = target.split("@")
            if len(parts) == 2:
                target = tuple(parts)
        if isinstance(target, (list, tuple)):
            return tuple(target) if len(target) == 2 else ()
        return target

    def resolve(self, entry: ServiceEntry, args: Sequence[Any]) -> Any:
        """Invoke a callable recipe, or return NOT_APPLICABLE."""
        if entry.recipe.kind is not RecipeKind.CALLABLE:
            return NOT_APPLICABLE
        return self.invoke(entry.recipe.value, args)

    def call(self, target: Any, args: Sequence[Any] = ()) -> Any:
        return self.invoke(self.bind(target), args)

    def bind(self, target: Any) -> Callable[..., Any]:
        """Turn any accepted target shape into a plain callable."""
        normalized = self.normalize(target)

        if isinstance(normalized, tuple) and len(normalized) == 2:
            receiver, method = normalized
            name = method if isinstance(method, str) else "Method"
            if isinstance(receiver, str) or inspect.isclass(receiver):
                receiver = self._resolve_receiver(receiver, name)
            function = getattr(receiver, method, None) if isinstance(method, str) else None
            if function is None or not callable(function):
                raise NotCallableError.for_target(name)
            return function

        if callable(normalized) and not inspect.isclass(normalized):
            return normalized
        raise NotCallableError.for_target(GENERIC_TARGET)

    def invoke(self, function: Callable[..., Any], args: Sequence[Any]) -> Any:
        formals = describe_callable(function)
        arguments = self._resolver.parameters.prepare(formals, args)
        return function(*arguments)

    def _resolve_receiver(self, receiver: str | type, method: str) -> Any:
        """Find a registered instance of the receiver class or build a transient one."""
        cls = locate_class(receiver)
        if cls is None:
            raise NotCallableError.for_target(method)

        container = self._resolver.container
        for entry in container.registry:
            if self._resolver.produces(entry, cls):
                return container.get(entry.id)

        name = receiver if isinstance(receiver, str) else class_path(cls)
        existed = container.has(name)
        if not existed and not isinstance(receiver, str):
            container.set(name, cls)
        try:
            instance = container.make(name)
        finally:
            if not existed:
                container.remove(name)
        logger.debug("transient_receiver_created", class_name=name, cleaned_up=not existed)
        return instance
