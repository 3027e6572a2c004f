"""
Class recipe resolution.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from servicebox.core.introspection import (
    check_instantiable,
    class_path,
    describe_constructor,
)
from servicebox.core.registry import RecipeKind, ServiceEntry
from servicebox.errors import NotInstantiableError
from servicebox.logging_config import get_logger

if TYPE_CHECKING:
    from servicebox.resolver.dispatch import Resolver

logger = get_logger(__name__)

NOT_APPLICABLE = object()

CLASS_KINDS = (RecipeKind.CLASS, RecipeKind.OBJECT, RecipeKind.INSTANCE)


class ClassResolver:
    """Constructs class recipes, autowiring their constructor arguments."""

    def __init__(self, resolver: Resolver) -> None:
        self._resolver = resolver

    def resolve(self, entry: ServiceEntry, args: Sequence[Any]) -> Any:
        """Resolve ``entry`` if it is class-like, else return NOT_APPLICABLE."""
        recipe = entry.recipe
        if recipe.kind not in CLASS_KINDS:
            return NOT_APPLICABLE
        if entry.is_prebuilt_instance:
            return recipe.value

        cls = recipe.target_class()
        if cls is None:
            # Dotted path no longer names a class
            return NOT_APPLICABLE
        return self.construct(cls, args)

    def construct(self, cls: type, args: Sequence[Any] = ()) -> Any:
        check_instantiable(cls)
        formals = describe_constructor(cls)
        if formals is None:
            return cls()
        arguments = self._resolver.parameters.prepare(formals, args)
        return cls(*arguments)

    def construct_bare(self, cls: type) -> Any:
        """Construct ``cls`` with no arguments and no autowiring."""
        check_instantiable(cls)
        formals = describe_constructor(cls) or []
        required = [f.name for f in formals if not f.has_default and not f.variadic]
        if required:
            raise NotInstantiableError.construction_failed(
                class_path(cls), "missing " + ", ".join(required)
            )
        instance = cls()
        logger.debug("autowire_constructed", class_name=class_path(cls))
        return instance
