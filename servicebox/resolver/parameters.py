"""
Argument list construction for autowired calls.

For each formal parameter, in declaration order:

1. A parameter hinted with a user class receives the first registered
   object of exactly that class, or a fresh bare instance of it.
2. Otherwise the next explicit argument is consumed. Explicit string
   arguments naming a class are then upgraded to instances across every
   slot built so far (see ``upgrade_class_names``).
3. A declared default is appended as well, even when 1 or 2 already
   supplied a value.

Empty slots are dropped afterwards and the list is fitted to the
positional arity of the target.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any

from servicebox.core.introspection import (
    SCALAR_TYPES,
    FormalParameter,
    accepts_varargs,
    is_class_like,
    locate_class,
)
from servicebox.logging_config import get_logger

if TYPE_CHECKING:
    from servicebox.resolver.dispatch import Resolver

logger = get_logger(__name__)


def collapse(args: Iterable[Any]) -> list[Any]:
    """Flatten nested lists, tuples and dict values depth-first."""
    items: list[Any] = []
    for arg in args:
        if isinstance(arg, (list, tuple)):
            items.extend(collapse(arg))
        elif isinstance(arg, dict):
            items.extend(collapse(arg.values()))
        else:
            items.append(arg)
    return items


def is_empty(value: Any) -> bool:
    """Falsy scalars and containers are empty; objects never are."""
    return value is None or (isinstance(value, SCALAR_TYPES) and not value)


class ParameterResolver:
    """Builds concrete argument lists from formal parameters."""

    def __init__(self, resolver: Resolver) -> None:
        self._resolver = resolver

    def resolve(self, formals: Sequence[FormalParameter], args: Sequence[Any]) -> list[Any]:
        """Return the raw slot list, before empty slots are dropped."""
        explicit = collapse(args)
        slots: list[Any] = []
        position = 0

        for formal in formals:
            if is_class_like(formal.declared_type):
                slots.append(self._resolver.autowire(formal.declared_type))
            elif position < len(explicit):
                if formal.variadic:
                    slots.extend(explicit[position:])
                    position = len(explicit)
                else:
                    slots.append(explicit[position])
                    position += 1
                slots = self.upgrade_class_names(slots)

            if formal.has_default:
                slots.append(formal.default)

        return slots

    def upgrade_class_names(self, slots: list[Any]) -> list[Any]:
        """Replace every string slot that names a class with an instance of it.

        Runs over all slots built so far, not only the one just consumed, so
        an earlier string default or argument naming a class is upgraded too.
        """
        upgraded = []
        for slot in slots:
            cls = locate_class(slot) if isinstance(slot, str) else None
            if cls is None:
                upgraded.append(slot)
                continue
            logger.debug("class_name_upgraded", class_name=slot)
            upgraded.append(self._resolver.autowire(cls))
        return upgraded

    def prepare(self, formals: Sequence[FormalParameter], args: Sequence[Any]) -> list[Any]:
        """Return the final positional argument list for invoking the target."""
        arguments = [slot for slot in self.resolve(formals, args) if not is_empty(slot)]
        if not accepts_varargs(list(formals)):
            arguments = arguments[: len(formals)]
        return arguments
