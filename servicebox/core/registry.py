"""
Service registry and resolve-once instance store.

Recipes are classified once at registration into a tagged variant
(``RecipeKind``); the resolver confirms the classification when it runs.
"""

from __future__ import annotations

import inspect
import threading
from collections.abc import Iterator
from contextlib import contextmanager, nullcontext
from dataclasses import dataclass
from enum import Enum
from typing import Any

from servicebox.core.introspection import (
    is_class_like,
    is_invocable,
    is_object_value,
    locate_class,
)
from servicebox.errors import CircularDependencyError, NotFoundError
from servicebox.logging_config import get_logger

logger = get_logger(__name__)


class RecipeKind(Enum):
    """
    How a registered value is turned into a service.

    - LITERAL: returned as registered
    - CALLABLE: invoked with autowired arguments
    - CLASS: class object or dotted class path, constructed with autowiring
    - OBJECT: object whose class is constructed afresh with autowiring
    - INSTANCE: prebuilt object returned as-is
    """

    LITERAL = "literal"
    CALLABLE = "callable"
    CLASS = "class"
    OBJECT = "object"
    INSTANCE = "instance"


@dataclass(frozen=True)
class Recipe:
    """A registered value together with its classification."""

    kind: RecipeKind
    value: Any

    @classmethod
    def classify(cls, value: Any, prebuilt: bool = False) -> Recipe:
        if prebuilt:
            return cls(RecipeKind.INSTANCE, value)
        if is_invocable(value):
            return cls(RecipeKind.CALLABLE, value)
        if is_class_like(value):
            return cls(RecipeKind.CLASS, value)
        if isinstance(value, str) and locate_class(value) is not None:
            return cls(RecipeKind.CLASS, value)
        if is_object_value(value):
            return cls(RecipeKind.OBJECT, value)
        return cls(RecipeKind.LITERAL, value)

    def target_class(self) -> type | None:
        """The class this recipe constructs or holds, if any."""
        if self.kind is RecipeKind.CLASS:
            return locate_class(self.value)
        if self.kind in (RecipeKind.OBJECT, RecipeKind.INSTANCE):
            return type(self.value)
        return None

    @property
    def is_object(self) -> bool:
        """True for already-built objects that type matching may hand out."""
        return self.kind in (RecipeKind.OBJECT, RecipeKind.INSTANCE) and not inspect.isroutine(
            self.value
        )


@dataclass(frozen=True)
class ServiceEntry:
    """A registered recipe and its lifecycle flag."""

    id: str
    recipe: Recipe
    resolve_once: bool = False

    @property
    def is_prebuilt_instance(self) -> bool:
        return self.recipe.kind is RecipeKind.INSTANCE


class Registry:
    """Identifier -> ServiceEntry mapping kept in registration order."""

    def __init__(self, thread_safe: bool = True) -> None:
        self._entries: dict[str, ServiceEntry] = {}
        self._lock = threading.RLock() if thread_safe else nullcontext()

    def set(self, entry: ServiceEntry) -> None:
        with self._lock:
            self._entries[entry.id] = entry
        logger.debug(
            "service_registered",
            service_id=entry.id,
            kind=entry.recipe.kind.value,
            resolve_once=entry.resolve_once,
        )

    def get(self, service_id: str) -> ServiceEntry:
        with self._lock:
            try:
                return self._entries[service_id]
            except KeyError:
                raise NotFoundError.for_id(service_id) from None

    def exists(self, service_id: str) -> bool:
        with self._lock:
            return service_id in self._entries

    def remove(self, service_id: str) -> None:
        with self._lock:
            removed = self._entries.pop(service_id, None)
        if removed is not None:
            logger.debug("service_removed", service_id=service_id)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def ids(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def entries(self) -> list[ServiceEntry]:
        """Snapshot of the current entries in registration order."""
        with self._lock:
            return list(self._entries.values())

    def __iter__(self) -> Iterator[ServiceEntry]:
        return iter(self.entries())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class InstanceStore:
    """Memoized values of resolve-once services.

    ``claim`` holds one reentrant lock per service id so the check, the
    recipe execution and the write of a first resolution happen as one
    step. Holders and waiters are recorded so a thread about to wait on a
    lock whose holder is, directly or through other threads, waiting on
    this thread fails with CircularDependencyError instead of blocking.
    """

    def __init__(self, thread_safe: bool = True) -> None:
        self._values: dict[str, Any] = {}
        self._locks: dict[str, threading.RLock] = {}
        self._holders: dict[str, tuple[int, int]] = {}
        self._waiting: dict[int, str] = {}
        self._thread_safe = thread_safe
        self._guard = threading.Lock()

    def has(self, service_id: str) -> bool:
        return service_id in self._values

    def get(self, service_id: str) -> Any:
        return self._values[service_id]

    def put(self, service_id: str, value: Any) -> None:
        self._values[service_id] = value
        logger.debug("service_memoized", service_id=service_id)

    def lock_for(self, service_id: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(service_id)
            if lock is None:
                lock = self._locks[service_id] = threading.RLock()
            return lock

    @contextmanager
    def claim(self, service_id: str) -> Iterator[None]:
        """Hold the resolve-once lock for ``service_id``."""
        if not self._thread_safe:
            yield
            return

        me = threading.get_ident()
        lock = self.lock_for(service_id)
        with self._guard:
            chain = self._wait_chain(service_id, me)
            if chain is not None:
                logger.warning("resolution_failed", service_id=service_id, reason="deadlock")
                raise CircularDependencyError([chain[-1], *chain])
            self._waiting[me] = service_id

        lock.acquire()
        with self._guard:
            del self._waiting[me]
            _, depth = self._holders.get(service_id, (me, 0))
            self._holders[service_id] = (me, depth + 1)
        try:
            yield
        finally:
            with self._guard:
                _, depth = self._holders[service_id]
                if depth == 1:
                    del self._holders[service_id]
                else:
                    self._holders[service_id] = (me, depth - 1)
            lock.release()

    def _wait_chain(self, service_id: str, me: int) -> list[str] | None:
        """Ids linking ``service_id`` back to a lock held by ``me``, if any."""
        chain = [service_id]
        seen: set[int] = set()
        current = service_id
        while True:
            holder = self._holders.get(current)
            if holder is None:
                return None
            thread = holder[0]
            if thread == me:
                # Reentry on our own lock is left to the per-thread stack
                return chain if len(chain) > 1 else None
            if thread in seen:
                return None
            seen.add(thread)
            current = self._waiting.get(thread)
            if current is None:
                return None
            chain.append(current)

    def clear(self) -> None:
        with self._guard:
            self._values.clear()

    def __len__(self) -> int:
        return len(self._values)
