"""
Error hierarchy for the service container.

Every failure is raised where it is detected and propagates to the caller
unchanged; nothing in the resolution chain recovers from these.
"""

from __future__ import annotations

from collections.abc import Sequence


class ContainerError(Exception):
    """Base class for all container errors."""

    def __init__(self, message: str, service_id: str | None = None):
        self.service_id = service_id
        self.message = message
        super().__init__(message)


class NotFoundError(ContainerError, LookupError):
    """No entry is registered for the requested identifier."""

    @classmethod
    def for_id(cls, service_id: str) -> NotFoundError:
        return cls(f"No entry was found for '{service_id}' identifier.", service_id)


class NotInstantiableError(ContainerError):
    """A class required for construction cannot be instantiated."""

    def __init__(self, message: str, class_name: str, service_id: str | None = None):
        self.class_name = class_name
        super().__init__(message, service_id)

    @classmethod
    def abstract(cls, class_name: str) -> NotInstantiableError:
        return cls(f"Class {class_name} is not instantiable", class_name)

    @classmethod
    def construction_failed(cls, class_name: str, reason: str) -> NotInstantiableError:
        return cls(
            f"Class {class_name} is not instantiable without arguments: {reason}",
            class_name,
        )


class NotCallableError(ContainerError, TypeError):
    """A call() target is neither a function nor a (receiver, method) pair."""

    def __init__(self, message: str, target: str):
        self.target = target
        super().__init__(message)

    @classmethod
    def for_target(cls, target: str) -> NotCallableError:
        return cls(f"'{target}' is not callable", target)


class CircularDependencyError(ContainerError):
    """A service re-entered its own resolution before producing a value.

    Raised on a single thread, or when resolve-once locks held by several
    threads would wait on each other.
    """

    def __init__(self, chain: Sequence[str]):
        self.chain = list(chain)
        super().__init__(
            "Circular dependency detected: " + " -> ".join(self.chain),
            self.chain[-1] if self.chain else None,
        )


class ResolutionDepthError(ContainerError, RecursionError):
    """Nested resolution went deeper than the configured limit."""

    def __init__(self, chain: Sequence[str], max_depth: int):
        self.chain = list(chain)
        self.max_depth = max_depth
        super().__init__(
            f"Resolution depth exceeded {max_depth}: " + " -> ".join(self.chain),
            self.chain[-1] if self.chain else None,
        )
