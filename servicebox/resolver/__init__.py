"""
Resolver module for servicebox.

Builds autowired argument lists and produces values from registered
recipes: callables, classes, objects and literals.
"""

from __future__ import annotations

from .callables import CallableResolver
from .classes import NOT_APPLICABLE, ClassResolver
from .dispatch import Resolver
from .parameters import ParameterResolver, collapse

__all__ = [
    "NOT_APPLICABLE",
    "CallableResolver",
    "ClassResolver",
    "ParameterResolver",
    "Resolver",
    "collapse",
]
