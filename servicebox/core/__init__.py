"""
Core primitives for servicebox.
"""

from .introspection import (
    FormalParameter,
    class_path,
    describe_callable,
    describe_constructor,
    locate_class,
)
from .registry import InstanceStore, Recipe, RecipeKind, Registry, ServiceEntry
from .container import Container, ContainerInterface, get_container, reset_container

__all__ = [
    "Container",
    "ContainerInterface",
    "FormalParameter",
    "InstanceStore",
    "Recipe",
    "RecipeKind",
    "Registry",
    "ServiceEntry",
    "class_path",
    "describe_callable",
    "describe_constructor",
    "get_container",
    "locate_class",
    "reset_container",
]
