"""
Runtime introspection helpers.

Describes the formal parameters of callables and constructors, locates
classes by dotted path and decides whether a class can be autowired.
"""

from __future__ import annotations

import functools
import importlib
import inspect
import re
import types
import typing
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from servicebox.errors import NotInstantiableError

SCALAR_TYPES = (
    str,
    bytes,
    bytearray,
    int,
    float,
    complex,
    bool,
    type(None),
    list,
    tuple,
    dict,
    set,
    frozenset,
)

# "pkg.mod.Class" or "pkg.mod:Class.Inner"
_CLASS_PATH_RE = re.compile(
    r"^[A-Za-z_]\w*(?:\.[A-Za-z_]\w*)*(?::[A-Za-z_]\w*(?:\.[A-Za-z_]\w*)*|\.[A-Za-z_]\w*)$"
)

_EMPTY = inspect.Parameter.empty


@dataclass(frozen=True)
class FormalParameter:
    """A single formal parameter of a callable or constructor."""

    name: str
    declared_type: Any = None
    has_default: bool = False
    default: Any = None
    variadic: bool = False


def class_path(cls: type) -> str:
    """Return the dotted path that ``locate_class`` resolves back to ``cls``."""
    return f"{cls.__module__}.{cls.__qualname__}"


def is_object_value(value: Any) -> bool:
    """True for instances that are neither classes nor scalar/builtin containers."""
    return not inspect.isclass(value) and not isinstance(value, SCALAR_TYPES)


def is_invocable(value: Any) -> bool:
    """True for plain functions, lambdas, bound methods and partials."""
    return (
        inspect.isfunction(value)
        or inspect.ismethod(value)
        or inspect.isbuiltin(value)
        or isinstance(value, functools.partial)
    )


def is_class_like(tp: Any) -> bool:
    """True when ``tp`` is a user class the resolver may autowire."""
    return inspect.isclass(tp) and tp.__module__ != "builtins"


def unwrap_optional(tp: Any) -> Any:
    """Reduce ``Optional[T]`` / ``T | None`` to ``T``."""
    origin = typing.get_origin(tp)
    if origin is typing.Union or origin is types.UnionType:
        args = [arg for arg in typing.get_args(tp) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def _import_attribute(module_name: str, attr_path: list[str]) -> Any:
    try:
        obj: Any = importlib.import_module(module_name)
    except ModuleNotFoundError as exc:
        # Only a missing candidate module means "not a class path"
        if exc.name and (module_name == exc.name or module_name.startswith(exc.name + ".")):
            return None
        raise
    for attr in attr_path:
        obj = getattr(obj, attr, None)
        if obj is None:
            return None
    return obj


def locate_class(name: Any) -> type | None:
    """Resolve a class object or dotted class path to a user class.

    Accepts ``pkg.mod.Class``, ``pkg.mod:Class`` and nested ``Outer.Inner``
    paths. Returns None when ``name`` does not name an importable,
    non-builtin class.
    """
    if inspect.isclass(name):
        return name if is_class_like(name) else None
    if not isinstance(name, str) or not _CLASS_PATH_RE.match(name):
        return None

    if ":" in name:
        module_name, attrs = name.split(":", 1)
        found = _import_attribute(module_name, attrs.split("."))
        return found if is_class_like(found) else None

    parts = name.split(".")
    for split in range(len(parts) - 1, 0, -1):
        found = _import_attribute(".".join(parts[:split]), parts[split:])
        if is_class_like(found):
            return found
    return None


def check_instantiable(cls: type) -> None:
    """Raise NotInstantiableError for abstract classes and protocols."""
    if inspect.isabstract(cls) or getattr(cls, "_is_protocol", False):
        raise NotInstantiableError.abstract(class_path(cls))


def _type_hints(target: Callable[..., Any]) -> dict[str, Any]:
    try:
        return typing.get_type_hints(target)
    except (NameError, TypeError, AttributeError):
        # Unresolvable forward references fall back to raw annotations
        return {}


def _declared_type(param: inspect.Parameter, hints: dict[str, Any]) -> Any:
    annotation = hints.get(param.name, param.annotation)
    if annotation is _EMPTY:
        return None
    if isinstance(annotation, str):
        annotation = locate_class(annotation)
    return unwrap_optional(annotation)


def _describe(signature: inspect.Signature, hints: dict[str, Any]) -> list[FormalParameter]:
    formals: list[FormalParameter] = []
    for param in signature.parameters.values():
        if param.kind in (inspect.Parameter.KEYWORD_ONLY, inspect.Parameter.VAR_KEYWORD):
            continue
        has_default = param.default is not _EMPTY
        formals.append(
            FormalParameter(
                name=param.name,
                declared_type=_declared_type(param, hints),
                has_default=has_default,
                default=param.default if has_default else None,
                variadic=param.kind is inspect.Parameter.VAR_POSITIONAL,
            )
        )
    return formals


def describe_callable(target: Callable[..., Any]) -> list[FormalParameter]:
    """Describe the positional formals of a function, method or callable object.

    Builtins without an introspectable signature are described as a single
    untyped variadic formal so explicit arguments pass straight through.
    """
    try:
        signature = inspect.signature(target)
    except ValueError:
        return [FormalParameter(name="args", variadic=True)]
    hint_source = target if not isinstance(target, functools.partial) else target.func
    if not (inspect.isfunction(hint_source) or inspect.ismethod(hint_source)):
        hint_source = getattr(type(hint_source), "__call__", hint_source)
    return _describe(signature, _type_hints(hint_source))


def describe_constructor(cls: type) -> list[FormalParameter] | None:
    """Describe the constructor formals of ``cls`` (``self`` excluded).

    Classes that build themselves in ``__new__`` (NamedTuple, tuple and
    str subclasses) are described by their call signature. Returns None
    when the class has no constructor of its own, meaning it can be
    constructed directly with no arguments.
    """
    init = cls.__init__
    if init is not object.__init__:
        try:
            signature = inspect.signature(init)
        except ValueError:
            return None
        params = list(signature.parameters.values())[1:]
        return _describe(signature.replace(parameters=params), _type_hints(init))

    if cls.__new__ is object.__new__:
        return None
    try:
        signature = inspect.signature(cls)
    except ValueError:
        return None
    return _describe(signature, _type_hints(cls.__new__))


def accepts_varargs(formals: list[FormalParameter]) -> bool:
    return any(formal.variadic for formal in formals)
