from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import NamedTuple, Protocol

import pytest

from servicebox import NotInstantiableError
from servicebox.core.introspection import class_path
from servicebox.core.registry import Recipe, ServiceEntry
from servicebox.resolver.classes import NOT_APPLICABLE


class Clock:
    pass


class Repository(ABC):
    @abstractmethod
    def find(self, key): ...


class Notifier(Protocol):
    def notify(self, message: str) -> None: ...


class Service:
    def __init__(self, repository: Repository):
        self.repository = repository


class Named:
    def __init__(self, name: str, clock: Clock, greeting="hello"):
        self.name = name
        self.clock = clock
        self.greeting = greeting


class Pair:
    def __init__(self, first, second):
        self.first = first
        self.second = second


@dataclass
class Settings:
    clock: Clock
    debug: bool = False


class Widget:
    created = 0

    def __init__(self):
        Widget.created += 1


class Point(NamedTuple):
    x: int
    y: int


class Plot:
    def __init__(self, origin: Point):
        self.origin = origin


def test_abstract_class_recipe_is_not_instantiable(container):
    container.set("repo", Repository)
    with pytest.raises(NotInstantiableError) as exc_info:
        container.get("repo")
    assert exc_info.value.class_name == class_path(Repository)


def test_protocol_recipe_is_not_instantiable(container):
    container.set("notifier", Notifier)
    with pytest.raises(NotInstantiableError):
        container.get("notifier")


def test_abstract_dependency_is_not_instantiable(container):
    container.set("service", Service)
    with pytest.raises(NotInstantiableError):
        container.get("service")


def test_scalar_hint_consumes_explicit_argument(container):
    clock = Clock()
    container.instance("clock", clock)
    named = container.make(class_path(Named), "bob")
    assert named.name == "bob"
    assert named.clock is clock
    assert named.greeting == "hello"


def test_class_path_arguments_are_upgraded(container):
    clock = Clock()
    container.set("clock", clock)
    pair = container.make(class_path(Pair), class_path(Clock), "plain")
    assert pair.first is clock
    assert pair.second == "plain"


def test_dataclass_constructor_is_autowired(container):
    clock = Clock()
    container.instance("clock", clock)
    container.set("settings", Settings)
    settings = container.get("settings")
    assert settings.clock is clock
    assert settings.debug is False


def test_object_recipe_constructs_a_fresh_instance(container):
    clock = Clock()
    container.set("clock", clock)
    resolved = container.get("clock")
    assert isinstance(resolved, Clock)
    assert resolved is not clock


def test_class_recipe_is_constructed_on_each_get(container):
    before = Widget.created
    container.set("widget", Widget)
    assert isinstance(container.get("widget"), Widget)
    container.get("widget")
    assert Widget.created == before + 2


def test_class_without_constructor_is_built_directly(container):
    container.set("clock", Clock)
    assert type(container.get("clock")) is Clock


def test_first_matching_object_wins_tie_break(container):
    first, second = Clock(), Clock()
    container.set("first", first).instance("second", second)
    container.set("named", Named)
    assert container.make("named", "x").clock is first
    container.remove("first")
    assert container.make("named", "x").clock is second


def test_memoized_once_value_is_matched_by_type(container):
    container.once("clock", Clock)
    clock = container.get("clock")
    container.set("named", Named)
    assert container.make("named", "x").clock is clock


def test_resolve_is_not_applicable_for_literals_and_callables(container):
    classes = container.resolver.classes
    assert classes.resolve(ServiceEntry("a", Recipe.classify("text")), ()) is NOT_APPLICABLE
    assert classes.resolve(ServiceEntry("b", Recipe.classify(lambda: 1)), ()) is NOT_APPLICABLE


def test_construct_bare_requires_no_arguments(container):
    classes = container.resolver.classes
    assert isinstance(classes.construct_bare(Clock), Clock)
    with pytest.raises(NotInstantiableError):
        classes.construct_bare(Pair)


def test_named_tuple_receives_explicit_arguments(container):
    assert container.make(class_path(Point), 3, 4) == Point(3, 4)


def test_named_tuple_dependency_without_arguments_is_not_instantiable(container):
    container.set("plot", Plot)
    with pytest.raises(NotInstantiableError) as exc_info:
        container.get("plot")
    assert exc_info.value.class_name == class_path(Point)
