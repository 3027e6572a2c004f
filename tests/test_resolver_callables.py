import pytest

from servicebox import NotCallableError
from servicebox.core.introspection import class_path
from servicebox.core.registry import Recipe, ServiceEntry
from servicebox.resolver.callables import CallableResolver
from servicebox.resolver.classes import NOT_APPLICABLE


class Clock:
    pass


class Report:
    instances = 0

    def __init__(self, clock: Clock):
        Report.instances += 1
        self.clock = clock

    def render(self, title, footer="end"):
        return f"{title}:{footer}"

    def stamp(self, clock: Clock):
        return clock

    @staticmethod
    def version():
        return "1.0"

    label = "not callable"


class Handler:
    def __call__(self, clock: Clock, name):
        return clock, name


def typed_handler(clock: Clock, label):
    return clock, label


@pytest.mark.parametrize(
    "target, expected",
    [
        ("pkg.Mod@run", ("pkg.Mod", "run")),
        ("a@b@c", "a@b@c"),
        (["x", "y"], ("x", "y")),
        (("x", "y"), ("x", "y")),
        (["x"], ()),
        (["x", "y", "z"], ()),
    ],
)
def test_normalize_shapes(target, expected):
    assert CallableResolver.normalize(target) == expected


def test_normalize_keeps_functions():
    assert CallableResolver.normalize(typed_handler) is typed_handler


def test_call_function_autowires_and_consumes_arguments(container):
    clock = Clock()
    container.instance("clock", clock)
    assert container.call(typed_handler, "tag") == (clock, "tag")


def test_call_lambda_with_collapsed_arguments(container):
    assert container.call(lambda a, b: (a, b), ["x", ["y"]]) == ("x", "y")


def test_call_callable_object(container):
    clock = Clock()
    container.instance("clock", clock)
    assert container.call(Handler(), "n") == (clock, "n")


def test_call_object_method_pair(container):
    report = Report(Clock())
    assert container.call([report, "render"], "Q1") == "Q1:end"


def test_call_method_with_typed_parameter(container):
    clock = Clock()
    container.instance("clock", clock)
    assert container.call(f"{class_path(Report)}@stamp") is clock


def test_call_class_receiver_is_transient(container):
    before = Report.instances
    assert container.call((Report, "render"), "Q2", "fin") == "Q2:fin"
    assert Report.instances == before + 1
    assert not container.has(class_path(Report))


def test_call_prefers_registered_receiver(container):
    report = Report(Clock())
    container.instance("report", report)
    before = Report.instances
    container.call(f"{class_path(Report)}@render", "x")
    assert Report.instances == before


def test_call_keeps_preexisting_registration(container):
    path = class_path(Report)
    container.once(path, path)
    container.get(path)
    container.call(f"{path}@render", "x")
    assert container.has(path)


def test_call_static_method_through_class(container):
    assert container.call((Report, "version")) == "1.0"


def test_call_missing_method_names_method(container):
    with pytest.raises(NotCallableError) as exc_info:
        container.call((Report(Clock()), "missing"))
    assert exc_info.value.target == "missing"
    assert "'missing' is not callable" in str(exc_info.value)


def test_call_non_callable_attribute(container):
    with pytest.raises(NotCallableError):
        container.call([Report(Clock()), "label"])


def test_call_unknown_class_path(container):
    with pytest.raises(NotCallableError) as exc_info:
        container.call("no_such_module_xyz.Thing@run")
    assert exc_info.value.target == "run"
    assert not container.has("no_such_module_xyz.Thing")


@pytest.mark.parametrize("target", [42, "plain string", ["only-one"], Clock])
def test_call_rejects_non_callables(container, target):
    with pytest.raises(NotCallableError) as exc_info:
        container.call(target)
    assert exc_info.value.target == "function or closure"


def test_not_callable_is_type_error(container):
    with pytest.raises(TypeError):
        container.call(None)


def test_callable_recipe_resolution(container):
    callables = container.resolver.callables
    entry = ServiceEntry("answer", Recipe.classify(lambda: 42))
    assert callables.resolve(entry, ()) == 42
    literal = ServiceEntry("name", Recipe.classify("text"))
    assert callables.resolve(literal, ()) is NOT_APPLICABLE


def test_callable_recipe_receives_make_arguments(container):
    container.set("greet", lambda name, punctuation="!": f"hi {name}{punctuation}")
    assert container.make("greet", "ann") == "hi ann!"
