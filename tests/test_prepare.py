import inspect

import pytest

from scopewire import Container


class FakeConsole:
    def __init__(self):
        self.logs = []

    def log(self, message):
        self.logs.append(message)


@pytest.fixture
def console():
    return FakeConsole()


@pytest.fixture
def container(console):
    c = Container()
    c.register("console", console)
    return c


def say(saying, out):
    out.log(saying)
    return saying


def test_prepare_fills_unbound_slots_from_call_arguments(container, console):
    prepared = container.prepare(" ,console", say)

    assert prepared("ok") == "ok"
    assert console.logs == ["ok"]


def test_prepare_accepts_a_list_of_keys(container, console):
    prepared = container.prepare(["", "console"], say)

    prepared("ok")
    assert console.logs == ["ok"]


def test_prepare_with_function_binds_every_parameter(container, console):
    def report(console, status="idle"):
        console.log(status)
        return status

    container.intact("status", "ready")
    prepared = container.prepare(report)

    assert prepared() == "ready"
    assert console.logs == ["ready"]


def test_bound_slots_ignore_positional_arguments(container, console):
    def log_to(out, saying):
        out.log(saying)

    prepared = container.prepare("console, ", log_to)
    prepared("hello")

    assert console.logs == ["hello"]


def test_unbound_slots_consume_arguments_left_to_right(container):
    def join(first, out, second):
        return (first, out, second)

    prepared = container.prepare(" ,console, ", join)

    assert prepared("a", "b") == ("a", container.get("console"), "b")


def test_missing_keys_past_the_end_are_unbound(container):
    def join(out, first, second):
        return (out, first, second)

    prepared = container.prepare("console", join)

    assert prepared("a", "b") == (container.get("console"), "a", "b")


def test_missing_call_arguments_fall_back_to_defaults(container):
    def greet(name, punctuation="!"):
        return f"Hello, {name}{punctuation}"

    prepared = container.prepare(" , ", greet)

    assert prepared("Ada") == "Hello, Ada!"
    assert prepared("Ada", "?") == "Hello, Ada?"


def test_bound_values_are_resolved_on_every_call(container):
    def current(value):
        return value

    container.register("value", 1)
    prepared = container.prepare("value", current)
    container.register("value", 2)

    assert prepared() == 2


def test_prepare_constructs_classes_without_inflection(container, console):
    class Greeter:
        def __init__(self, saying, out):
            self.saying = saying
            self.out = out
            self.clock = None

    container.register("clock", object())
    container.inflector("clock")
    greeter = container.prepare(" ,console", Greeter)("hi")

    assert isinstance(greeter, Greeter)
    assert greeter.saying == "hi"
    assert greeter.out is console
    assert greeter.clock is None


def test_prepared_function_exposes_only_unbound_parameters(container):
    prepared = container.prepare(" ,console", say)

    assert prepared.__name__ == "say"
    assert list(inspect.signature(prepared).parameters) == ["saying"]


def test_prepared_function_can_be_invoked_by_the_container(container, console):
    prepared = container.prepare(" ,console", say)
    container.intact("saying", "from the container")

    assert container.invoke(prepared) == "from the container"
    assert console.logs == ["from the container"]


def test_prepare_keys_are_stripped(container, console):
    def log_twice(out, other):
        out.log("one")
        other.log("two")

    container.prepare(" console ,\tconsole", log_twice)()

    assert console.logs == ["one", "two"]
