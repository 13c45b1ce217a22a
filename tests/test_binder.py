from typing import Annotated, Optional

import pytest

from example import Actor, ActorInterface, Director
from joinery.binder import DependencyBinder
from joinery.errors import MissingParameterError, NotFoundError
from joinery.introspection import parameter_specs, service_id


class FakeContainer:
    def __init__(self, services):
        self.services = services

    def get(self, key):
        try:
            return self.services[service_id(key)]
        except KeyError:
            raise NotFoundError(service_id(key)) from None

    def get_parameter(self, name, default=None):
        return default


@pytest.fixture
def director():
    return Director("James", 45)


@pytest.fixture
def binder(director):
    return DependencyBinder(
        FakeContainer(
            {
                service_id(Director): director,
                "stunt": "stunt double",
                "lead": "lead actor",
            }
        )
    )


def bind(binder, target, provided=None, **kwargs):
    return binder.bind(target, parameter_specs(target), provided or {}, **kwargs)


def test_position_takes_precedence_over_name(binder):
    def f(a, b):
        return a, b

    bound = bind(binder, f, {"a": "by name", 0: "by position", 1: "second"})

    assert bound.call(f) == ("by position", "second")


def test_named_arguments(binder):
    def f(a, b=2):
        return a, b

    assert bind(binder, f, {"a": 1}).call(f) == (1, 2)
    assert bind(binder, f, {"b": 3, "a": 1}).call(f) == (1, 3)


def test_numeric_first_key_disables_name_matching(binder):
    def f(a, b="default"):
        return a, b

    assert bind(binder, f, {0: 1, "b": "ignored"}).call(f) == (1, "default")


def test_autowire_by_declared_type(binder, director):
    def f(name, d: Director):
        return name, d

    assert bind(binder, f, {"name": "x"}).call(f) == ("x", director)


def test_autowire_disabled(binder):
    def f(d: Director):
        return d

    with pytest.raises(MissingParameterError, match='"d"'):
        bind(binder, f, autowired=False)


def test_default_used_when_nothing_matches(binder):
    def f(a=1, *, b="kw"):
        return a, b

    bound = bind(binder, f)

    assert bound.args == [1]
    assert bound.kwargs == {"b": "kw"}


def test_missing_required_parameter_names_the_callable(binder):
    def make_movie(title):
        return title

    with pytest.raises(MissingParameterError, match='"title" when calling ".*make_movie"'):
        bind(binder, make_movie)


def test_missing_optional_service_falls_back_to_default(binder):
    def f(actor: Optional[ActorInterface] = None):
        return actor

    assert bind(binder, f).call(f) is None


def test_missing_required_service_propagates(binder):
    def f(actor: ActorInterface):
        return actor

    with pytest.raises(NotFoundError):
        bind(binder, f)


def test_context_binding_by_type(binder):
    def f(actor: ActorInterface):
        return actor

    bound = bind(binder, f, context_bindings={service_id(ActorInterface): "stunt"})

    assert bound.call(f) == "stunt double"


def test_context_binding_by_parameter_name(binder):
    def f(actor: Actor):
        return actor

    assert bind(binder, f, context_bindings={"actor": "lead"}).call(f) == "lead actor"


def test_annotated_qualifier(binder):
    def f(actor: Annotated[ActorInterface, "stunt"]):
        return actor

    assert bind(binder, f).call(f) == "stunt double"


def test_variadic_parameters_are_skipped(binder):
    def f(a, *args, **kwargs):
        return a, args, kwargs

    assert bind(binder, f, {0: 1}).call(f) == (1, (), {})


def test_positional_and_named_arguments_are_equivalent(binder):
    by_position = bind(binder, Director, {0: "Bob", 1: 45})
    by_name = bind(binder, Director, {"name": "Bob", "age": 45})

    assert by_position == by_name
    assert by_position.args == ["Bob", 45]


def test_only_chosen_arguments_are_resolved(binder):
    def f(a, b="default"):
        return a, b

    bound = bind(binder, f, {0: "@stunt", "b": "@unknown", "c": "%undefined%"})

    assert bound.call(f) == ("stunt double", "default")


def test_arguments_resolved_in_declaration_order():
    requested = []

    class RecordingContainer(FakeContainer):
        def get(self, key):
            requested.append(key)
            return key

    binder = DependencyBinder(RecordingContainer({}))

    def f(first, second, third):
        return first, second, third

    bound = bind(binder, f, {2: "@c", 0: "@a", 1: "@b"})

    assert requested == ["a", "b", "c"]
    assert bound.call(f) == ("a", "b", "c")
