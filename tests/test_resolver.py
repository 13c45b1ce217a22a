import pytest

from example import Actor, ActorInterface, Director, Foo, Movie
from joinery.container import Container
from joinery.descriptor import ServiceDescriptor
from joinery.errors import (
    ConfigError,
    InvalidClassError,
    NotInstantiableError,
    UnknownMethodError,
    UnknownPropertyError,
)
from joinery.resolver import InstanceResolver


class Camera:
    lens: str

    def __init__(self):
        self.calls = []

    @property
    def model(self):
        return "Arri"

    @property
    def zoom(self):
        return self._zoom

    @zoom.setter
    def zoom(self, value):
        self._zoom = value


@pytest.fixture
def container():
    container = Container()
    container.bind(ActorInterface, Actor)
    return container


@pytest.fixture
def resolver(container):
    return InstanceResolver(container)


def test_class_concrete(resolver):
    movie = resolver.resolve(ServiceDescriptor(Movie))

    assert isinstance(movie.director, Director)
    assert isinstance(movie.actor, Actor)


def test_resolved_instance_is_recorded(resolver):
    descriptor = ServiceDescriptor(Director, ["James", 45])

    director = resolver.resolve(descriptor)

    assert descriptor.resolved is director
    assert resolver.resolve(descriptor) is not director


def test_instance_concrete_is_returned_as_is_and_forced_shared(resolver):
    director = Director()
    descriptor = ServiceDescriptor(director).set_shared(False).add_method_call("set_age", [50])

    assert resolver.resolve(descriptor) is director
    assert descriptor.shared
    assert director.age == 50

    director.age = 10
    assert resolver.resolve(descriptor) is director
    assert director.age == 10


def test_unset_concrete(resolver):
    with pytest.raises(ConfigError, match="has no class, factory or instance"):
        resolver.resolve(ServiceDescriptor())


def test_invalid_class_path(resolver):
    with pytest.raises(InvalidClassError):
        resolver.resolve(ServiceDescriptor("example.Nobody"))


def test_abstract_class_is_not_instantiable(resolver):
    with pytest.raises(NotInstantiableError, match='Can not instantiate "example.ActorInterface"'):
        resolver.resolve(ServiceDescriptor(ActorInterface))


def test_static_method_factory(resolver):
    assert isinstance(resolver.resolve(ServiceDescriptor((Director, "factory"))), Director)


def test_factory_pair_with_dotted_path_target(resolver):
    director = resolver.resolve(
        ServiceDescriptor(("example.Director", "create"), {"name": "James", "age": 45})
    )

    assert (director.name, director.age) == ("James", 45)


def test_factory_pair_with_instance_target(resolver):
    director = resolver.resolve(ServiceDescriptor((Foo(), "create_director"), ["James", 45]))

    assert director.name == "James"


def test_method_context_binding(container, resolver):
    class Stand(ActorInterface):
        def get_name(self):
            return "stand-in"

    container.bind(ActorInterface, Stand, (Movie, "set_actress"))

    movie = resolver.resolve(ServiceDescriptor(Movie).add_method_call("set_actress"))

    assert isinstance(movie.actress, Stand)
    assert isinstance(movie.actor, Actor)


def test_unknown_method(resolver):
    with pytest.raises(UnknownMethodError, match='"example.Director" has no method "shout"'):
        resolver.resolve(ServiceDescriptor(Director).add_method_call("shout"))


def test_non_callable_attribute_is_not_a_method(resolver):
    with pytest.raises(UnknownMethodError, match='has no method "name"'):
        resolver.resolve(ServiceDescriptor(Director).add_method_call("name"))


def test_properties(resolver):
    camera = resolver.resolve(
        ServiceDescriptor(Camera).set_properties({"lens": "35mm", "zoom": 2, "calls": ["x"]})
    )

    assert camera.lens == "35mm"
    assert camera.zoom == 2
    assert camera.calls == ["x"]


def test_read_only_property(resolver):
    with pytest.raises(UnknownPropertyError, match='has no property "model"'):
        resolver.resolve(ServiceDescriptor(Camera).set_property("model", "Red"))


def test_unknown_property(resolver):
    with pytest.raises(UnknownPropertyError, match='has no property "aperture"'):
        resolver.resolve(ServiceDescriptor(Camera).set_property("aperture", 2.8))


def test_failed_post_processing_does_not_record_instance(resolver):
    descriptor = ServiceDescriptor(Camera).set_property("aperture", 2.8)

    with pytest.raises(UnknownPropertyError):
        resolver.resolve(descriptor)

    assert descriptor.resolved is None


def test_methods_are_not_properties(resolver):
    with pytest.raises(UnknownPropertyError, match='has no property "set_age"'):
        resolver.resolve(ServiceDescriptor(Director).set_property("set_age", 5))

    with pytest.raises(UnknownPropertyError, match='has no property "create"'):
        resolver.resolve(ServiceDescriptor(Director).set_property("create", 5))


def test_builtin_factory_arguments_are_resolved(resolver, container):
    container.set_parameter("size", 3)

    built = resolver.resolve(ServiceDescriptor(dict.fromkeys, {0: ["a", "b"], 1: "%size%"}))

    assert built == {"a": 3, "b": 3}
