"""Construction of service instances from their descriptors.

The :class:`InstanceResolver` takes a descriptor through four states:

- *unresolved*: the concrete is classified as a class, factory or instance;
- *constructing*: the factory is called, or the class instantiated, with
  arguments bound by the :class:`~joinery.binder.DependencyBinder`;
- *post-processing*: configured methods are called in order, then
  configured properties are assigned;
- *resolved*: the instance is stored on the descriptor and returned.

Any error aborts the whole construction; a partly configured instance is
never stored or returned.
"""

import inspect
import logging
from collections.abc import Mapping
from typing import Any, Callable

from joinery.arguments import ParameterResolver
from joinery.binder import BoundArguments, DependencyBinder
from joinery.descriptor import ServiceDescriptor
from joinery.domain import ClassConcrete, FactoryConcrete, InstanceConcrete
from joinery.errors import (
    ConfigError,
    NotInstantiableError,
    UnknownMethodError,
    UnknownPropertyError,
)
from joinery.introspection import (
    context_of,
    has_own_constructor,
    is_instantiable,
    load_class,
    parameter_specs,
    service_id,
)

__all__ = ["InstanceResolver"]

logger = logging.getLogger(__name__)

CONSTRUCTOR = "__init__"


class InstanceResolver:
    """Build fully wired instances from :class:`ServiceDescriptor` objects.

    The resolver calls back into its container for referenced services,
    parameters and context bindings, so resolving one service may
    recursively resolve many others.
    """

    def __init__(self, container):
        self._container = container
        self._arguments = ParameterResolver(container)
        self._binder = DependencyBinder(container, self._arguments)

    def resolve(self, descriptor: ServiceDescriptor) -> Any:
        """Build the instance described by ``descriptor``.

        Args:
            descriptor: The service recipe.

        Returns:
            The new instance, which is also stored as ``descriptor.resolved``.

        Raises:
            ConfigError: If the descriptor has no concrete or an invalid factory.
            InvalidClassError: If a class path cannot be imported.
            NotInstantiableError: If the class is abstract or a protocol.
            UnknownMethodError: If a configured method does not exist.
            UnknownPropertyError: If a configured property cannot be assigned.
            MissingParameterError: If a required parameter cannot be satisfied.
        """
        concrete = descriptor.parse_concrete()

        if isinstance(concrete, FactoryConcrete):
            instance = self._create_from_factory(descriptor, concrete)
        elif isinstance(concrete, ClassConcrete):
            instance = self._create_from_class(descriptor, concrete)
        elif isinstance(concrete, InstanceConcrete):
            if descriptor.resolved is concrete.instance:
                return descriptor.resolved
            descriptor.shared = True
            instance = concrete.instance
        else:
            raise ConfigError(f"Descriptor {descriptor!r} has no class, factory or instance")

        self._invoke_methods(descriptor, instance)
        self._invoke_properties(descriptor, instance)
        descriptor.resolved = instance
        return instance

    def _create_from_class(self, descriptor: ServiceDescriptor, concrete: ClassConcrete) -> Any:
        cls = load_class(concrete.cls) if isinstance(concrete.cls, str) else concrete.cls
        if not is_instantiable(cls):
            raise NotInstantiableError(f'Can not instantiate "{service_id(cls)}"')

        if not has_own_constructor(cls):
            logger.debug("Instantiating %s without constructor arguments", service_id(cls))
            return cls()

        bound = self._bind(
            cls,
            descriptor.arguments,
            self._container.get_context_bindings(cls, CONSTRUCTOR),
            descriptor.autowired,
        )
        logger.debug("Instantiating %s", service_id(cls))
        return bound.call(cls)

    def _create_from_factory(
        self, descriptor: ServiceDescriptor, concrete: FactoryConcrete
    ) -> Any:
        factory = self._factory_callable(concrete.factory)
        owner, method = context_of(factory)
        bound = self._bind(
            factory,
            descriptor.arguments,
            self._container.get_context_bindings(owner, method),
            descriptor.autowired,
        )
        logger.debug("Calling factory %s.%s", owner, method)
        return bound.call(factory)

    def _factory_callable(self, factory: Any) -> Callable:
        if not isinstance(factory, tuple):
            return factory

        target, method_name = factory
        target = self._arguments.resolve(target)
        if isinstance(target, str):
            target = load_class(target)
        method = getattr(target, method_name, None)
        if not callable(method):
            raise ConfigError(
                f'The factory is invalid: "{_describe(target)}" has no method "{method_name}"'
            )
        return method

    def _invoke_methods(self, descriptor: ServiceDescriptor, instance: Any) -> None:
        cls = type(instance)
        for call in descriptor.method_calls:
            method = getattr(instance, call.method, None)
            if not callable(method):
                raise UnknownMethodError(
                    f'Class "{service_id(cls)}" has no method "{call.method}"'
                )
            bound = self._bind(
                method,
                call.arguments,
                self._container.get_context_bindings(cls, call.method),
                descriptor.autowired,
            )
            bound.call(method)

    def _invoke_properties(self, descriptor: ServiceDescriptor, instance: Any) -> None:
        cls = type(instance)
        for name, raw_value in descriptor.properties.items():
            if not _is_assignable(instance, name):
                raise UnknownPropertyError(
                    f'Class "{service_id(cls)}" has no property "{name}"'
                )
            value = self._arguments.resolve(raw_value)
            try:
                setattr(instance, name, value)
            except AttributeError as e:
                raise UnknownPropertyError(
                    f'Property "{name}" of class "{service_id(cls)}" cannot be assigned'
                ) from e

    def _bind(
        self,
        target: Callable,
        arguments: Mapping[Any, Any],
        context_bindings: Mapping[str, str],
        autowired: bool,
    ) -> BoundArguments:
        specs = parameter_specs(target)
        if specs is None:
            return self._unbound_arguments(arguments)
        return self._binder.bind(target, specs, arguments, context_bindings, autowired)

    def _unbound_arguments(self, arguments: Mapping[Any, Any]) -> BoundArguments:
        """Pass arguments through for callables without an inspectable signature."""
        positions = sorted(key for key in arguments if isinstance(key, int))
        return BoundArguments(
            [self._arguments.resolve(arguments[position]) for position in positions],
            {
                key: self._arguments.resolve(value)
                for key, value in arguments.items()
                if isinstance(key, str)
            },
        )


_NOT_DEFINED = object()


def _is_assignable(instance: Any, name: str) -> bool:
    """Whether ``name`` is a data attribute or a settable property of ``instance``."""
    if name in getattr(instance, "__dict__", {}):
        return True
    cls = type(instance)
    attribute = inspect.getattr_static(cls, name, _NOT_DEFINED)
    if isinstance(attribute, property):
        return attribute.fset is not None
    if inspect.isroutine(attribute) or isinstance(attribute, (staticmethod, classmethod)):
        return False
    if attribute is not _NOT_DEFINED:
        return True
    return any(name in getattr(klass, "__annotations__", {}) for klass in cls.__mro__)


def _describe(target: Any) -> str:
    if inspect.isclass(target):
        return service_id(target)
    return service_id(type(target))
