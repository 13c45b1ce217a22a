"""Service container for dependency injection.

The container owns the service registry (id to descriptor), the alias
table, the context binding table, the global parameters and the cache of
shared instances. It delegates construction to an
:class:`~joinery.resolver.InstanceResolver`.

Example:
    >>> container = Container()
    >>> container.set_parameters({"director": {"name": "James"}})
    >>> container.register("director", Director).set_arguments(["%director.name%", 45])
    >>> container.register(Movie)
    >>> movie = container.get(Movie)   # Director and Actor are autowired
"""

import inspect
import logging
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import Any, Optional, Union

from pydantic import ValidationError

from joinery.config import ContainerDefaults
from joinery.descriptor import ArgumentKey, ServiceDescriptor
from joinery.errors import (
    ConfigError,
    CyclicDependencyError,
    FrozenServiceError,
    NotFoundError,
)
from joinery.introspection import ServiceKey, is_instantiable, service_id, try_load_class
from joinery.parameters import ParameterBag
from joinery.resolver import CONSTRUCTOR, InstanceResolver

__all__ = ["Container"]

logger = logging.getLogger(__name__)

BindingContext = Union[type, str, tuple[ServiceKey, str]]
"""Where a context binding applies: a class (its constructor) or ``(class, "method")``."""


class Container:
    """Dependency injection container resolving object graphs on demand.

    Services are registered under string ids (a class is accepted wherever an
    id is, and stands for its dotted path). Classes that are not registered
    are registered automatically the first time they are requested, so most
    object graphs need no configuration beyond interface bindings.
    """

    def __init__(self, defaults: Optional[ContainerDefaults] = None) -> None:
        self._descriptors: dict[str, ServiceDescriptor] = {}
        self._instances: dict[str, Any] = {}
        self._aliases: dict[str, str] = {}
        self._context_bindings: dict[tuple[str, str], dict[str, str]] = {}
        self._resolving: list[str] = []
        self._classes: dict[str, type] = {}
        self._parameters = ParameterBag()
        self._defaults = defaults or ContainerDefaults()
        self._resolver = InstanceResolver(self)
        self.register(self)
        if type(self) is not Container:
            self.set_alias(Container, type(self))
        logger.debug("Container initialised")

    # Mapping-style access

    def __getitem__(self, key: ServiceKey) -> Any:
        return self.get(key)

    def __setitem__(self, key: ServiceKey, concrete: Any) -> None:
        self.register(key, concrete)

    def __contains__(self, key: ServiceKey) -> bool:
        return self.has(key)

    def __delitem__(self, key: ServiceKey) -> None:
        service = self._id(key)
        self._descriptors.pop(service, None)
        self._instances.pop(service, None)

    # Registration

    def register(self, key: Any, concrete: Any = None) -> ServiceDescriptor:
        """Register a service and return its descriptor for further configuration.

        Args:
            key: The service id, a class, or an object. An object is registered
                under its class's id with itself as the concrete.
            concrete: A class, dotted class path, factory, ``(target, "method")``
                pair or instance. Defaults to ``key``.

        Returns:
            The new descriptor, with the container defaults applied.
        """
        if concrete is None:
            concrete = key
        if not isinstance(key, (str, type)):
            key = type(key)
        if inspect.isclass(concrete):
            self._id(concrete)

        descriptor = (
            ServiceDescriptor(concrete)
            .set_shared(self._defaults.share)
            .set_autowired(self._defaults.autowire)
        )
        return self.set_descriptor(key, descriptor)

    def define(
        self,
        key: ServiceKey,
        cls: Union[type, str],
        arguments: Union[Mapping[ArgumentKey, Any], Sequence[Any], None] = None,
        method_calls: Optional[Sequence[tuple[str, Any]]] = None,
        properties: Optional[Mapping[str, Any]] = None,
    ) -> ServiceDescriptor:
        """Register a class based service with its full configuration in one call."""
        descriptor = self.register(key, cls)
        if arguments is not None:
            descriptor.set_arguments(arguments)
        if method_calls is not None:
            descriptor.set_method_calls(method_calls)
        if properties is not None:
            descriptor.set_properties(properties)
        return descriptor

    def set_descriptor(self, key: ServiceKey, descriptor: ServiceDescriptor) -> ServiceDescriptor:
        """Register a descriptor, replacing any service (and cached instance) with that id."""
        service = self._id(key)
        self._descriptors[service] = descriptor
        self._instances.pop(service, None)
        logger.debug("Registered service: %s", service)
        return descriptor

    def get_descriptor(self, key: ServiceKey) -> ServiceDescriptor:
        service = self.resolve_alias(self._id(key))
        try:
            return self._descriptors[service]
        except KeyError:
            raise NotFoundError(f'There is no definition named "{service}"') from None

    @property
    def descriptors(self) -> Mapping[str, ServiceDescriptor]:
        return dict(self._descriptors)

    def extend(self, key: ServiceKey) -> ServiceDescriptor:
        """Get the descriptor of a service that has not been resolved yet.

        Raises:
            NotFoundError: If no service is registered under ``key``.
            FrozenServiceError: If the service has already been resolved.
        """
        descriptor = self.get_descriptor(key)
        if descriptor.resolved is not None:
            raise FrozenServiceError(f'Cannot override frozen service "{self._id(key)}"')
        return descriptor

    # Aliases and bindings

    def set_alias(self, alias: ServiceKey, key: ServiceKey) -> None:
        self._aliases[self._id(alias)] = self._id(key)

    def get_alias(self, alias: ServiceKey) -> Optional[str]:
        return self._aliases.get(self._id(alias))

    def resolve_alias(self, key: ServiceKey) -> str:
        """Follow aliases until reaching an id that is not itself an alias."""
        service = self._id(key)
        seen = {service}
        while service in self._aliases:
            service = self._aliases[service]
            if service in seen:
                raise ConfigError(f'Alias "{self._id(key)}" refers to itself')
            seen.add(service)
        return service

    def bind(
        self,
        interface: ServiceKey,
        implementation: ServiceKey,
        context: Optional[BindingContext] = None,
    ) -> None:
        """Choose the implementation used when autowiring ``interface``.

        Args:
            interface: The declared parameter type (or a parameter name when a
                context is given).
            implementation: The service id or class to inject instead.
            context: Restrict the binding to one class's constructor (a class)
                or to one method (``(class, "method")``). Without a context
                the binding is global.
        """
        if context is None:
            self.set_alias(interface, implementation)
            return

        if isinstance(context, tuple):
            if len(context) != 2:
                raise ConfigError(f"Binding context {context!r} must be (class, 'method')")
            owner, method = context
        else:
            owner, method = context, CONSTRUCTOR
        bindings = self._context_bindings.setdefault((self._id(owner), method), {})
        bindings[self._id(interface)] = self._id(implementation)
        logger.debug(
            "Bound %s to %s in %s.%s",
            self._id(interface),
            self._id(implementation),
            self._id(owner),
            method,
        )

    def get_context_bindings(self, owner: ServiceKey, method: str) -> dict[str, str]:
        """Get the ``interface -> implementation`` overrides for one class and method."""
        return dict(self._context_bindings.get((self._id(owner), method), {}))

    # Lookup

    def has(self, key: ServiceKey) -> bool:
        return self.resolve_alias(key) in self._descriptors

    def get(self, key: ServiceKey) -> Any:
        """Get the service registered under ``key``, building it if needed.

        Raises:
            NotFoundError: If ``key`` is neither registered nor an instantiable class.
            CyclicDependencyError: If the service depends on itself.
            DependencyError: If the service cannot be built.
        """
        service = self.resolve_alias(key)
        if service in self._instances:
            logger.debug("Returning cached shared service: %s", service)
            return self._instances[service]

        if service not in self._descriptors:
            self._auto_register(service)

        descriptor = self._descriptors[service]
        with self._resolving_guard(service):
            instance = self._resolver.resolve(descriptor)

        if descriptor.shared:
            self._instances[service] = instance
            logger.debug("Shared service created and cached: %s", service)
        else:
            logger.debug("Created unshared service: %s", service)
        return instance

    def find_tagged_service_ids(self, name: str) -> dict[str, list[dict[str, Any]]]:
        """Map the id of every service tagged ``name`` to its tag attributes.

        Example:
            >>> container.register("foo", Foo).add_tag("my.tag", {"hello": "world"})
            >>> container.find_tagged_service_ids("my.tag")
            {'foo': [{'hello': 'world'}]}
        """
        return {
            service: descriptor.get_tag(name)
            for service, descriptor in self._descriptors.items()
            if descriptor.has_tag(name)
        }

    def _id(self, key: ServiceKey) -> str:
        """Canonical id of a key, remembering classes so they can be auto-registered."""
        service = service_id(key)
        if inspect.isclass(key):
            self._classes.setdefault(service, key)
        return service

    def _auto_register(self, service: str) -> None:
        cls = self._classes.get(service) or try_load_class(service)
        if cls is None or not is_instantiable(cls):
            raise NotFoundError(f'There is no definition named "{service}"')
        logger.debug("Auto-registering class: %s", service)
        self.register(service, cls)

    @contextmanager
    def _resolving_guard(self, service: str) -> Iterator[None]:
        if service in self._resolving:
            chain = " -> ".join(self._resolving[self._resolving.index(service):] + [service])
            raise CyclicDependencyError(f"Circular dependency detected: {chain}")
        self._resolving.append(service)
        try:
            yield
        finally:
            self._resolving.pop()

    # Parameters

    def get_parameters(self) -> dict[str, Any]:
        return self._parameters.to_dict()

    def set_parameters(self, parameters: Mapping[str, Any]) -> None:
        self._parameters.set_parameters(parameters)

    def add_parameters(self, parameters: Mapping[str, Any]) -> None:
        self._parameters.add_parameters(parameters)

    def set_parameter(self, name: str, value: Any) -> None:
        self._parameters.set_parameter(name, value)

    def get_parameter(self, name: str, default: Any = None) -> Any:
        """Get a parameter by name or dotted path (``"director.age"``)."""
        return self._parameters.get_parameter(name, default)

    # Defaults

    @property
    def defaults(self) -> ContainerDefaults:
        return self._defaults

    def get_default(self, option: str) -> Any:
        """Get one default option (``"share"`` or ``"autowire"``), or None if unknown."""
        if option not in ContainerDefaults.model_fields:
            return None
        return getattr(self._defaults, option)

    def set_defaults(self, defaults: Mapping[str, Any]) -> ContainerDefaults:
        """Merge options into the defaults applied to newly registered services.

        Raises:
            ConfigError: If an option is unknown or has an invalid value.
        """
        try:
            self._defaults = self._defaults.merged_with(dict(defaults))
        except ValidationError as e:
            raise ConfigError(f"Invalid container defaults {dict(defaults)!r}: {e}") from e
        return self._defaults
