"""Service descriptors: the recipe the container follows to build one service.

A descriptor is created when a service is registered, configured through its
builder methods (each returns the descriptor, so calls can be chained), and
resolved on first use. Every value it holds is *raw*: references, ``@service``
strings and ``%parameter%`` placeholders are only resolved when the service
is built.

Example:
    >>> container.register("director", Director) \\
    ...     .set_arguments(["%director.name%", 45]) \\
    ...     .add_method_call("set_age", [50]) \\
    ...     .add_tag("crew", {"role": "lead"})
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Callable, Optional, Union

from joinery.domain import (
    ClassConcrete,
    Concrete,
    FactoryConcrete,
    InstanceConcrete,
    MethodCall,
    UNSET,
)
from joinery.errors import ConfigError

__all__ = ["ServiceDescriptor", "ArgumentKey"]

ArgumentKey = Union[int, str]
"""Arguments are keyed by parameter position or by parameter name."""


class ServiceDescriptor:
    """Describes how to build one service.

    Attributes:
        concrete: What to build from: a class or dotted class path, a factory
            (callable or ``(target, "method")`` pair), an existing instance, or
            None when not yet configured.
        arguments: Raw constructor or factory arguments keyed by position or name.
        method_calls: Methods invoked on the new instance, in order.
        properties: Attributes assigned on the new instance.
        tags: Tag name to list of attribute mappings, used for service discovery.
        autowired: Whether missing parameters may be satisfied by declared type.
        shared: Whether the container reuses the first instance it builds.
        resolved: The most recently built instance, or None.
    """

    def __init__(
        self,
        concrete: Any = None,
        arguments: Union[Mapping[ArgumentKey, Any], Sequence[Any], None] = None,
    ):
        self.concrete = concrete
        self.arguments: dict[ArgumentKey, Any] = _as_argument_dict(arguments or {})
        self.method_calls: list[MethodCall] = []
        self.properties: dict[str, Any] = {}
        self.tags: dict[str, list[dict[str, Any]]] = {}
        self.autowired = True
        self.shared = True
        self.resolved: Any = None

    def __repr__(self) -> str:
        return (
            f"ServiceDescriptor(concrete={self.concrete!r}, "
            f"shared={self.shared}, autowired={self.autowired})"
        )

    def parse_concrete(self) -> Concrete:
        """Classify the configured concrete into one of the concrete variants.

        Returns:
            :class:`ClassConcrete` for classes and dotted class paths,
            :class:`FactoryConcrete` for callables and ``(target, "method")``
            pairs, :class:`InstanceConcrete` for any other object, or
            :data:`UNSET` when nothing is configured.

        Raises:
            ConfigError: If a factory pair is malformed.
        """
        concrete = self.concrete
        if concrete is None:
            return UNSET
        if isinstance(concrete, (str, type)):
            return ClassConcrete(concrete)
        if isinstance(concrete, (tuple, list)):
            if len(concrete) != 2 or not isinstance(concrete[1], str):
                raise ConfigError(
                    f"Factory {concrete!r} must be a callable or a (target, 'method') pair"
                )
            return FactoryConcrete(tuple(concrete))
        if callable(concrete):
            return FactoryConcrete(concrete)
        return InstanceConcrete(concrete)

    def set_class(self, cls: Union[type, str]) -> "ServiceDescriptor":
        """Build the service by instantiating ``cls`` (a class or dotted path)."""
        self.concrete = cls
        return self

    def set_factory(self, factory: Union[Callable, Sequence[Any]]) -> "ServiceDescriptor":
        """Build the service by calling ``factory``.

        Args:
            factory: A callable, or a ``(target, "method")`` pair whose target
                is a class, a :class:`~joinery.domain.Reference` or an
                ``"@service"`` string.
        """
        if isinstance(factory, (tuple, list)):
            factory = tuple(factory)
        elif not callable(factory):
            raise ConfigError(f"Factory {factory!r} is not callable")
        self.concrete = factory
        return self

    def add_argument(self, value: Any) -> "ServiceDescriptor":
        """Append a positional argument after the highest position set so far."""
        positions = [key for key in self.arguments if isinstance(key, int)]
        self.arguments[max(positions) + 1 if positions else 0] = value
        return self

    def set_argument(self, key: ArgumentKey, value: Any) -> "ServiceDescriptor":
        self.arguments[key] = value
        return self

    def set_arguments(
        self, arguments: Union[Mapping[ArgumentKey, Any], Sequence[Any]]
    ) -> "ServiceDescriptor":
        """Replace all arguments. A sequence is keyed by position."""
        self.arguments = _as_argument_dict(arguments)
        return self

    def get_argument(self, key: ArgumentKey) -> Any:
        return self.arguments.get(key)

    def add_method_call(
        self, method: str, arguments: Union[Mapping[ArgumentKey, Any], Sequence[Any], Any] = ()
    ) -> "ServiceDescriptor":
        """Call ``method`` on the new instance after construction.

        A single non-sequence value is treated as the only positional argument.
        """
        if not isinstance(arguments, (Mapping, list, tuple)):
            arguments = [arguments]
        self.method_calls.append(MethodCall(method, _as_argument_dict(arguments)))
        return self

    def set_method_calls(
        self, calls: Iterable[tuple[str, Union[Mapping[ArgumentKey, Any], Sequence[Any]]]]
    ) -> "ServiceDescriptor":
        """Replace all method calls with ``(method, arguments)`` pairs."""
        self.method_calls = []
        for method, arguments in calls:
            self.add_method_call(method, arguments)
        return self

    def has_method_call(self, method: str) -> bool:
        return any(call.method == method for call in self.method_calls)

    def set_property(self, name: str, value: Any) -> "ServiceDescriptor":
        self.properties[name] = value
        return self

    def set_properties(self, properties: Mapping[str, Any]) -> "ServiceDescriptor":
        self.properties = dict(properties)
        return self

    def get_property(self, name: str) -> Any:
        return self.properties.get(name)

    def add_tag(
        self, name: str, attributes: Optional[Mapping[str, Any]] = None
    ) -> "ServiceDescriptor":
        self.tags.setdefault(name, []).append(dict(attributes or {}))
        return self

    def set_tags(self, tags: Mapping[str, list[dict[str, Any]]]) -> "ServiceDescriptor":
        self.tags = {name: list(attributes) for name, attributes in tags.items()}
        return self

    def get_tag(self, name: str) -> list[dict[str, Any]]:
        return self.tags.get(name, [])

    def has_tag(self, name: str) -> bool:
        return name in self.tags

    def clear_tag(self, name: str) -> "ServiceDescriptor":
        self.tags.pop(name, None)
        return self

    def clear_tags(self) -> "ServiceDescriptor":
        self.tags = {}
        return self

    def set_autowired(self, autowired: bool) -> "ServiceDescriptor":
        self.autowired = bool(autowired)
        return self

    def set_shared(self, shared: bool) -> "ServiceDescriptor":
        self.shared = bool(shared)
        return self


def _as_argument_dict(
    arguments: Union[Mapping[ArgumentKey, Any], Sequence[Any]],
) -> dict[ArgumentKey, Any]:
    if isinstance(arguments, Mapping):
        return dict(arguments)
    if isinstance(arguments, (list, tuple)):
        return dict(enumerate(arguments))
    raise ConfigError(f"Arguments must be a mapping or a sequence, got {arguments!r}")
