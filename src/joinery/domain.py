"""Domain models used throughout the container."""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union

__all__ = [
    "Reference",
    "MethodCall",
    "ParameterSpec",
    "ClassConcrete",
    "FactoryConcrete",
    "InstanceConcrete",
    "Concrete",
    "UNSET",
    "NO_DEFAULT",
]


@dataclass(frozen=True)
class Reference:
    """Marks an argument to be replaced by the service registered under ``service_id``.

    Example:
        >>> container.register("movie", Movie).add_argument(Reference("director"))
    """

    service_id: str


@dataclass(frozen=True)
class MethodCall:
    """A method to invoke on a freshly built instance.

    Attributes:
        method: Name of the method to call.
        arguments: Raw arguments keyed by position or parameter name.
    """

    method: str
    arguments: dict[Union[int, str], Any] = field(default_factory=dict)


NO_DEFAULT = object()


@dataclass(frozen=True)
class ParameterSpec:
    """Describes one formal parameter of a constructor, factory or method.

    Attributes:
        position: Index of the parameter in the signature.
        name: The parameter name.
        kind: The :class:`inspect.Parameter` kind.
        declared_type: The class the parameter is annotated with, if any.
        qualifier: Service id given with ``Annotated[T, "service-id"]``, if any.
        default: The default value, or a sentinel when there is none.
    """

    position: int
    name: str
    kind: Any
    declared_type: Optional[type] = None
    qualifier: Optional[str] = None
    default: Any = NO_DEFAULT

    @property
    def is_optional(self) -> bool:
        return self.default is not NO_DEFAULT


@dataclass(frozen=True)
class ClassConcrete:
    """A service built by instantiating a class, given as a class or dotted path."""

    cls: Union[type, str]


@dataclass(frozen=True)
class FactoryConcrete:
    """A service built by calling a factory.

    ``factory`` is a callable or a ``(target, "method")`` pair whose target is
    resolved like any other argument before the method is looked up.
    """

    factory: Union[Callable, tuple]


@dataclass(frozen=True)
class InstanceConcrete:
    """A service backed by an already built object."""

    instance: Any


UNSET = None

Concrete = Union[ClassConcrete, FactoryConcrete, InstanceConcrete, None]
