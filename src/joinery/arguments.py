"""Resolution of raw argument values into concrete values.

Raw values appear in descriptor arguments, method call arguments and
properties. Each leaf value is classified once by :func:`parse_argument`:

- a :class:`~joinery.domain.Reference`, or a string ``"@service"``, is a
  reference to another service;
- a string that is exactly ``"%name%"`` is a parameter, returned with its
  native type;
- a string containing ``%name%`` among other text is interpolated, each
  parameter converted with ``str``;
- anything else is returned unchanged.

Lists, tuples and dicts are resolved element by element, keeping their
type, keys and order.
"""

import re
from dataclasses import dataclass
from typing import Any, Protocol, Union

from joinery.domain import Reference
from joinery.errors import UndefinedParameterError
from joinery.parameters import ABSENT

__all__ = [
    "Literal",
    "ServiceRef",
    "ParamRef",
    "InterpolatedString",
    "ParsedArgument",
    "parse_argument",
    "ParameterResolver",
]

SERVICE_SIGIL = "@"
PLACEHOLDER = re.compile(r"%([^%\s]+)%")


@dataclass(frozen=True)
class Literal:
    value: Any


@dataclass(frozen=True)
class ServiceRef:
    service_id: str


@dataclass(frozen=True)
class ParamRef:
    name: str


@dataclass(frozen=True)
class InterpolatedString:
    template: str
    names: tuple[str, ...]


ParsedArgument = Union[Literal, ServiceRef, ParamRef, InterpolatedString]


def parse_argument(value: Any) -> ParsedArgument:
    """Classify a single raw (non-container) argument value.

    Example:
        >>> parse_argument("@director")       # ServiceRef("director")
        >>> parse_argument("%director.age%")  # ParamRef("director.age")
        >>> parse_argument("%first% %last%")  # InterpolatedString(..., ("first", "last"))
        >>> parse_argument("@")               # Literal("@")
    """
    if isinstance(value, Reference):
        return ServiceRef(value.service_id)
    if not isinstance(value, str):
        return Literal(value)
    if len(value) >= 2 and value.startswith(SERVICE_SIGIL):
        return ServiceRef(value[1:])

    exact = PLACEHOLDER.fullmatch(value)
    if exact:
        return ParamRef(exact.group(1))
    names = tuple(PLACEHOLDER.findall(value))
    if names:
        return InterpolatedString(value, names)
    return Literal(value)


class ServiceSource(Protocol):
    """What the resolver needs from a container."""

    def get(self, key: Any) -> Any: ...

    def get_parameter(self, name: str, default: Any = None) -> Any: ...


class ParameterResolver:
    """Turns raw argument values into the values passed to callables."""

    def __init__(self, container: ServiceSource):
        self._container = container

    def resolve(self, value: Any) -> Any:
        """Resolve a raw value, recursing into lists, tuples and dicts.

        Raises:
            UndefinedParameterError: If a placeholder names an undefined parameter.
            NotFoundError: If a referenced service does not exist.
        """
        if isinstance(value, dict):
            return {key: self.resolve(item) for key, item in value.items()}
        if isinstance(value, list):
            return [self.resolve(item) for item in value]
        if isinstance(value, tuple):
            return tuple(self.resolve(item) for item in value)
        return self._resolve_parsed(parse_argument(value))

    def _resolve_parsed(self, parsed: ParsedArgument) -> Any:
        if isinstance(parsed, ServiceRef):
            return self._container.get(parsed.service_id)
        if isinstance(parsed, ParamRef):
            return self._parameter(parsed.name)
        if isinstance(parsed, InterpolatedString):
            return PLACEHOLDER.sub(
                lambda match: str(self._parameter(match.group(1))), parsed.template
            )
        return parsed.value

    def _parameter(self, name: str) -> Any:
        value = self._container.get_parameter(name, ABSENT)
        if value is ABSENT:
            raise UndefinedParameterError(f"Parameter [{name}] is not defined")
        return value
