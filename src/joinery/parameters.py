"""Global parameter storage with dotted path lookup.

Parameters are plain values (strings, numbers, nested dicts) that service
arguments refer to through ``%name%`` placeholders. Nested dictionaries can
be reached with a dotted path, so ``%database.host%`` reads
``{"database": {"host": ...}}``.
"""

from collections.abc import Mapping
from typing import Any, Optional

__all__ = ["ParameterBag", "ABSENT"]

ABSENT = object()
"""Returned by :meth:`ParameterBag.lookup` for undefined parameters."""


class ParameterBag:
    """Container parameters, addressable by flat key or dotted path.

    Example:
        >>> bag = ParameterBag({"director": {"age": 26}})
        >>> bag.get_parameter("director.age")
        26
    """

    def __init__(self, parameters: Optional[Mapping[str, Any]] = None):
        self._data: dict[str, Any] = dict(parameters or {})

    def set_parameters(self, parameters: Mapping[str, Any]) -> None:
        """Replace every parameter."""
        self._data = dict(parameters)

    def add_parameters(self, parameters: Mapping[str, Any]) -> None:
        """Merge parameters in, replacing existing top level keys."""
        self._data.update(parameters)

    def set_parameter(self, name: str, value: Any) -> None:
        self._data[name] = value

    def get_parameter(self, name: str, default: Any = None) -> Any:
        """Get a parameter by name or dotted path, or ``default`` if undefined."""
        value = self.lookup(name)
        return default if value is ABSENT else value

    def has_parameter(self, name: str) -> bool:
        return self.lookup(name) is not ABSENT

    def lookup(self, name: str) -> Any:
        """Get a parameter by name or dotted path, or :data:`ABSENT` if undefined.

        A flat key containing dots takes precedence over the dotted path.
        """
        if name in self._data:
            return self._data[name]

        value: Any = self._data
        for segment in name.split("."):
            if not isinstance(value, Mapping) or segment not in value:
                return ABSENT
            value = value[segment]
        return value

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)
