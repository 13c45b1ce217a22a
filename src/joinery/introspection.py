"""Reflection utilities for classes, callables and their signatures."""

import enum
import importlib
import inspect
import types
from typing import (
    Any,
    Annotated,
    Callable,
    Optional,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from joinery.domain import NO_DEFAULT, ParameterSpec
from joinery.errors import InvalidClassError

__all__ = [
    "service_id",
    "load_class",
    "is_instantiable",
    "has_own_constructor",
    "parameter_specs",
    "try_load_class",
    "ServiceKey",
    "callable_name",
    "context_of",
]

ServiceKey = Union[str, type]
"""Type alias for keys used to look up services in a Container.

Services can be identified either by their string id or by a class. A class
is converted to its dotted path for internal lookup.

Example:
    >>> container.get("director")   # Lookup by id
    >>> container.get(Director)     # Lookup by class (converted to "example.Director")
"""

PRIMITIVE_TYPES = frozenset(
    {str, int, float, bool, bytes, complex, list, dict, tuple, set, frozenset, object, type}
)


def service_id(key: Any) -> str:
    """Derive the canonical service id for a class or id.

    Args:
        key: A service id string or a class.

    Returns:
        The string unchanged, or the class's ``module.qualname``.

    Example:
        >>> service_id("director")   # Returns "director"
        >>> service_id(Director)     # Returns "example.Director"
    """
    if isinstance(key, str):
        return key
    if inspect.isclass(key):
        return f"{key.__module__}.{key.__qualname__}"
    return str(key)


def load_class(path: str) -> type:
    """Import the class named by a dotted path.

    Args:
        path: A ``package.module.Class`` path; nested classes may follow the
            module part (``package.module.Outer.Inner``).

    Returns:
        The class.

    Raises:
        InvalidClassError: If no module prefix of the path can be imported, or
            the named object is missing or not a class.
    """
    parts = path.split(".")
    for split in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:split])
        try:
            target = importlib.import_module(module_name)
        except ImportError:
            continue
        try:
            for attribute in parts[split:]:
                target = getattr(target, attribute)
        except AttributeError:
            break
        if inspect.isclass(target):
            return target
        break
    raise InvalidClassError(f'Class "{path}" is invalid')


def try_load_class(path: str) -> Optional[type]:
    """Like :func:`load_class`, but returns None instead of raising."""
    if "." not in path:
        return None
    try:
        return load_class(path)
    except InvalidClassError:
        return None


def is_instantiable(cls: type) -> bool:
    """Whether a class can be instantiated: it is neither abstract nor a protocol."""
    if inspect.isabstract(cls):
        return False
    return not getattr(cls, "_is_protocol", False)


def has_own_constructor(cls: type) -> bool:
    """Whether any class in the MRO (other than ``object``) defines ``__init__``."""
    return cls.__init__ is not object.__init__


def callable_name(target: Any) -> str:
    """Human readable name of a callable, used in error messages."""
    qualname = getattr(target, "__qualname__", None)
    if qualname:
        return qualname
    return repr(target)


def context_of(target: Callable) -> tuple[str, str]:
    """Derive the ``(class id, method name)`` binding context of a factory.

    Bound and static methods resolve to their owning class; plain functions
    resolve to their own id with the ``"__call__"`` method.

    Example:
        >>> context_of(Director.factory)   # ("example.Director", "factory")
        >>> context_of(make_director)      # ("example.make_director", "__call__")
    """
    owner = getattr(target, "__self__", None)
    if owner is not None:
        owner_cls = owner if inspect.isclass(owner) else type(owner)
        return service_id(owner_cls), target.__name__

    qualname = getattr(target, "__qualname__", "")
    module = getattr(target, "__module__", None)
    if "." in qualname:
        owner_name, method_name = qualname.rsplit(".", 1)
        if not owner_name.endswith("<locals>"):
            return f"{module}.{owner_name}", method_name

    if inspect.isfunction(target) or inspect.isbuiltin(target):
        return f"{module}.{qualname}", "__call__"

    return service_id(type(target)), "__call__"


def parameter_specs(func: Callable) -> Optional[list[ParameterSpec]]:
    """Extract parameter information from a callable's signature and annotations.

    Analyses the signature to create ParameterSpec objects for each
    parameter. Supports plain class annotations, ``Optional`` unions and
    Annotated types with a service id qualifier.

    Args:
        func: The callable to analyse. For a class, the constructor parameters
            are described, without ``self``.

    Returns:
        List of ParameterSpec objects, or None when the callable has no
        inspectable signature.

    Example:
        >>> def movie(title, director: Director, actor: Annotated[Actor, "lead"] = None):
        ...     pass
        >>> specs = parameter_specs(movie)
        >>> # Returns:
        >>> # [ParameterSpec(0, "title", ..., None, None),
        >>> #  ParameterSpec(1, "director", ..., Director, None),
        >>> #  ParameterSpec(2, "actor", ..., Actor, "lead", default=None)]
    """
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return None
    hints = _type_hints(func.__init__ if inspect.isclass(func) else func)
    specs = []
    for position, (name, parameter) in enumerate(sig.parameters.items()):
        annotation = hints.get(name, parameter.annotation)
        declared_type, qualifier = _unwrap_annotation(annotation)
        default = (
            NO_DEFAULT if parameter.default is inspect.Parameter.empty else parameter.default
        )
        specs.append(
            ParameterSpec(position, name, parameter.kind, declared_type, qualifier, default)
        )
    return specs


def _type_hints(func: Callable) -> dict[str, Any]:
    try:
        return get_type_hints(func, include_extras=True)
    except (NameError, TypeError, AttributeError):
        return _partial_type_hints(func)


def _partial_type_hints(func: Callable) -> dict[str, Any]:
    """Evaluate each annotation on its own, skipping the unresolvable ones."""
    namespace = getattr(inspect.unwrap(func), "__globals__", {})
    hints = {}
    for name, annotation in getattr(func, "__annotations__", {}).items():
        if isinstance(annotation, str):
            try:
                annotation = eval(annotation, namespace)
            except (NameError, AttributeError, TypeError, SyntaxError):
                continue
        hints[name] = annotation
    return hints


def _unwrap_annotation(annotation: Any) -> tuple[Optional[type], Optional[str]]:
    if annotation is inspect.Parameter.empty:
        return None, None

    annotation, qualifier = _strip_annotated(annotation)

    if get_origin(annotation) in (Union, types.UnionType):
        members = [a for a in get_args(annotation) if a is not type(None)]
        annotation = members[0] if len(members) == 1 else None
        annotation, inner_qualifier = _strip_annotated(annotation)
        qualifier = qualifier or inner_qualifier

    if _is_service_type(annotation):
        return annotation, qualifier
    return None, qualifier


def _is_service_type(annotation: Any) -> bool:
    if not inspect.isclass(annotation) or annotation in PRIMITIVE_TYPES:
        return False
    return not issubclass(annotation, enum.Enum)


def _strip_annotated(annotation: Any) -> tuple[Any, Optional[str]]:
    if get_origin(annotation) is not Annotated:
        return annotation, None
    base_type, *metadata = get_args(annotation)
    return base_type, next((m for m in metadata if isinstance(m, str)), None)
