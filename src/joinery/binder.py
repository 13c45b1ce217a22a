"""Binding of raw arguments to the formal parameters of a callable.

For every parameter, in declaration order, the binder takes the first of:

1. an argument keyed by the parameter's position;
2. an argument keyed by the parameter's name (skipped when the first
   provided key is a position, which marks a positional argument list);
3. when autowiring, the service found for the parameter's declared type,
   honouring context bindings and ``Annotated`` qualifiers;
4. the parameter's default value.

A parameter satisfied by none of these is a :class:`MissingParameterError`.

Provided values are resolved only once chosen for a parameter, in
declaration order, so references are built left to right and ignored
arguments are never resolved.
"""

import inspect
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from joinery.arguments import ParameterResolver, ServiceSource
from joinery.domain import ParameterSpec
from joinery.errors import MissingParameterError, NotFoundError
from joinery.introspection import ServiceKey, callable_name, service_id

__all__ = ["BoundArguments", "DependencyBinder"]

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass
class BoundArguments:
    """Arguments ready to be passed to a callable as ``target(*args, **kwargs)``."""

    args: list[Any] = field(default_factory=list)
    kwargs: dict[str, Any] = field(default_factory=dict)

    def call(self, target: Callable) -> Any:
        return target(*self.args, **self.kwargs)


class DependencyBinder:
    """Fills the parameters of constructors, factories and methods."""

    def __init__(
        self, container: ServiceSource, arguments: Optional[ParameterResolver] = None
    ):
        self._container = container
        self._arguments = arguments or ParameterResolver(container)

    def bind(
        self,
        target: Callable,
        specs: list[ParameterSpec],
        provided: Mapping[Any, Any],
        context_bindings: Optional[Mapping[str, str]] = None,
        autowired: bool = True,
    ) -> BoundArguments:
        """Bind raw arguments to ``target``'s parameters.

        Args:
            target: The callable being bound, used in error messages.
            specs: The callable's formal parameters, in declaration order.
            provided: Raw arguments keyed by position or parameter name.
            context_bindings: Type id or parameter name to service id
                overrides for this class and method.
            autowired: Whether declared types may be looked up in the container.

        Returns:
            The positional and keyword arguments to call ``target`` with.

        Raises:
            MissingParameterError: If a required parameter cannot be satisfied.
            NotFoundError: If autowiring a required parameter finds no service.
            UndefinedParameterError: If a chosen argument names an undefined parameter.
        """
        context_bindings = context_bindings or {}
        positional_only = _first_key_is_position(provided)
        bound = BoundArguments()

        for spec in specs:
            if spec.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue

            value = self._bind_parameter(
                target, spec, provided, positional_only, context_bindings, autowired
            )
            if spec.kind is inspect.Parameter.KEYWORD_ONLY:
                bound.kwargs[spec.name] = value
            else:
                bound.args.append(value)

        return bound

    def _bind_parameter(
        self,
        target: Callable,
        spec: ParameterSpec,
        provided: Mapping[Any, Any],
        positional_only: bool,
        context_bindings: Mapping[str, str],
        autowired: bool,
    ) -> Any:
        if spec.position in provided:
            return self._arguments.resolve(provided[spec.position])
        if not positional_only and spec.name in provided:
            return self._arguments.resolve(provided[spec.name])

        if autowired:
            service = _autowire_target(spec, context_bindings)
            if service is not None:
                value = self._autowire(spec, service)
                if value is not _MISSING:
                    return value

        if spec.is_optional:
            return spec.default

        raise MissingParameterError(
            f'Missing required parameter "{spec.name}" when calling "{callable_name(target)}"'
        )

    def _autowire(self, spec: ParameterSpec, service: ServiceKey) -> Any:
        try:
            return self._container.get(service)
        except NotFoundError:
            if not spec.is_optional:
                raise
            logger.debug(
                "No service %s for optional parameter %s, using its default",
                service_id(service),
                spec.name,
            )
            return _MISSING


def _autowire_target(
    spec: ParameterSpec, context_bindings: Mapping[str, str]
) -> Optional[ServiceKey]:
    """Determine the service that autowires ``spec``, if any."""
    if spec.declared_type is not None:
        type_id = service_id(spec.declared_type)
        if type_id in context_bindings:
            return context_bindings[type_id]
    if spec.name in context_bindings:
        return context_bindings[spec.name]
    if spec.qualifier is not None:
        return spec.qualifier
    return spec.declared_type


def _first_key_is_position(provided: Mapping[Any, Any]) -> bool:
    first_key = next(iter(provided), None)
    return isinstance(first_key, int) and not isinstance(first_key, bool)
