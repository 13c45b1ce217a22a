__all__ = [
    "DependencyError",
    "ConfigError",
    "InvalidClassError",
    "NotInstantiableError",
    "UnknownMethodError",
    "UnknownPropertyError",
    "MissingParameterError",
    "UndefinedParameterError",
    "NotFoundError",
    "CyclicDependencyError",
    "FrozenServiceError",
]


class DependencyError(Exception):
    """Raised when a service cannot be configured or resolved."""

    pass


class ConfigError(DependencyError):
    """Raised when a service descriptor or container setting is structurally invalid."""

    pass


class InvalidClassError(DependencyError):
    """Raised when a class name cannot be imported or does not name a class."""

    pass


class NotInstantiableError(DependencyError):
    """Raised when a class exists but is abstract or a protocol."""

    pass


class UnknownMethodError(DependencyError):
    """Raised when a configured method call does not exist on the built instance."""

    pass


class UnknownPropertyError(DependencyError):
    """Raised when a configured property cannot be assigned on the built instance."""

    pass


class MissingParameterError(DependencyError):
    """Raised when a required parameter has no argument, autowired service or default."""

    pass


class UndefinedParameterError(DependencyError):
    """Raised when a ``%name%`` placeholder refers to an undefined parameter."""

    pass


class NotFoundError(DependencyError, LookupError):
    """Raised when no service is registered under the requested id."""

    pass


class CyclicDependencyError(DependencyError):
    """Raised when resolving a service requires resolving itself."""

    pass


class FrozenServiceError(DependencyError):
    """Raised when extending a service that has already been resolved."""

    pass
