"""Joinery dependency injection container.

Joinery maps service ids to construction recipes and resolves object graphs
on demand. It introspects constructor, factory and method signatures and
fills each parameter from explicit configuration, from global parameters,
or by resolving other services by their declared type.

Key Features:
    - Class, factory and instance services, shared or rebuilt on every lookup
    - Constructor arguments by position or name, setter calls and properties
    - ``@service`` references and ``%parameter%`` placeholders in arguments
    - Autowiring by type hint, with per class and method context bindings
    - Optional dependencies falling back to their default values
    - Cycle detection with the full dependency chain in the error

Basic Usage:
    >>> from joinery.container import Container
    >>>
    >>> container = Container()
    >>> container.set_parameters({"director": {"name": "James"}})
    >>> container.register("director", Director) \\
    ...     .set_arguments(["%director.name%", 45]) \\
    ...     .add_method_call("set_age", [50])
    >>> container.bind(ActorInterface, Actor)
    >>>
    >>> movie = container.get(Movie)

The package consists of several modules:
    - container: Service registry, aliases, bindings, parameters and caching
    - descriptor: Service recipes and their builder methods
    - resolver: Construction of instances from descriptors
    - binder: Binding of arguments to callable parameters
    - arguments: Resolution of references and placeholders
    - introspection: Class loading and signature analysis
    - parameters: Global parameter storage with dotted path lookup
    - config: Container defaults
    - domain: Core domain models (Reference, MethodCall, ParameterSpec)
    - errors: Framework-specific exceptions
"""
