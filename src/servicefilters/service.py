"""ServiceFilters mixin: filter declarations on service classes and the run_filters entry point."""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Mapping

from servicefilters.config import Config
from servicefilters.decorators import declared_filters
from servicefilters.errors import FilterOptionsError
from servicefilters.registry import FilterRegistry
from servicefilters.runner import FilterRunner, RunResult
from servicefilters.types import FilterDefinition, FilterOptions, FilterType, MethodRef

__all__ = ["ServiceFilters"]

_logger = logging.getLogger(__name__)

_REGISTRY_ATTR = "__servicefilters_registry__"


def _split_options(
    args: tuple[Any, ...], options: dict[str, Any]
) -> tuple[tuple[Any, ...], FilterOptions | dict[str, Any]]:
    """Separate a trailing options map from the callables of a declaration."""
    if args and isinstance(args[-1], FilterOptions):
        if options:
            raise FilterOptionsError("Pass filter options either as keywords or as a trailing map, not both")
        return args[:-1], args[-1]
    if args and isinstance(args[-1], Mapping):
        return args[:-1], {**args[-1], **options}
    return args, options


class ServiceFilters:
    """Mixin giving a service class before, after and around filters.

    Filters are declared with the ``before_filter``/``after_filter``/
    ``around_filter`` classmethods (or the ``@before``/``@after``/``@around``
    method decorators) and run by ``run_filters(endpoint_name)``, which the
    dispatcher calls instead of the endpoint method.

    Filter references are resolved when they run, not when they are
    declared: a misspelled method name raises InvalidFilterError only once an
    endpoint the filter applies to is invoked.

    Subclasses start with a snapshot of their parent's filters taken at class
    definition time. Pass ``inherit_filters=False`` in the class statement
    to start from an empty registry instead.
    """

    filter_config: ClassVar[Config | None] = None

    def __init_subclass__(cls, inherit_filters: bool = True, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if inherit_filters:
            parent = cls._parent_registry()
            if parent is not None:
                setattr(cls, _REGISTRY_ATTR, parent.copy(owner=cls.__qualname__))
        for name, filter_type, opts in declared_filters(dict(vars(cls))):
            cls._writable_registry().register(filter_type, [MethodRef(name)], opts)

    @classmethod
    def _parent_registry(cls) -> FilterRegistry | None:
        for base in cls.__mro__[1:]:
            registry = base.__dict__.get(_REGISTRY_ATTR)
            if registry is not None:
                return registry
        return None

    @classmethod
    def _writable_registry(cls) -> FilterRegistry:
        registry = cls.__dict__.get(_REGISTRY_ATTR)
        if registry is None:
            registry = FilterRegistry(owner=cls.__qualname__)
            setattr(cls, _REGISTRY_ATTR, registry)
        return registry

    # ----- Declarations -----

    @classmethod
    def add_filter(cls, type: FilterType | str, *callables: Any, **options: Any) -> None:
        """Declare one or more filters of *type*, with an optional trailing options map."""
        filter_type = FilterType.coerce(type)
        refs, opts = _split_options(callables, options)
        added = cls._writable_registry().register(filter_type, refs, opts)
        _logger.debug("Declared %d %s filter(s) on %s", added, filter_type.value, cls.__qualname__)

    @classmethod
    def before_filter(cls, *callables: Any, **options: Any) -> None:
        """Declare filters that run before the endpoint; returning False stops the call."""
        cls.add_filter(FilterType.BEFORE, *callables, **options)

    @classmethod
    def after_filter(cls, *callables: Any, **options: Any) -> None:
        """Declare filters that run after the endpoint."""
        cls.add_filter(FilterType.AFTER, *callables, **options)

    @classmethod
    def around_filter(cls, *callables: Any, **options: Any) -> None:
        """Declare filters that wrap the endpoint and receive a ``proceed`` continuation."""
        cls.add_filter(FilterType.AROUND, *callables, **options)

    # ----- Introspection -----

    @classmethod
    def filters(cls) -> FilterRegistry:
        """Return this class's registry; an empty detached one if nothing was declared."""
        registry = cls.__dict__.get(_REGISTRY_ATTR)
        if registry is None:
            return FilterRegistry(owner=cls.__qualname__)
        return registry

    @classmethod
    def filters_for(cls, type: FilterType | str) -> tuple[FilterDefinition, ...]:
        """Return the definitions of one filter type in declaration order."""
        return cls.filters().filters(type)

    # ----- Dispatch -----

    @property
    def current_endpoint(self) -> str | None:
        """Name of the endpoint whose filters are running on this instance, if any."""
        return self.__dict__.get("_current_endpoint")

    def run_filters(self, endpoint_name: str) -> RunResult:
        """Run before, around and after filters, invoking the endpoint in between."""
        runner = FilterRunner(type(self).filters(), config=type(self).filter_config)
        previous = self.__dict__.get("_current_endpoint")
        self.__dict__["_current_endpoint"] = endpoint_name
        try:
            return runner.run(endpoint_name, self)
        finally:
            self.__dict__["_current_endpoint"] = previous
