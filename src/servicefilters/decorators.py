"""Method decorators that declare a service method as a filter from inside the class body."""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from servicefilters.types import FilterOptions, FilterType

__all__ = ["before", "after", "around", "DECLARATIONS_ATTR", "declared_filters"]

F = TypeVar("F", bound=Callable[..., Any])

DECLARATIONS_ATTR = "__servicefilters_declarations__"


def _declare(filter_type: FilterType, options: dict[str, Any]) -> Callable[[F], F]:
    # Validate eagerly so a bad option map fails where it is written.
    opts = FilterOptions.build(options)

    def decorator(func: F) -> F:
        declarations = list(getattr(func, DECLARATIONS_ATTR, ()))
        declarations.append((filter_type, opts))
        setattr(func, DECLARATIONS_ATTR, declarations)
        return func

    return decorator


def before(**options: Any) -> Callable[[F], F]:
    """Register the decorated method as a before filter of its service class.

    Example:
        class Users(ServiceFilters):
            @before(except_="ping")
            def check_auth(self):
                return self.request.token is not None
    """
    return _declare(FilterType.BEFORE, options)


def after(**options: Any) -> Callable[[F], F]:
    """Register the decorated method as an after filter of its service class."""
    return _declare(FilterType.AFTER, options)


def around(**options: Any) -> Callable[[F], F]:
    """Register the decorated method as an around filter; it receives ``proceed``."""
    return _declare(FilterType.AROUND, options)


def declared_filters(namespace: dict[str, Any]) -> list[tuple[str, FilterType, FilterOptions]]:
    """Collect decorator declarations from a class namespace in definition order."""
    found: list[tuple[str, FilterType, FilterOptions]] = []
    for name, value in namespace.items():
        declarations = getattr(value, DECLARATIONS_ATTR, None)
        if declarations is None and isinstance(value, (staticmethod, classmethod)):
            declarations = getattr(value.__func__, DECLARATIONS_ATTR, None)
        for filter_type, opts in declarations or ():
            found.append((name, filter_type, opts))
    return found
