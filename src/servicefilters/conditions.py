"""Conditional application of filters: only / except / if / unless."""

from __future__ import annotations

from typing import Any

from servicefilters.resolver import invoke_callable
from servicefilters.types import FilterDefinition

__all__ = [
    "should_invoke",
    "invoke_via_only",
    "invoke_via_except",
    "invoke_via_if",
    "invoke_via_unless",
]


def invoke_via_only(endpoint_name: str, definition: FilterDefinition) -> bool:
    """Pass when ``only`` is empty or lists the endpoint."""
    only = definition.options.only
    return not only or endpoint_name in only


def invoke_via_except(endpoint_name: str, definition: FilterDefinition) -> bool:
    """Pass when ``except`` is empty or does not list the endpoint."""
    excluded = definition.options.except_
    return not excluded or endpoint_name not in excluded


def invoke_via_if(definition: FilterDefinition, instance: Any) -> bool:
    """Pass when there is no ``if`` condition or it returns a truthy value."""
    condition = definition.options.if_
    if condition is None:
        return True
    return bool(invoke_callable(condition, instance))


def invoke_via_unless(definition: FilterDefinition, instance: Any) -> bool:
    """Pass when there is no ``unless`` condition or it returns a falsy value."""
    condition = definition.options.unless
    if condition is None:
        return True
    return not invoke_callable(condition, instance)


def should_invoke(endpoint_name: str, definition: FilterDefinition, instance: Any) -> bool:
    """Decide whether *definition* applies to *endpoint_name* on *instance*.

    The result is the AND of the four checks. Name checks run first so that
    ``if``/``unless`` callables are only evaluated for endpoints the filter
    could apply to.
    """
    return (
        invoke_via_only(endpoint_name, definition)
        and invoke_via_except(endpoint_name, definition)
        and invoke_via_if(definition, instance)
        and invoke_via_unless(definition, instance)
    )
