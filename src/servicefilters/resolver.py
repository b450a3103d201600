"""Uniform invocation of filter references against a service instance."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable

from servicefilters.errors import InvalidFilterError
from servicefilters.types import CallableRef, FunctionRef, MethodRef

__all__ = ["invoke_callable", "resolve_callable", "callable_arity", "CallShape", "call_shape"]

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


@dataclass(frozen=True)
class CallShape:
    """What a callable's signature can accept.

    Attributes:
        required: Number of required positional parameters (bound ``self`` excluded).
        capacity: Number of positional parameters it accepts, None when unbounded.
        keyword_proceed: Whether it declares a keyword-only ``proceed`` parameter.
    """

    required: int = 0
    capacity: int | None = None
    keyword_proceed: bool = False


def call_shape(func: Callable[..., Any]) -> CallShape:
    """Inspect *func*; callables without an inspectable signature accept anything."""
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return CallShape()
    required = 0
    capacity: int | None = 0
    keyword_proceed = False
    for param in sig.parameters.values():
        if param.kind in _POSITIONAL:
            if param.default is inspect.Parameter.empty:
                required += 1
            if capacity is not None:
                capacity += 1
        elif param.kind is inspect.Parameter.VAR_POSITIONAL:
            capacity = None
        elif param.kind is inspect.Parameter.KEYWORD_ONLY and param.name == "proceed":
            keyword_proceed = True
    return CallShape(required=required, capacity=capacity, keyword_proceed=keyword_proceed)


def callable_arity(func: Callable[..., Any]) -> int:
    """Return the number of required positional parameters of *func*.

    Bound methods do not count ``self``. Callables without an inspectable
    signature (some builtins) report zero.
    """
    return call_shape(func).required


def resolve_callable(ref: CallableRef, instance: Any) -> Callable[..., Any]:
    """Turn *ref* into something callable, or raise InvalidFilterError."""
    if isinstance(ref, MethodRef):
        method = getattr(instance, ref.name, None)
        if method is None or not callable(method):
            raise InvalidFilterError(ref.name, owner=type(instance).__name__)
        return method
    if isinstance(ref, FunctionRef):
        if not callable(ref.target):
            raise InvalidFilterError(ref.target)
        return ref.target
    raise InvalidFilterError(ref)


def _invoke_with_proceed(func: Callable[..., Any], instance: Any, proceed: Callable[[], Any]) -> Any:
    shape = call_shape(func)
    if shape.keyword_proceed:
        if shape.required == 1:
            return func(instance, proceed=proceed)
        return func(proceed=proceed)
    if shape.required >= 2:
        return func(instance, proceed)
    if shape.required == 1:
        return func(proceed)
    if shape.capacity is None or shape.capacity >= 1:
        return func(proceed)
    # No slot for proceed: the filter runs but the chain never continues.
    return func()


def invoke_callable(ref: CallableRef, instance: Any, proceed: Callable[[], Any] | None = None) -> Any:
    """Invoke a filter reference and return its result unmodified.

    A callable taking exactly one argument receives the service instance;
    any other callable is called without it. When *proceed* is given (around
    filters) it goes in the trailing positional slot, or by keyword when the
    callable declares a keyword-only ``proceed``:

        (service, proceed)      -> func(instance, proceed)
        (proceed)               -> func(proceed)
        (service, *, proceed)   -> func(instance, proceed=proceed)
        (*, proceed)            -> func(proceed=proceed)
        ()                      -> func(), proceed is never called
    """
    func = resolve_callable(ref, instance)
    if proceed is not None:
        return _invoke_with_proceed(func, instance, proceed)
    if callable_arity(func) == 1:
        return func(instance)
    return func()
