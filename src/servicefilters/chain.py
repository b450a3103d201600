"""Composition of around filters into a single continuation.

Around filters wrap the endpoint outer-to-inner in declaration order. For a
service declaring ``around_filter("a1", "a2", "a3")`` the composed
continuation behaves like::

    a1(proceed=lambda: a2(proceed=lambda: a3(proceed=endpoint)))

A filter that never calls ``proceed`` keeps every inner filter and the
endpoint from running.
"""

from __future__ import annotations

import abc
import logging
from typing import Any, Iterable

from servicefilters.conditions import should_invoke
from servicefilters.resolver import invoke_callable
from servicefilters.types import FilterDefinition

__all__ = ["Continuation", "build_around_chain"]

_logger = logging.getLogger(__name__)


class Continuation(abc.ABC):
    """A zero-argument deferred step of the chain."""

    @abc.abstractmethod
    def __call__(self) -> Any:
        """Run this step and everything inside it, returning the endpoint's value."""

    @property
    def depth(self) -> int:
        """Number of around filters between this step and the endpoint."""
        return 0


class _EndpointCall(Continuation):
    """Innermost step: the endpoint method itself."""

    def __init__(self, endpoint_name: str, instance: Any) -> None:
        self._endpoint_name = endpoint_name
        self._instance = instance

    def __call__(self) -> Any:
        return getattr(self._instance, self._endpoint_name)()

    def __repr__(self) -> str:
        return f"<endpoint {type(self._instance).__name__}.{self._endpoint_name}>"


class _AroundLink(Continuation):
    """Invokes one around filter, handing it the next step as ``proceed``."""

    def __init__(self, definition: FilterDefinition, instance: Any, proceed: Continuation) -> None:
        self._definition = definition
        self._instance = instance
        self._proceed = proceed

    def __call__(self) -> Any:
        return invoke_callable(self._definition.callable, self._instance, self._proceed)

    @property
    def depth(self) -> int:
        return self._proceed.depth + 1

    def __repr__(self) -> str:
        return f"<around {self._definition.callable.describe()} -> {self._proceed!r}>"


def build_around_chain(
    endpoint_name: str,
    instance: Any,
    definitions: Iterable[FilterDefinition],
    log_skipped: bool = False,
) -> Continuation:
    """Build the continuation that runs the around filters and then the endpoint.

    Definitions are walked in reverse; each one whose conditions pass wraps
    the continuation built so far, the others are left out. Conditions are
    evaluated here, before any around filter runs.
    """
    continuation: Continuation = _EndpointCall(endpoint_name, instance)
    for definition in reversed(tuple(definitions)):
        if should_invoke(endpoint_name, definition, instance):
            continuation = _AroundLink(definition, instance, continuation)
        elif log_skipped:
            _logger.debug("Around filter %s elided for %s", definition.describe(), endpoint_name)
    return continuation
