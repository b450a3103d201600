"""FilterRunner -- orchestrates the before, around and after phases of an endpoint call."""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from servicefilters.chain import build_around_chain
from servicefilters.conditions import should_invoke
from servicefilters.resolver import invoke_callable
from servicefilters.types import FilterDefinition, FilterType

if TYPE_CHECKING:
    from servicefilters.config import Config
    from servicefilters.registry import FilterRegistry

__all__ = ["FilterRunner", "RunResult", "RunState"]

_logger = logging.getLogger(__name__)


class RunState(enum.Enum):
    """Phases of a single filter run."""

    IDLE = "idle"
    RUNNING_BEFORE = "running_before"
    STOPPED = "stopped"
    RUNNING_AROUND = "running_around"
    RUNNING_AFTER = "running_after"
    DONE = "done"


@dataclass(frozen=True)
class RunResult:
    """Outcome of FilterRunner.run().

    Attributes:
        state: DONE when the around chain was executed, STOPPED when a before
            filter halted the run.
        value: Return value of the around chain (the endpoint's return value
            unless an around filter replaced it). None when stopped.
        stopped_by: The before filter that returned False, if any.
    """

    state: RunState
    value: Any = None
    stopped_by: FilterDefinition | None = None

    @property
    def invoked(self) -> bool:
        return self.state is RunState.DONE


class FilterRunner:
    """Runs the filters of one registry around an endpoint of a service instance.

    The 4-step flow: before filters in declaration order (a before filter
    returning exactly ``False`` stops the run), the around chain with the
    endpoint innermost, after filters in declaration order, done. Errors
    from filters and endpoints propagate unchanged.
    """

    def __init__(self, registry: FilterRegistry, config: Config | None = None) -> None:
        self._registry = registry
        if config is not None:
            self._log_skipped = bool(config.get("runner.log_skipped", False))
            self._log_timing = bool(config.get("runner.log_timing", True))
        else:
            self._log_skipped = False
            self._log_timing = True
        self._state = RunState.IDLE

    @property
    def registry(self) -> FilterRegistry:
        return self._registry

    @property
    def state(self) -> RunState:
        """State reached by the most recent run()."""
        return self._state

    def run(self, endpoint_name: str, instance: Any) -> RunResult:
        """Run all applicable filters and the endpoint for *endpoint_name*."""
        start = time.perf_counter()
        _logger.debug("Running filters for %s.%s", type(instance).__name__, endpoint_name)

        # Step 1 -- Before
        self._state = RunState.RUNNING_BEFORE
        stopped_by = self._run_before(endpoint_name, instance)
        if stopped_by is not None:
            self._state = RunState.STOPPED
            _logger.debug(
                "Before filter %s stopped %s.%s",
                stopped_by.describe(),
                type(instance).__name__,
                endpoint_name,
            )
            return RunResult(state=RunState.STOPPED, stopped_by=stopped_by)

        # Step 2 -- Around (endpoint innermost)
        self._state = RunState.RUNNING_AROUND
        chain = build_around_chain(
            endpoint_name,
            instance,
            self._registry.filters(FilterType.AROUND),
            log_skipped=self._log_skipped,
        )
        value = chain()

        # Step 3 -- After
        self._state = RunState.RUNNING_AFTER
        self._run_after(endpoint_name, instance)

        # Step 4 -- Done
        self._state = RunState.DONE
        if self._log_timing:
            duration_ms = (time.perf_counter() - start) * 1000
            _logger.debug(
                "Finished %s.%s (%.2fms)", type(instance).__name__, endpoint_name, duration_ms
            )
        return RunResult(state=RunState.DONE, value=value)

    def _run_before(self, endpoint_name: str, instance: Any) -> FilterDefinition | None:
        """Invoke applicable before filters; return the one that stopped the run, if any."""
        for definition in self._registry.filters(FilterType.BEFORE):
            if not self._applies(endpoint_name, definition, instance):
                continue
            if invoke_callable(definition.callable, instance) is False:
                return definition
        return None

    def _run_after(self, endpoint_name: str, instance: Any) -> None:
        """Invoke every applicable after filter; return values are ignored."""
        for definition in self._registry.filters(FilterType.AFTER):
            if self._applies(endpoint_name, definition, instance):
                invoke_callable(definition.callable, instance)

    def _applies(self, endpoint_name: str, definition: FilterDefinition, instance: Any) -> bool:
        if should_invoke(endpoint_name, definition, instance):
            return True
        if self._log_skipped:
            _logger.debug("Filter %s skipped for %s", definition.describe(), endpoint_name)
        return False
