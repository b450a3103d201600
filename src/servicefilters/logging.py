"""CallLogger: an around filter that logs endpoint calls."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

__all__ = ["CallLogger"]


class CallLogger:
    """Around filter logging endpoint start, completion (with duration) and errors.

    Usage:
        Users.around_filter(CallLogger(), except_="ping")

    Errors are logged and re-raised. Per-call state lives on the stack, so a
    single CallLogger can be shared by concurrent requests.
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        level: int = logging.INFO,
        log_errors: bool = True,
    ) -> None:
        self._logger = logger or logging.getLogger("servicefilters.calls")
        self._level = level
        self._log_errors = log_errors

    def __call__(self, service: Any, proceed: Callable[[], Any]) -> Any:
        service_name = type(service).__name__
        endpoint = getattr(service, "current_endpoint", None) or "<unknown>"
        start = time.time()
        self._logger.log(
            self._level,
            f"START {service_name}.{endpoint}",
            extra={"service": service_name, "endpoint": endpoint},
        )
        try:
            result = proceed()
        except Exception as error:
            if self._log_errors:
                self._logger.error(
                    f"ERROR {service_name}.{endpoint}: {error}",
                    extra={"service": service_name, "endpoint": endpoint, "error": str(error)},
                    exc_info=True,
                )
            raise
        duration_ms = (time.time() - start) * 1000
        self._logger.log(
            self._level,
            f"END {service_name}.{endpoint} ({duration_ms:.2f}ms)",
            extra={"service": service_name, "endpoint": endpoint, "duration_ms": duration_ms},
        )
        return result
