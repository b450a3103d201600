"""Error hierarchy for servicefilters."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

__all__ = [
    "FilterError",
    "InvalidFilterError",
    "FilterOptionsError",
    "FilterTypeError",
    "ConfigNotFoundError",
    "ConfigError",
    "ErrorCodes",
]


class FilterError(Exception):
    """Base error for all servicefilters errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details: dict[str, Any] = details or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc).isoformat()

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class InvalidFilterError(FilterError):
    """Raised when a filter reference cannot be resolved to something callable.

    Resolution is lazy: this is raised when the filter (or its if/unless
    condition) is about to be invoked, never when it is declared. A typo in a
    declaration therefore surfaces only once an endpoint that the filter
    applies to is actually run.
    """

    def __init__(self, reference: Any, owner: str | None = None, **kwargs: Any) -> None:
        if owner is not None:
            message = f"Object {reference!r} is not callable on {owner}"
        else:
            message = f"Object {reference!r} is not callable"
        super().__init__(
            code="INVALID_FILTER",
            message=message,
            details={"reference": reference, "owner": owner},
            **kwargs,
        )

    @property
    def reference(self) -> Any:
        """The unresolved filter reference."""
        return self.details["reference"]


class FilterOptionsError(FilterError):
    """Raised when a filter declaration carries a malformed options map."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None, **kwargs: Any) -> None:
        super().__init__(
            code="FILTER_OPTIONS_INVALID",
            message=message,
            details={"errors": errors or []},
            **kwargs,
        )


class FilterTypeError(FilterError):
    """Raised when a filter is declared or looked up with an unknown filter type."""

    def __init__(self, filter_type: Any, **kwargs: Any) -> None:
        super().__init__(
            code="FILTER_TYPE_INVALID",
            message=f"Unknown filter type: {filter_type!r}",
            details={"filter_type": filter_type},
            **kwargs,
        )


class ConfigNotFoundError(FilterError):
    """Raised when a configuration file cannot be found."""

    def __init__(self, config_path: str, **kwargs: Any) -> None:
        super().__init__(
            code="CONFIG_NOT_FOUND",
            message=f"Configuration file not found: {config_path}",
            details={"config_path": config_path},
            **kwargs,
        )


class ConfigError(FilterError):
    """Raised when configuration is invalid."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(code="CONFIG_INVALID", message=message, **kwargs)


class ErrorCodes:
    """All servicefilters error codes as constants.

    Example:
        if error.code == ErrorCodes.INVALID_FILTER:
            respond_with_dispatch_failure()
    """

    INVALID_FILTER = "INVALID_FILTER"
    FILTER_OPTIONS_INVALID = "FILTER_OPTIONS_INVALID"
    FILTER_TYPE_INVALID = "FILTER_TYPE_INVALID"
    CONFIG_NOT_FOUND = "CONFIG_NOT_FOUND"
    CONFIG_INVALID = "CONFIG_INVALID"

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("ErrorCodes is immutable")
