"""servicefilters - Declarative before/after/around filters for RPC service endpoints."""

from __future__ import annotations

# Core
from servicefilters.service import ServiceFilters
from servicefilters.registry import FilterRegistry
from servicefilters.runner import FilterRunner, RunResult, RunState

# Filter types
from servicefilters.types import (
    CallableRef,
    FilterDefinition,
    FilterOptions,
    FilterType,
    FunctionRef,
    MethodRef,
    as_callable_ref,
)

# Building blocks
from servicefilters.chain import Continuation, build_around_chain
from servicefilters.conditions import should_invoke
from servicefilters.resolver import invoke_callable

# Decorators
from servicefilters.decorators import after, around, before

# Config
from servicefilters.config import Config

# Errors
from servicefilters.errors import (
    ConfigError,
    ConfigNotFoundError,
    ErrorCodes,
    FilterError,
    FilterOptionsError,
    FilterTypeError,
    InvalidFilterError,
)

# Logging
from servicefilters.logging import CallLogger

__version__ = "0.1.0"

__all__ = [
    # Core
    "ServiceFilters",
    "FilterRegistry",
    "FilterRunner",
    "RunResult",
    "RunState",
    # Filter types
    "FilterType",
    "FilterOptions",
    "FilterDefinition",
    "CallableRef",
    "FunctionRef",
    "MethodRef",
    "as_callable_ref",
    # Building blocks
    "Continuation",
    "build_around_chain",
    "should_invoke",
    "invoke_callable",
    # Decorators
    "before",
    "after",
    "around",
    # Config
    "Config",
    # Errors
    "ErrorCodes",
    "FilterError",
    "InvalidFilterError",
    "FilterOptionsError",
    "FilterTypeError",
    "ConfigError",
    "ConfigNotFoundError",
    # Logging
    "CallLogger",
]
