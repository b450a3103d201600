"""Filter data types: filter kinds, callable references, options and definitions."""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Union

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from servicefilters.errors import FilterOptionsError, FilterTypeError

__all__ = [
    "FilterType",
    "FunctionRef",
    "MethodRef",
    "CallableRef",
    "as_callable_ref",
    "FilterOptions",
    "FilterDefinition",
]


class FilterType(str, Enum):
    """The phase a filter runs in relative to the endpoint call."""

    BEFORE = "before"
    AFTER = "after"
    AROUND = "around"

    @classmethod
    def coerce(cls, value: FilterType | str) -> FilterType:
        """Return the member for *value*, raising FilterTypeError for unknown types."""
        try:
            return cls(value)
        except ValueError as e:
            raise FilterTypeError(value, cause=e) from e


@dataclass(frozen=True, eq=False)
class FunctionRef:
    """A directly invocable filter unit (function, lambda, bound method or callable object).

    Equality follows the target's own equality when it can be hashed, so two
    accesses of the same bound method compare equal. Targets that cannot be
    hashed (including frozen dataclasses holding lists) fall back to object
    identity.
    """

    target: Any

    @property
    def key(self) -> Hashable:
        try:
            hash(self.target)
        except TypeError:
            return ("function", id(self.target))
        return ("function", self.target)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FunctionRef):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def describe(self) -> str:
        return getattr(self.target, "__qualname__", None) or repr(self.target)


@dataclass(frozen=True)
class MethodRef:
    """A symbolic instance-method name, resolved on the receiving service instance."""

    name: str

    @property
    def key(self) -> Hashable:
        return ("method", self.name)

    def describe(self) -> str:
        return self.name


CallableRef = Union[FunctionRef, MethodRef]


def as_callable_ref(value: Any) -> CallableRef:
    """Convert a declaration argument into a CallableRef.

    Strings name instance methods; everything else is treated as directly
    invocable. Nothing is checked here: a non-callable value only fails when
    the filter is invoked.
    """
    if isinstance(value, (FunctionRef, MethodRef)):
        return value
    if isinstance(value, str):
        return MethodRef(value)
    return FunctionRef(value)


class FilterOptions(BaseModel):
    """Conditions restricting when a filter applies.

    ``except`` and ``if`` are Python keywords, so the attributes are spelled
    ``except_`` and ``if_``; both spellings are accepted on input.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    only: frozenset[str] = frozenset()
    except_: frozenset[str] = Field(default=frozenset(), alias="except")
    # CallableRef or None, converted by _coerce_condition.
    if_: Any = Field(default=None, alias="if")
    unless: Any = None

    @field_validator("only", "except_", mode="before")
    @classmethod
    def _coerce_endpoint_names(cls, value: Any) -> Any:
        if value is None:
            return frozenset()
        if isinstance(value, str):
            return frozenset([value])
        return value

    @field_validator("if_", "unless", mode="before")
    @classmethod
    def _coerce_condition(cls, value: Any) -> Any:
        if value is None:
            return None
        return as_callable_ref(value)

    @classmethod
    def build(cls, options: FilterOptions | Mapping[str, Any] | None = None) -> FilterOptions:
        """Validate a raw options mapping, raising FilterOptionsError on bad shape."""
        if options is None:
            return cls()
        if isinstance(options, FilterOptions):
            return options
        try:
            return cls.model_validate(dict(options))
        except pydantic.ValidationError as e:
            errors = [
                {
                    "field": ".".join(str(loc) for loc in err["loc"]),
                    "code": err["type"],
                    "message": err["msg"],
                }
                for err in e.errors()
            ]
            raise FilterOptionsError("Invalid filter options", errors=errors, cause=e) from e

    @property
    def is_unconditional(self) -> bool:
        return not (self.only or self.except_ or self.if_ is not None or self.unless is not None)


@dataclass(frozen=True)
class FilterDefinition:
    """A single registered filter."""

    type: FilterType
    callable: CallableRef
    options: FilterOptions = FilterOptions()

    def describe(self) -> str:
        return f"{self.type.value}:{self.callable.describe()}"
