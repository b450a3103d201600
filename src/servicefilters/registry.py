"""Per-service-class filter registry."""

from __future__ import annotations

import logging
import threading
from collections.abc import Hashable
from typing import Any, Iterable

from servicefilters.types import (
    FilterDefinition,
    FilterOptions,
    FilterType,
    as_callable_ref,
)

__all__ = ["FilterRegistry"]

_logger = logging.getLogger(__name__)


class FilterRegistry:
    """Ordered, deduplicated storage of filter definitions keyed by filter type.

    Registration happens at class-definition time and is serialized by a
    lock. Readers get immutable tuple snapshots, so concurrent requests can
    read without locking once configuration is done.
    """

    def __init__(self, owner: str | None = None) -> None:
        self._owner = owner
        self._filters: dict[FilterType, tuple[FilterDefinition, ...]] = {}
        self._defined: dict[FilterType, set[Hashable]] = {}
        self._lock = threading.Lock()

    @property
    def owner(self) -> str | None:
        """Name of the service class this registry belongs to, if any."""
        return self._owner

    def register(
        self,
        type: FilterType | str,
        callables: Iterable[Any],
        options: FilterOptions | dict[str, Any] | None = None,
    ) -> int:
        """Append a definition for each callable not yet registered for *type*.

        Duplicates are skipped silently; the options of the first
        registration are kept. Returns the number of definitions added.
        """
        filter_type = FilterType.coerce(type)
        opts = FilterOptions.build(options)
        added = 0
        with self._lock:
            defined = self._defined.setdefault(filter_type, set())
            current = list(self._filters.get(filter_type, ()))
            for value in callables:
                ref = as_callable_ref(value)
                if ref.key in defined:
                    _logger.debug(
                        "Skipping duplicate %s filter %s on %s",
                        filter_type.value,
                        ref.describe(),
                        self._owner,
                    )
                    continue
                current.append(FilterDefinition(type=filter_type, callable=ref, options=opts))
                defined.add(ref.key)
                added += 1
            self._filters[filter_type] = tuple(current)
        return added

    def filters(self, type: FilterType | str) -> tuple[FilterDefinition, ...]:
        """Return the definitions registered for *type* in declaration order."""
        return self._filters.get(FilterType.coerce(type), ())

    def copy(self, owner: str | None = None) -> FilterRegistry:
        """Return an independent registry holding the same definitions."""
        clone = FilterRegistry(owner=owner if owner is not None else self._owner)
        with self._lock:
            clone._filters = dict(self._filters)
            clone._defined = {t: set(keys) for t, keys in self._defined.items()}
        return clone

    def __contains__(self, item: tuple[FilterType | str, Any]) -> bool:
        filter_type, value = item
        return as_callable_ref(value).key in self._defined.get(FilterType.coerce(filter_type), set())

    def __len__(self) -> int:
        return sum(len(defs) for defs in self._filters.values())

    def __repr__(self) -> str:
        counts = ", ".join(f"{t.value}={len(self.filters(t))}" for t in FilterType)
        return f"FilterRegistry(owner={self._owner!r}, {counts})"
