"""Shared test fixtures for the filter test suite."""

from __future__ import annotations

from typing import Any

import pytest

from servicefilters import ServiceFilters


class RecordingService(ServiceFilters):
    """Service whose endpoints append to a call log."""

    def __init__(self, log: list[str] | None = None) -> None:
        self.log: list[str] = log if log is not None else []

    def do_work(self) -> str:
        self.log.append("do_work")
        return "worked"

    def other(self) -> str:
        self.log.append("other")
        return "other"


@pytest.fixture
def service_class() -> Any:
    """A fresh RecordingService subclass with an empty filter registry."""

    class Service(RecordingService, inherit_filters=False):
        pass

    return Service
