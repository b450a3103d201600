"""End-to-end filter flows through a service class, the way a dispatcher drives them."""

from __future__ import annotations

import time
from typing import Any, Callable

import pytest

from servicefilters import InvalidFilterError, RunState, ServiceFilters


class WorkService(ServiceFilters):
    """Service with an auth check, a timing wrapper and a call log."""

    def __init__(self, authorized: bool = True) -> None:
        self.authorized = authorized
        self.events: list[str] = []
        self.elapsed: float | None = None

    def check_auth(self) -> bool:
        self.events.append("check_auth")
        return self.authorized

    def time_it(self, proceed: Callable[[], Any]) -> Any:
        self.events.append("time_it-pre")
        start = time.perf_counter()
        result = proceed()
        self.elapsed = time.perf_counter() - start
        self.events.append("time_it-post")
        return result

    def log_call(self) -> None:
        self.events.append("log_call")

    def do_work(self) -> dict[str, str]:
        self.events.append("do_work")
        return {"status": "ok"}


WorkService.before_filter("check_auth")
WorkService.around_filter("time_it")
WorkService.after_filter("log_call")


class TestEndToEnd:
    """Dispatcher-level scenarios."""

    def test_authorized_call_runs_everything_in_order(self) -> None:
        svc = WorkService(authorized=True)
        result = svc.run_filters("do_work")
        assert svc.events == ["check_auth", "time_it-pre", "do_work", "time_it-post", "log_call"]
        assert result.state is RunState.DONE
        assert result.value == {"status": "ok"}
        assert svc.elapsed is not None

    def test_unauthorized_call_is_stopped(self) -> None:
        svc = WorkService(authorized=False)
        result = svc.run_filters("do_work")
        assert svc.events == ["check_auth"]
        assert result.state is RunState.STOPPED
        assert result.stopped_by is not None
        assert result.stopped_by.callable.name == "check_auth"
        assert svc.elapsed is None

    def test_concurrent_instances_do_not_interfere(self) -> None:
        from concurrent.futures import ThreadPoolExecutor

        services = [WorkService(authorized=i % 2 == 0) for i in range(20)]
        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(lambda s: s.run_filters("do_work"), services))

        for i, (svc, result) in enumerate(zip(services, results)):
            if i % 2 == 0:
                assert result.invoked
                assert svc.events[-1] == "log_call"
            else:
                assert svc.events == ["check_auth"]


class TestAroundNesting:
    """Around filters nest outer-to-inner in declaration order."""

    def _service(self, skip: str | None = None) -> Any:
        class Nested(ServiceFilters):
            def __init__(self) -> None:
                self.events: list[str] = []

            def _wrap(self, name: str, proceed: Callable[[], Any]) -> Any:
                self.events.append(f"{name}-pre")
                result = proceed() if name != skip else None
                self.events.append(f"{name}-post")
                return result

            def a1(self, proceed: Callable[[], Any]) -> Any:
                return self._wrap("a1", proceed)

            def a2(self, proceed: Callable[[], Any]) -> Any:
                return self._wrap("a2", proceed)

            def a3(self, proceed: Callable[[], Any]) -> Any:
                return self._wrap("a3", proceed)

            def endpoint(self) -> str:
                self.events.append("endpoint")
                return "value"

        Nested.around_filter("a1", "a2", "a3")
        return Nested()

    def test_full_nesting(self) -> None:
        svc = self._service()
        assert svc.run_filters("endpoint").value == "value"
        assert svc.events == ["a1-pre", "a2-pre", "a3-pre", "endpoint", "a3-post", "a2-post", "a1-post"]

    def test_middle_filter_not_proceeding(self) -> None:
        svc = self._service(skip="a2")
        result = svc.run_filters("endpoint")
        assert svc.events == ["a1-pre", "a2-pre", "a2-post", "a1-post"]
        assert result.value is None
        assert result.state is RunState.DONE


class TestConditionalFilters:
    """only / except / if / unless applied through the service class."""

    def _service_class(self) -> Any:
        class Conditional(ServiceFilters):
            def __init__(self, maintenance: bool = False, admin: bool = False) -> None:
                self.maintenance = maintenance
                self.admin = admin
                self.events: list[str] = []

            def only_x(self) -> None:
                self.events.append("only_x")

            def except_x(self) -> None:
                self.events.append("except_x")

            def if_admin(self) -> None:
                self.events.append("if_admin")

            def unless_maintenance(self) -> None:
                self.events.append("unless_maintenance")

            def is_admin(self) -> bool:
                return self.admin

            def in_maintenance(self) -> bool:
                return self.maintenance

            def x(self) -> None:
                self.events.append("x")

            def y(self) -> None:
                self.events.append("y")

        Conditional.before_filter("only_x", only="x")
        Conditional.before_filter("except_x", except_="x")
        Conditional.before_filter("if_admin", if_="is_admin")
        Conditional.before_filter("unless_maintenance", unless="in_maintenance")
        return Conditional

    def test_endpoint_x(self) -> None:
        svc = self._service_class()()
        svc.run_filters("x")
        assert svc.events == ["only_x", "unless_maintenance", "x"]

    def test_endpoint_y(self) -> None:
        svc = self._service_class()(admin=True, maintenance=True)
        svc.run_filters("y")
        assert svc.events == ["except_x", "if_admin", "y"]


class TestLazyValidation:
    """Broken filter references surface only when an affected endpoint runs."""

    def test_broken_reference_surfaces_on_affected_endpoint(self) -> None:
        class Broken(ServiceFilters):
            def safe(self) -> str:
                return "safe"

            def risky(self) -> str:
                return "risky"

        Broken.before_filter("no_such_method", only="risky")

        assert Broken().run_filters("safe").value == "safe"
        with pytest.raises(InvalidFilterError) as exc_info:
            Broken().run_filters("risky")
        assert exc_info.value.reference == "no_such_method"
