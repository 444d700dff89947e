"""Tests for tagpub.release.waiter module."""

from __future__ import annotations

import pytest

from tagpub.core.config import ConsistencyConfig
from tagpub.output.console import MockConsole
from tagpub.registry.http import HttpError, MockHttpClient
from tagpub.registry.index import RegistryIndex
from tagpub.registry.publisher import PackageRef
from tagpub.release.model import PublishStep
from tagpub.release.waiter import FixedDelayWaiter, PollingWaiter, waiter_from_config

API = "https://crates.io/api/v1"
URL = f"{API}/crates/cairo-felt/0.8.2"
VISIBLE = {"version": {"num": "0.8.2"}}
NOT_FOUND = HttpError(URL, 404, "Not Found")

FELT = PublishStep(
    package=PackageRef(name="cairo-felt", manifest_path="felt/Cargo.toml"),
    include_all_variants=True,
    wait_after_seconds=120.0,
    version="0.8.2",
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def monotonic(self) -> float:
        return self.now


def _polling(http: MockHttpClient, clock: FakeClock, *, interval: float = 10.0, max_wait: float = 60.0):
    return PollingWaiter(
        index=RegistryIndex(api_url=API, http=http),
        console=MockConsole(),
        poll_interval=interval,
        max_wait=max_wait,
        sleep=clock.sleep,
        monotonic=clock.monotonic,
    )


class TestFixedDelayWaiter:
    def test_sleeps_exactly_duration_once(self) -> None:
        clock = FakeClock()
        console = MockConsole()
        FixedDelayWaiter(console=console, sleep=clock.sleep).wait(FELT, 120.0)
        assert clock.sleeps == [120.0]
        assert console.find("cairo-felt")

    def test_does_not_consult_registry(self) -> None:
        # The fixed waiter has no index at all; a visible producer changes nothing.
        clock = FakeClock()
        FixedDelayWaiter(console=MockConsole(), sleep=clock.sleep).wait(FELT, 3.0)
        assert clock.now == 3.0

    def test_zero_duration_does_not_sleep(self) -> None:
        clock = FakeClock()
        FixedDelayWaiter(console=MockConsole(), sleep=clock.sleep).wait(FELT, 0.0)
        assert clock.sleeps == []


class TestPollingWaiter:
    def test_minimum_delay_before_first_poll(self) -> None:
        clock = FakeClock()
        http = MockHttpClient()
        http.set_json(URL, VISIBLE)
        _polling(http, clock).wait(FELT, 30.0)
        assert clock.sleeps == [30.0]
        assert http.calls == [URL]

    def test_polls_until_visible(self) -> None:
        clock = FakeClock()
        http = MockHttpClient()
        http.set_json(URL, [NOT_FOUND, NOT_FOUND, VISIBLE])
        _polling(http, clock).wait(FELT, 30.0)
        assert clock.sleeps == [30.0, 10.0, 10.0]
        assert len(http.calls) == 3

    def test_lookup_errors_count_as_not_visible(self) -> None:
        clock = FakeClock()
        http = MockHttpClient()
        http.set_json(URL, [HttpError(URL, 503, "Service Unavailable"), VISIBLE])
        _polling(http, clock).wait(FELT, 0.0)
        assert len(http.calls) == 2

    def test_proceeds_after_max_wait(self) -> None:
        clock = FakeClock()
        http = MockHttpClient()
        waiter = _polling(http, clock, interval=20.0, max_wait=60.0)
        waiter.wait(FELT, 30.0)
        assert clock.now == 60.0
        assert clock.sleeps == [30.0, 20.0, 10.0]

    def test_never_shorter_than_minimum(self) -> None:
        clock = FakeClock()
        http = MockHttpClient()
        _polling(http, clock, max_wait=5.0).wait(FELT, 30.0)
        assert clock.now >= 30.0

    def test_unknown_version_falls_back_to_delay(self) -> None:
        clock = FakeClock()
        http = MockHttpClient()
        step = PublishStep(package=PackageRef(name="cairo-felt"), include_all_variants=True)
        _polling(http, clock).wait(step, 30.0)
        assert clock.sleeps == [30.0]
        assert http.calls == []

    def test_invalid_interval(self) -> None:
        with pytest.raises(ValueError):
            _polling(MockHttpClient(), FakeClock(), interval=0.0)


class TestWaiterFromConfig:
    def test_fixed_is_default(self) -> None:
        index = RegistryIndex(api_url=API, http=MockHttpClient())
        waiter = waiter_from_config(ConsistencyConfig(), console=MockConsole(), index=index)
        assert isinstance(waiter, FixedDelayWaiter)

    def test_poll_is_flagged(self) -> None:
        console = MockConsole()
        index = RegistryIndex(api_url=API, http=MockHttpClient())
        waiter = waiter_from_config(ConsistencyConfig(mode="poll"), console=console, index=index)
        assert isinstance(waiter, PollingWaiter)
        assert console.find("poll")
