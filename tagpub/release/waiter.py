"""Bridging the registry's index delay between dependent publishes.

A consumer's publish resolves its dependencies through the registry
index. Right after the producer is published the index may not list it
yet, and the consumer's publish then fails even though the producer
succeeded.

``FixedDelayWaiter`` is the historical workaround: sleep a fixed time and
hope the index caught up. ``PollingWaiter`` is an opt-in strengthening:
after the same minimum sleep it asks the registry API until the producer
version is visible, and gives up waiting (but still proceeds) after a
bound. Neither can fail and neither can be interrupted from inside.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Protocol

from tagpub.core.config import ConsistencyConfig
from tagpub.core.result import Err
from tagpub.output.console import ConsoleProtocol, Style
from tagpub.registry.index import RegistryIndex
from tagpub.release.model import PublishStep

Sleep = Callable[[float], None]
Clock = Callable[[], float]


class ConsistencyWaiter(Protocol):
    def wait(self, producer: PublishStep, duration: float) -> None:
        """Block for at least ``duration`` seconds after ``producer`` was published."""
        ...


class FixedDelayWaiter:
    def __init__(self, *, console: ConsoleProtocol, sleep: Sleep = time.sleep) -> None:
        self._console = console
        self._sleep = sleep

    def wait(self, producer: PublishStep, duration: float) -> None:
        self._console.print(
            f"waiting {duration:g}s for the registry index to pick up {producer.id}",
            Style.DIM,
        )
        if duration > 0:
            self._sleep(duration)


class PollingWaiter:
    """Minimum delay, then poll the registry until the producer is visible.

    Lookup errors count as "not visible yet". When ``max_wait`` seconds have
    elapsed since the wait started, it returns without confirmation.
    """

    def __init__(
        self,
        *,
        index: RegistryIndex,
        console: ConsoleProtocol,
        poll_interval: float,
        max_wait: float,
        sleep: Sleep = time.sleep,
        monotonic: Clock = time.monotonic,
    ) -> None:
        if poll_interval <= 0:
            raise ValueError("poll_interval must be > 0")
        self._index = index
        self._console = console
        self._poll_interval = poll_interval
        self._max_wait = max_wait
        self._sleep = sleep
        self._monotonic = monotonic

    def wait(self, producer: PublishStep, duration: float) -> None:
        start = self._monotonic()
        self._console.print(
            f"waiting {duration:g}s, then polling the registry for {producer.id}",
            Style.DIM,
        )
        if duration > 0:
            self._sleep(duration)

        if producer.version is None:
            self._console.warning(f"{producer.id}: version unknown, skipping index poll")
            return

        deadline = max(self._max_wait, duration)
        while True:
            visible = self._index.is_visible(producer.id, producer.version)
            if isinstance(visible, Err):
                self._console.print(f"index lookup failed: {visible.error}", Style.DIM)
            elif visible.value:
                self._console.print(f"{producer.id} {producer.version} is visible", Style.DIM)
                return

            remaining = deadline - (self._monotonic() - start)
            if remaining <= 0:
                self._console.warning(
                    f"{producer.id} {producer.version} not visible after {deadline:g}s, proceeding"
                )
                return
            self._sleep(min(self._poll_interval, remaining))


def waiter_from_config(
    consistency: ConsistencyConfig,
    *,
    console: ConsoleProtocol,
    index: RegistryIndex,
    sleep: Sleep = time.sleep,
) -> ConsistencyWaiter:
    if consistency.mode == "poll":
        console.warning(
            "consistency mode 'poll': after the minimum delay, waits poll the registry index (bounded)"
        )
        return PollingWaiter(
            index=index,
            console=console,
            poll_interval=consistency.poll_interval_seconds,
            max_wait=consistency.max_wait_seconds,
            sleep=sleep,
        )
    return FixedDelayWaiter(console=console, sleep=sleep)
