"""Long-running operation polling.

The control plane performs slow work (such as creating a backend) as a
long-running operation. This module turns an operation handle into a wait for
its terminal result. It polls with exponential backoff and gives up after a
wall-clock deadline. The deadline does not depend on how many polls were made.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Iterator, Protocol

from hostops.core.backends import OperationHandle, OperationStatus
from hostops.core.errors import OperationFailed, OperationTimeout

logger = logging.getLogger(__name__)

DEFAULT_API_ORIGIN = "https://firebaseapphosting.googleapis.com"
API_VERSION = "v1alpha"

_TIMEOUT_ENV = "HOSTOPS_POLL_TIMEOUT"
_MAX_BACKOFF_ENV = "HOSTOPS_POLL_MAX_BACKOFF"


class OperationsClient(Protocol):
    """Interface for reading long-running operation status."""

    async def get_operation(self, name: str) -> OperationStatus:
        """Return the current status of an operation."""
        ...


@dataclass(frozen=True)
class PollerConfig:
    """
    Polling settings shared by every operation of one API family.

    Attributes:
        api_origin: Origin of the API that owns the operations.
        api_version: API version path segment.
        max_wall_clock_timeout: Seconds before giving up on an operation.
        max_backoff_interval: Upper bound in seconds for the wait between polls.
        base_interval: Wait in seconds after the first unsuccessful poll.
        growth_factor: Multiplier applied to the wait after each poll.
    """

    api_origin: str = DEFAULT_API_ORIGIN
    api_version: str = API_VERSION
    max_wall_clock_timeout: float = 25 * 60
    max_backoff_interval: float = 10.0
    base_interval: float = 0.25
    growth_factor: float = 2.0

    def with_overrides(self) -> PollerConfig:
        """Return a copy with timeout and backoff cap taken from the environment."""
        return replace(
            self,
            max_wall_clock_timeout=_env_seconds(
                _TIMEOUT_ENV, self.max_wall_clock_timeout
            ),
            max_backoff_interval=_env_seconds(
                _MAX_BACKOFF_ENV, self.max_backoff_interval
            ),
        )


APPHOSTING_POLLER_CONFIG = PollerConfig()


def _env_seconds(name: str, default: float) -> float:
    """Return a non-negative float from the environment, or the default."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value >= 0 else default


def backoff_intervals(config: PollerConfig) -> Iterator[float]:
    """Yield the wait between polls: growing geometrically, capped at the max."""
    interval = min(config.base_interval, config.max_backoff_interval)
    while True:
        yield interval
        interval = min(interval * config.growth_factor, config.max_backoff_interval)


async def poll_operation(
    client: OperationsClient,
    config: PollerConfig,
    handle: OperationHandle,
    *,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    clock: Callable[[], float] = time.monotonic,
    on_poll: Callable[[int, OperationStatus], None] | None = None,
) -> dict[str, Any]:
    """
    Wait until a long-running operation is done and return its response.

    The first status check happens immediately. After each check that is not
    done, the poller waits for the next backoff interval. The wait is cut
    short at the deadline, and once the deadline passes no more checks are
    made. The server-side operation is never cancelled.

    Args:
        client: Client used to read the operation status.
        config: Polling settings.
        handle: Operation to wait for.
        sleep: Awaitable delay, injectable for tests.
        clock: Monotonic clock in seconds, injectable for tests.
        on_poll: Optional callback invoked with (attempt, status) after each check.

    Returns:
        The operation's response payload (an empty dict if the server sent none).

    Raises:
        OperationFailed: The operation finished with an error.
        OperationTimeout: The operation did not finish before the deadline.
    """
    deadline = clock() + config.max_wall_clock_timeout
    intervals = backoff_intervals(config)
    attempt = 0

    while True:
        attempt += 1
        status = await client.get_operation(handle.name)
        if on_poll is not None:
            on_poll(attempt, status)

        if status.done:
            if status.error:
                logger.debug("%s: operation %s failed", handle.poller_name, handle.name)
                raise OperationFailed(handle.name, status.error, handle.poller_name)
            logger.debug(
                "%s: operation %s done after %d poll(s)",
                handle.poller_name,
                handle.name,
                attempt,
            )
            return dict(status.response or {})

        remaining = deadline - clock()
        if remaining <= 0:
            raise OperationTimeout(
                handle.name, config.max_wall_clock_timeout, handle.poller_name
            )

        delay = min(next(intervals), remaining)
        logger.debug(
            "%s: not done (poll %d), retrying in %.2fs",
            handle.poller_name,
            attempt,
            delay,
        )
        await sleep(delay)

        if clock() >= deadline:
            raise OperationTimeout(
                handle.name, config.max_wall_clock_timeout, handle.poller_name
            )
