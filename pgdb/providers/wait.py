"""Generic wait/polling utilities for providers.

Fixed-interval polling against a deadline. No backoff: provider
create-to-ready latency is short and bounded.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

from pgdb.core.exceptions import ProvisioningError, ReadinessTimeoutError


T = TypeVar("T")


async def wait_for_ready(
    poll_fn: Callable[[], Awaitable[T | None]],
    ready_check: Callable[[T], bool],
    *,
    terminal_check: Callable[[T], bool] | None = None,
    timeout: float = 180.0,
    interval: float = 2.0,
    description: str = "resource",
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
) -> T:
    """Wait until poll_fn returns something that passes ready_check.

    Args:
        poll_fn: Async function that polls for the resource state.
        ready_check: Function that returns True when resource is ready.
        terminal_check: Optional function that returns True if resource reached
            a terminal failure state.
        timeout: Deadline in seconds, measured from the first poll.
        interval: Time between polls in seconds.
        description: Description for error messages.
        clock: Monotonic time source.
        sleep: Awaitable sleep used between polls.

    Returns:
        The ready resource.

    Raises:
        ReadinessTimeoutError: If the deadline passes first.
        ProvisioningError: If resource reaches terminal state.
    """
    deadline = clock() + timeout
    attempts = 0

    while clock() < deadline:
        result = await poll_fn()
        attempts += 1

        if result is not None:
            if ready_check(result):
                return result

            if terminal_check is not None and terminal_check(result):
                raise ProvisioningError(f"{description} reached terminal state: {result}")

        await sleep(interval)

    raise ReadinessTimeoutError(description, timeout, attempts)
