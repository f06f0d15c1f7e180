"""
Waiting

Description: Bounded poll-with-backoff primitive shared by every browser wait
Author: Eric Hiss (GitHub: EricRollei)
Contact: eric@historic.camera, eric@rollei.us
License: Dual License (Non-Commercial and Commercial Use)
Copyright (c) 2025 Eric Hiss. All rights reserved.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable

from ..errors import WaitTimeoutError

logger = logging.getLogger(__name__)


async def wait_until(
    predicate: Callable[[], Awaitable[Any]],
    timeout_ms: float,
    description: str = "condition",
    initial_delay_ms: float = 100,
    max_delay_ms: float = 2000,
    backoff: float = 2.0,
) -> Any:
    """
    Poll an async predicate until it returns something truthy.

    The predicate is always evaluated at least once. Between attempts the
    delay grows by ``backoff`` up to ``max_delay_ms`` and never sleeps past
    the deadline. An exception from the predicate counts as a failed attempt,
    since page queries routinely fail while a navigation is in flight.

    Args:
        predicate: Zero-argument coroutine function
        timeout_ms: Total time budget in milliseconds
        description: Used in log and error messages
        initial_delay_ms: First pause between attempts
        max_delay_ms: Upper bound for a single pause
        backoff: Multiplier applied to the pause after each attempt

    Returns:
        The first truthy value returned by the predicate

    Raises:
        WaitTimeoutError: If the budget runs out first
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + max(timeout_ms, 0) / 1000.0
    delay = max(initial_delay_ms, 0) / 1000.0
    attempts = 0

    while True:
        attempts += 1
        try:
            result = await predicate()
        except Exception as e:
            logger.debug(f"Attempt {attempts} while waiting for {description} failed: {e}")
            result = None

        if result:
            logger.debug(f"{description} satisfied after {attempts} attempt(s)")
            return result

        remaining = deadline - loop.time()
        if remaining <= 0:
            raise WaitTimeoutError(
                f"Timed out after {timeout_ms:.0f}ms waiting for {description}", timeout_ms
            )
        await asyncio.sleep(min(delay, remaining))
        delay = min(delay * backoff, max_delay_ms / 1000.0) if delay else min(0.05, max_delay_ms / 1000.0)
