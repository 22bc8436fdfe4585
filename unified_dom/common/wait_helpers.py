# ================================================================================
# Wait Helpers Module
# ================================================================================
#
# Polling utilities shared by the substrate adapters and the assertion core.
#
# Key Features:
#   - Bounded poll-until-match for asynchronously settling reads
#   - Exponential backoff between attempts
#   - Single-shot evaluation when the timeout is zero (in-process reads)
#
# Usage:
#   matched, actual = await poll_until(read_fn, lambda v: v == "x", timeout=5.0)
#
# ================================================================================

import asyncio
import random
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Tuple

from loguru import logger


@dataclass
class WaitConfig:
    """
    Configuration for poll operations.

    Attributes:
        initial_interval: Initial wait interval in seconds
        multiplier: Multiplier for exponential backoff
        max_interval: Maximum interval between attempts
        jitter: Add random jitter to spread concurrent pollers
    """
    initial_interval: float = 0.05
    multiplier: float = 1.5
    max_interval: float = 0.5
    jitter: bool = False


def calculate_next_interval(current_interval: float, config: WaitConfig) -> float:
    """
    Calculate the next wait interval with exponential backoff and jitter.

    Args:
        current_interval: Current interval in seconds
        config: Wait configuration

    Returns:
        Next interval in seconds
    """
    next_interval = min(current_interval * config.multiplier, config.max_interval)

    if config.jitter:
        # Add +/- 25% jitter
        next_interval = next_interval * (0.75 + (random.random() * 0.5))

    return next_interval


async def poll_until(
    read: Callable[[], Awaitable[Any]],
    check: Callable[[Any], bool],
    timeout: float = 0.0,
    config: Optional[WaitConfig] = None,
    description: str = "condition",
) -> Tuple[bool, Any]:
    """
    Read a value until ``check`` accepts it or ``timeout`` seconds elapse.

    With ``timeout <= 0`` the value is read exactly once and any read error
    propagates. Otherwise read errors are retried; if no read ever succeeded
    the last error is re-raised when time runs out.

    Args:
        read: Coroutine function producing the current value
        check: Predicate applied to each value read
        timeout: Total budget in seconds
        config: Optional backoff configuration
        description: Human-readable description for logging

    Returns:
        (matched, last value read)
    """
    if timeout <= 0:
        value = await read()
        return check(value), value

    config = config or WaitConfig()
    deadline = time.monotonic() + timeout
    interval = config.initial_interval
    attempt = 0
    have_value = False
    last_value: Any = None
    last_error: Optional[Exception] = None

    while True:
        attempt += 1
        try:
            last_value = await read()
            have_value = True
            if check(last_value):
                if attempt > 1:
                    logger.debug(f"{description} satisfied after {attempt} attempts")
                return True, last_value
        except Exception as e:
            last_error = e
            logger.debug(f"Attempt {attempt} reading {description} failed: {e}")

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            break

        await asyncio.sleep(min(interval, remaining))
        interval = calculate_next_interval(interval, config)

    if not have_value and last_error is not None:
        raise last_error

    logger.debug(f"Gave up on {description} after {attempt} attempts ({timeout}s)")
    return False, last_value


__all__ = [
    "WaitConfig",
    "calculate_next_interval",
    "poll_until",
]
