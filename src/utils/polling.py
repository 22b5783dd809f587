"""
Polling Helpers

Bounded waiting for a condition to become true.
"""

import time
from typing import Callable


class PollTimeoutError(Exception):
    """Raised when the condition did not hold before the timeout."""

    def __init__(self, timeout: float, attempts: int):
        super().__init__(f"timed out waiting for the condition after {timeout:g}s ({attempts} checks)")
        self.timeout = timeout
        self.attempts = attempts


def poll_until(condition: Callable[[], bool], interval: float, timeout: float,
               clock: Callable[[], float] = time.monotonic,
               sleep: Callable[[float], None] = time.sleep) -> int:
    """
    Check ``condition`` every ``interval`` seconds until it returns True.

    The first check happens one interval after the call. A check made at the
    timeout still counts, so with interval=1 and timeout=60 the condition is
    evaluated at most 60 times. Exceptions raised by the condition propagate.

    Args:
        condition: Callable returning True once the wait is over
        interval: Seconds between checks
        timeout: Maximum seconds to wait
        clock: Monotonic clock
        sleep: Sleep function

    Returns:
        Number of checks made

    Raises:
        PollTimeoutError: If the condition never returned True
    """
    deadline = clock() + timeout
    attempts = 0

    while True:
        sleep(interval)
        attempts += 1
        if condition():
            return attempts
        if clock() >= deadline:
            raise PollTimeoutError(timeout, attempts)
