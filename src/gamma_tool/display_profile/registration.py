from __future__ import annotations

import time
from collections.abc import Callable
from typing import TypeVar

from .config import POLL_INTERVAL_S

T = TypeVar("T")


def wait_for(
    detect: Callable[[], T | None],
    *,
    timeout_s: float,
    interval_s: float = POLL_INTERVAL_S,
    pump: Callable[[], None] | None = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> T | None:
    """Poll `detect` until it returns a value or `timeout_s` elapses.

    `detect` always runs at least once. Between attempts `pump` hands control to the
    service's event loop so its own file detection can run, then `sleep` waits
    `interval_s`. Returns None on timeout.
    """
    deadline = clock() + timeout_s
    while True:
        found = detect()
        if found is not None:
            return found
        if clock() >= deadline:
            return None
        if pump is not None:
            pump()
        sleep(interval_s)
