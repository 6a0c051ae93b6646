"""Block until a key becomes visible in the store, bounded by a timeout."""

from __future__ import annotations

import logging
import threading
import time

from mhook.core.errors import ObjectNotFound, WaitCancelled, WaitTimeout
from mhook.core.store import ObjectStore, SupportsWaitExists

logger = logging.getLogger(__name__)

INITIAL_DELAY = 0.1
MAX_DELAY = 5.0
BACKOFF_FACTOR = 2.0


def wait_for(
    store: ObjectStore,
    key: str,
    timeout: float,
    *,
    cancel: threading.Event | None = None,
    initial_delay: float = INITIAL_DELAY,
    max_delay: float = MAX_DELAY,
) -> None:
    """Return once ``key`` exists; raise ``WaitTimeout`` after ``timeout`` seconds.

    The store's own waiter is used when it has one and no ``cancel`` event
    is given.  Otherwise ``head`` is polled with exponential backoff, never
    sleeping past the deadline.  Setting ``cancel`` raises ``WaitCancelled``
    at the next poll; ``KeyboardInterrupt`` is never intercepted.
    """
    if timeout <= 0:
        raise ValueError("timeout must be positive")

    if cancel is None and isinstance(store, SupportsWaitExists):
        store.wait_exists(key, timeout)
        logger.info("%s exists", key)
        return

    deadline = time.monotonic() + timeout
    delay = initial_delay
    attempt = 0
    while True:
        if cancel is not None and cancel.is_set():
            raise WaitCancelled(f"Wait for {key} cancelled", key=key)
        attempt += 1
        try:
            store.head(key)
        except ObjectNotFound:
            pass
        else:
            logger.info("%s exists (after %d attempt(s))", key, attempt)
            return

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise WaitTimeout(
                f"Timed out after {timeout:g}s waiting for {key}", key=key
            )
        sleep_for = min(delay, remaining)
        logger.debug("%s not found yet; retrying in %.2fs", key, sleep_for)
        if cancel is not None:
            cancel.wait(sleep_for)
        else:
            time.sleep(sleep_for)
        delay = min(delay * BACKOFF_FACTOR, max_delay)
