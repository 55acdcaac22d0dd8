"""
Wait engine: poll a probe until it reports success or a deadline passes.

A probe is any zero-argument callable. It succeeds by returning something other
than None/False; that value is handed back to the caller. Exceptions listed in
`ignoring` (stale handles by default) mean "not yet"; every other exception
propagates on the spot.

Two shapes:
- plain poll: probe, sleep `poll_interval`, probe again ... until the deadline
- poll with refresh: probe locally for `window` seconds, then call `refresh()`
  (a full page reload) and start the window over, until the deadline

`try_until` reports the outcome as a WaitOutcome; `poll_until` raises
WaitTimeoutError instead. Time is read through the module-level `clock` and
`sleep` hooks so tests can substitute a fake clock.
"""
# @file purpose: Generic polling primitive with transient-error tolerance.

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional, Tuple, Type

from .errors import TransientObservationError, WaitTimeoutError
from .result import WaitOutcome
from .timeouts import TimeoutCategory, TimeoutPolicy

logger = logging.getLogger(__name__)

Probe = Callable[[], Any]
ErrorKinds = Tuple[Type[BaseException], ...]

DEFAULT_POLL_INTERVAL = 0.1
IGNORED_BY_DEFAULT: ErrorKinds = (TransientObservationError,)

clock: Callable[[], float] = time.monotonic
sleep: Callable[[float], None] = time.sleep


def _is_met(value: Any) -> bool:
    return value is not None and value is not False


def try_until(
    probe: Probe,
    timeout: float,
    *,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    ignoring: ErrorKinds = IGNORED_BY_DEFAULT,
    refresh: Optional[Callable[[], Any]] = None,
    window: float = 0.0,
) -> WaitOutcome:
    """
    Poll `probe` for up to `timeout` seconds and report what happened.

    The probe always runs at least once, and once more after the last sleep
    crosses the deadline. With `refresh` set, `refresh()` runs whenever a
    `window` of local polling ends without success.
    """
    start = clock()
    deadline = start + timeout
    window_end = start + window
    last_error: BaseException | None = None
    attempts = 0

    while True:
        attempts += 1
        try:
            value = probe()
        except ignoring as e:
            logger.debug("transient error on attempt %d: %r", attempts, e)
            last_error = e
            value = None

        now = clock()
        if _is_met(value):
            return WaitOutcome.success(value, elapsed=now - start, timeout=timeout)
        if now >= deadline:
            logger.debug("gave up after %d attempts (%.2fs)", attempts, now - start)
            return WaitOutcome.timed_out(
                elapsed=now - start, timeout=timeout, last_error=last_error
            )

        if refresh is not None and now >= window_end:
            logger.debug("nothing after %.2fs, refreshing the page", window)
            refresh()
            now = clock()
            window_end = now + window

        sleep(max(0.0, min(poll_interval, deadline - now)))


def poll_until(
    probe: Probe,
    timeout: float,
    *,
    message: str,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    ignoring: ErrorKinds = IGNORED_BY_DEFAULT,
    refresh: Optional[Callable[[], Any]] = None,
    window: float = 0.0,
    **context: Any,
) -> Any:
    """
    Like try_until, but return the probe's value or raise WaitTimeoutError.

    Extra keyword arguments (action=, locator=, ...) land on the error.
    """
    outcome = try_until(
        probe,
        timeout,
        poll_interval=poll_interval,
        ignoring=ignoring,
        refresh=refresh,
        window=window,
    )
    if outcome.met:
        return outcome.value
    raise WaitTimeoutError(
        message, timeout=timeout, last_error=outcome.last_error, **context
    ) from outcome.last_error


def poll_with_refresh(
    probe: Probe,
    timeout: float,
    refresh: Callable[[], Any],
    *,
    message: str,
    window: float,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    ignoring: ErrorKinds = IGNORED_BY_DEFAULT,
    **context: Any,
) -> Any:
    """Poll, reloading the page every `window` seconds without success."""
    return poll_until(
        probe,
        timeout,
        message=message,
        poll_interval=poll_interval,
        ignoring=ignoring,
        refresh=refresh,
        window=window,
        **context,
    )


class Waiter:
    """
    The engine bound to one session's TimeoutPolicy.

    Verbs resolve their duration with `seconds()` and then call `until()` or
    `try_until()`; the poll interval comes from the policy.
    """

    def __init__(self, policy: TimeoutPolicy) -> None:
        self.policy = policy

    def seconds(
        self, category: TimeoutCategory, requested: TimeoutCategory = TimeoutCategory.DEFAULT
    ) -> int:
        return self.policy.resolve(category, requested)

    def until(
        self,
        probe: Probe,
        timeout: float,
        *,
        message: str,
        ignoring: ErrorKinds = IGNORED_BY_DEFAULT,
        poll_interval: float | None = None,
        **context: Any,
    ) -> Any:
        return poll_until(
            probe,
            timeout,
            message=message,
            poll_interval=self.policy.poll_interval if poll_interval is None else poll_interval,
            ignoring=ignoring,
            **context,
        )

    def try_until(
        self,
        probe: Probe,
        timeout: float,
        *,
        ignoring: ErrorKinds = IGNORED_BY_DEFAULT,
        poll_interval: float | None = None,
    ) -> WaitOutcome:
        return try_until(
            probe,
            timeout,
            poll_interval=self.policy.poll_interval if poll_interval is None else poll_interval,
            ignoring=ignoring,
        )

    def until_with_refresh(
        self,
        probe: Probe,
        timeout: float,
        refresh: Callable[[], Any],
        *,
        message: str,
        window: float | None = None,
        poll_interval: float | None = None,
        ignoring: ErrorKinds = IGNORED_BY_DEFAULT,
        **context: Any,
    ) -> Any:
        return poll_with_refresh(
            probe,
            timeout,
            refresh,
            message=message,
            window=self.policy.pause_between_refresh_seconds if window is None else window,
            poll_interval=self.policy.pause_between_tries if poll_interval is None else poll_interval,
            ignoring=ignoring,
            **context,
        )
