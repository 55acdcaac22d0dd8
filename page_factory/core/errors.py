"""
Project-level exception types, one per failure mode of the page layer.

- PageFactoryError: base class of every custom error
- TransientObservationError: a stale element handle; retryable inside a wait
- ElementNotFoundError: a driver-level "no such element"
- WaitTimeoutError: a bounded wait ran out of time
- InvalidPageStateError / InvalidPageUrlError: a page failed its load hook
- ActionPreconditionError: bad input to a verb, rejected before any driver call
- RetryBudgetExhaustedError: a composite verb used up its retries
- ActionExecutionError: a non-transient driver failure, wrapped with verb context
- ConfigurationError: invalid timeout/session configuration
"""
# @file purpose: Define error taxonomy for page-factory.

from __future__ import annotations

from typing import Any


class PageFactoryError(Exception):
    """
    Base class for all custom errors in page-factory.

    Carries optional context so callers and the CLI render failures the same way.
    """

    def __init__(
        self,
        message: str,
        *,
        action: str | None = None,
        locator: Any = None,
        url: str | None = None,
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message: str = message
        self.action: str | None = action
        self.locator: Any = locator
        self.url: str | None = url
        self.details: dict[str, Any] = details or {}
        self.cause: BaseException | None = cause

    def __str__(self) -> str:
        head = super().__str__()
        parts = [f"[{self.action}] {head}" if self.action else head]
        if self.locator is not None:
            parts.append(f"locator={self.locator}")
        if self.url:
            parts.append(f"url={self.url}")
        if self.details:
            kv = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            parts.append(f"details={{ {kv} }}")
        return " | ".join(parts)


class TransientObservationError(PageFactoryError):
    """The element handle went stale (DOM node removed or replaced)."""


class ElementNotFoundError(PageFactoryError):
    """Raised by Driver.find_element when nothing matches the locator."""


class WaitTimeoutError(PageFactoryError):
    """
    Terminal failure of a bounded wait.

    `timeout` is the duration (seconds) the wait used; `last_error` is the last
    transient error the probe raised, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        timeout: float | None = None,
        last_error: BaseException | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.timeout: float | None = timeout
        self.last_error: BaseException | None = last_error
        if timeout is not None:
            self.details.setdefault("timeout", timeout)
        if last_error is not None:
            self.details.setdefault("last_error", repr(last_error))


class InvalidPageStateError(PageFactoryError):
    """The page is not in the state the caller asserted (load hook, inverted verbs)."""


class InvalidPageUrlError(InvalidPageStateError):
    """The current URL path does not match the page's declared path."""


class ActionPreconditionError(PageFactoryError):
    """Invalid verb input; raised before any driver interaction."""


class RetryBudgetExhaustedError(PageFactoryError):
    """A composite verb failed on every attempt of its retry budget."""

    def __init__(self, message: str, *, retries_used: int, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.retries_used: int = retries_used
        self.details.setdefault("retries_used", retries_used)


class ActionExecutionError(PageFactoryError):
    """
    Raised when a side-effecting driver call fails for a non-transient reason
    (script error, click intercepted, ...). Never retried automatically.
    """


class ConfigurationError(PageFactoryError):
    """Raised on invalid timeout or session configuration."""
