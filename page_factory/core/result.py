"""
Structured outcome of a wait, for callers that need "condition not met" as a
value instead of an exception (the inverted verify_* verbs).
"""
# @file purpose: Define WaitOutcome model for non-raising waits.

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class WaitOutcome(BaseModel):
    """
    - met: whether the probe succeeded before the deadline
    - value: what the probe returned on success (None otherwise)
    - elapsed: seconds spent waiting
    - timeout: the deadline that was used, in seconds
    - last_error: last transient error the probe raised, if any
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    met: bool
    value: Any = None
    elapsed: float = 0.0
    timeout: float = 0.0
    last_error: Optional[BaseException] = None

    @classmethod
    def success(cls, value: Any, *, elapsed: float, timeout: float) -> "WaitOutcome":
        return cls(met=True, value=value, elapsed=elapsed, timeout=timeout)

    @classmethod
    def timed_out(
        cls, *, elapsed: float, timeout: float, last_error: BaseException | None = None
    ) -> "WaitOutcome":
        return cls(met=False, elapsed=elapsed, timeout=timeout, last_error=last_error)
