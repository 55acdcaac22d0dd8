"""
Timeout categories and the immutable policy that maps them to durations.

Every verb has a "natural" category (clicks wait CLICK seconds, presence checks
wait PRESENCE seconds, ...). Callers pass `TimeoutCategory.DEFAULT` to get that
natural value, or any other category to force a different duration.
"""
# @file purpose: Timeout categories and TimeoutPolicy resolution.

from __future__ import annotations

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigurationError

PositiveSeconds = Annotated[int, Field(gt=0)]
PositiveMillis = Annotated[int, Field(gt=0)]


class TimeoutCategory(str, Enum):
    DEFAULT = "default"
    CLICK = "click"
    PRESENCE = "presence"
    VISIBILITY = "visibility"
    SELECTION = "selection"
    PAGE_LOAD = "page_load"
    PAGE_READY = "page_ready"
    PAGE_REFRESH = "page_refresh"
    POLLING_WITH_REFRESH = "polling_with_refresh"
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"
    ONE_SECOND = "one_second"
    FIVE_SECONDS = "five_seconds"


# Categories whose duration is part of their name, not configurable.
_FIXED_SECONDS: dict[TimeoutCategory, int] = {
    TimeoutCategory.ONE_SECOND: 1,
    TimeoutCategory.FIVE_SECONDS: 5,
}


class TimeoutPolicy(BaseModel):
    """
    One duration per concrete category plus auxiliary tuning values.

    Created once per session and never mutated (frozen model).
    Zero or negative values fail at construction.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    click_timeout_seconds: PositiveSeconds = 5
    presence_timeout_seconds: PositiveSeconds = 5
    visibility_timeout_seconds: PositiveSeconds = 5
    selection_timeout_seconds: PositiveSeconds = 5
    page_load_timeout_seconds: PositiveSeconds = 80
    page_ready_timeout_seconds: PositiveSeconds = 10
    page_refresh_timeout_seconds: PositiveSeconds = 5
    polling_with_refresh_timeout_seconds: PositiveSeconds = 30
    short_timeout_seconds: PositiveSeconds = 1
    medium_timeout_seconds: PositiveSeconds = 5
    long_timeout_seconds: PositiveSeconds = 20

    poll_interval_millis: PositiveMillis = 100
    pause_between_keys_millis: PositiveMillis = 50
    pause_between_tries_millis: PositiveMillis = 200
    pause_between_refresh_seconds: PositiveSeconds = 5
    implicit_wait_millis: PositiveMillis = 2000

    @classmethod
    def build(cls, **values: int) -> "TimeoutPolicy":
        """Validate `values` and wrap pydantic's error in ConfigurationError."""
        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(
                "invalid timeout configuration",
                details={"errors": [err.get("msg") for err in e.errors()]},
                cause=e,
            ) from e

    # -------- resolution --------

    def seconds_for(self, category: TimeoutCategory) -> int:
        """Configured duration for a concrete category."""
        if category is TimeoutCategory.DEFAULT:
            raise ValueError("DEFAULT has no stored duration; resolve it against a category")
        if category in _FIXED_SECONDS:
            return _FIXED_SECONDS[category]
        return getattr(self, f"{category.value}_timeout_seconds")

    def resolve(
        self,
        category: TimeoutCategory,
        requested: TimeoutCategory = TimeoutCategory.DEFAULT,
    ) -> int:
        """
        Resolve the duration a verb should wait.

        `category` is the verb's natural category; `requested` is what the caller
        passed. DEFAULT falls back to `category`, anything else wins.
        """
        if requested is TimeoutCategory.DEFAULT:
            return self.seconds_for(category)
        return self.seconds_for(requested)

    # -------- tuning values in seconds --------

    @property
    def poll_interval(self) -> float:
        return self.poll_interval_millis / 1000

    @property
    def pause_between_keys(self) -> float:
        return self.pause_between_keys_millis / 1000

    @property
    def pause_between_tries(self) -> float:
        return self.pause_between_tries_millis / 1000

    @property
    def implicit_wait(self) -> float:
        return self.implicit_wait_millis / 1000

    def as_table(self) -> dict[str, int]:
        """Category name -> seconds, for display."""
        return {
            c.name: self.seconds_for(c) for c in TimeoutCategory if c is not TimeoutCategory.DEFAULT
        }
