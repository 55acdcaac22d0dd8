"""
Driver protocol (abstraction).

This Protocol is the whole browser/app control surface the page layer relies on:
element lookup, navigation, script execution, element queries/interactions,
alerts, touch gestures and screenshots. Concrete backends (Playwright here,
anything else later) implement it without the actions or pages changing.

Notes:
- Element handles are opaque; only the driver that produced a handle may
  dereference it.
- Any method taking a handle may raise TransientObservationError once the
  underlying node is gone (stale handle). Callers decide whether to retry.
- find_element honours the driver's implicit wait and raises
  ElementNotFoundError; find_elements never waits and returns [] on no match.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, NamedTuple, Optional, Protocol, Sequence, Union

ElementHandle = Any


class By(str, Enum):
    CSS = "css"
    XPATH = "xpath"
    ID = "id"
    TEXT = "text"


@dataclass(frozen=True)
class Locator:
    """Selector string plus strategy; plain strings mean CSS."""

    value: str
    by: By = By.CSS

    def __str__(self) -> str:
        return self.value if self.by is By.CSS else f"{self.by.value}={self.value}"


LocatorLike = Union[str, Locator]


def as_locator(locator: LocatorLike) -> Locator:
    if isinstance(locator, Locator):
        return locator
    return Locator(locator)


class Size(NamedTuple):
    width: int
    height: int


class Location(NamedTuple):
    x: int
    y: int


class Driver(Protocol):
    # -------- lookup --------
    def find_elements(
        self, locator: Locator, parent: Optional[ElementHandle] = None
    ) -> Sequence[ElementHandle]: ...
    def find_element(
        self, locator: Locator, parent: Optional[ElementHandle] = None
    ) -> ElementHandle: ...

    # -------- navigation --------
    def navigate(self, url: str) -> None: ...
    def refresh(self) -> None: ...
    def current_url(self) -> Optional[str]: ...
    def execute_script(self, source: str, *args: Any) -> Any: ...

    # -------- element queries --------
    def is_displayed(self, el: ElementHandle) -> bool: ...
    def is_selected(self, el: ElementHandle) -> bool: ...
    def size(self, el: ElementHandle) -> Size: ...
    def location(self, el: ElementHandle) -> Location: ...
    def tag_name(self, el: ElementHandle) -> str: ...
    def text(self, el: ElementHandle) -> str: ...
    def attribute(self, el: ElementHandle, name: str) -> Optional[str]: ...

    # -------- element interactions --------
    def click(self, el: ElementHandle) -> None: ...
    def send_keys(self, el: ElementHandle, text: str) -> None: ...
    def clear(self, el: ElementHandle) -> None: ...
    def hover(self, el: ElementHandle) -> None: ...

    # -------- alerts --------
    def alert_present(self) -> bool: ...
    def accept_alert(self) -> None: ...
    def dismiss_alert(self) -> None: ...

    # -------- window / touch --------
    def window_size(self) -> Size: ...
    def swipe(self, start_x: int, start_y: int, end_x: int, end_y: int, duration_ms: int) -> None: ...

    # -------- utilities --------
    def delete_cookies(self) -> None: ...
    def screenshot(self, path: str) -> None: ...
    def quit(self) -> None: ...
