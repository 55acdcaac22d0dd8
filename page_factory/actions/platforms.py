"""
Platform variants of ElementActions, chosen once per session.

- web browsers (chrome/firefox/safari): the base behaviour
- Internet Explorer: verify_element_invisible retries once after a driver
  error raised while the element is being removed from the DOM
- touch platforms (android/ios): scroll_into_view drags the screen until the
  element reports itself displayed, plus swipe/drag gestures
"""
# @file purpose: Per-platform overrides of the action facade.

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Dict, Optional, Type

from ..core.errors import WaitTimeoutError
from ..core.timeouts import TimeoutCategory
from ..io.driver import ElementHandle, LocatorLike, as_locator
from .base import DEFAULT, ElementActions, Target, is_locator

if TYPE_CHECKING:
    from ..browser.session import Session

logger = logging.getLogger(__name__)

SWIPE_DURATION_MS = 1000
_EDGE_OFFSET = 50


class Platform(str, Enum):
    WEB = "web"
    CHROME = "chrome"
    FIREFOX = "firefox"
    IE = "ie"
    SAFARI = "safari"
    ANDROID = "android"
    IOS = "ios"

    @property
    def is_touch(self) -> bool:
        return self in (Platform.ANDROID, Platform.IOS)


class WebActions(ElementActions):
    """Desktop browsers."""


class InternetExplorerActions(WebActions):
    def verify_element_invisible(self, locator: LocatorLike, timeout: TimeoutCategory = DEFAULT) -> None:
        try:
            super().verify_element_invisible(locator, timeout)
        except WaitTimeoutError:
            raise
        except Exception as e:  # noqa: BLE001
            # IE reports a driver error while the node is being removed; the second try sees it gone.
            logger.debug("Driver error in verify_element_invisible, trying once more: %s", e)
            super().verify_element_invisible(locator, timeout)


class TouchActions(ElementActions):
    """Android and iOS: no addressable scroll position, only gestures."""

    def scroll_into_view(self, target: Target, timeout: TimeoutCategory = DEFAULT) -> None:
        secs = self.waiter.seconds(TimeoutCategory.MEDIUM, timeout)
        describe = self._describe(target)

        def probe() -> Optional[ElementHandle]:
            el = self._first(as_locator(target)) if is_locator(target) else target
            if el is not None and self.driver.is_displayed(el):
                return el
            self.drag_up()
            return None

        self.waiter.until(
            probe,
            secs,
            message=f"Element '{describe}' never became displayed after dragging for {secs} seconds",
            action="scroll_into_view",
            locator=describe,
        )

    # -------- gestures --------

    def swipe_left(self) -> None:
        size = self.driver.window_size()
        self.driver.swipe(size.width, _EDGE_OFFSET, 10, _EDGE_OFFSET, SWIPE_DURATION_MS)

    def swipe_right(self) -> None:
        size = self.driver.window_size()
        self.driver.swipe(0, _EDGE_OFFSET, size.width, _EDGE_OFFSET, SWIPE_DURATION_MS)

    def drag_down(self) -> None:
        """Finger from top to bottom: content moves down, revealing what is above."""
        size = self.driver.window_size()
        mid = size.width // 2
        self.driver.swipe(mid, _EDGE_OFFSET, mid, size.height - 20, SWIPE_DURATION_MS)

    def drag_up(self) -> None:
        """Finger from bottom to top: content moves up, revealing what is below."""
        size = self.driver.window_size()
        mid = size.width // 2
        self.driver.swipe(mid, size.height, mid, _EDGE_OFFSET, SWIPE_DURATION_MS)


class AndroidActions(TouchActions):
    pass


class IOSActions(TouchActions):
    pass


_VARIANTS: Dict[Platform, Type[ElementActions]] = {
    Platform.WEB: WebActions,
    Platform.CHROME: WebActions,
    Platform.FIREFOX: WebActions,
    Platform.SAFARI: WebActions,
    Platform.IE: InternetExplorerActions,
    Platform.ANDROID: AndroidActions,
    Platform.IOS: IOSActions,
}


def actions_for(session: "Session", platform: Platform) -> ElementActions:
    return _VARIANTS[Platform(platform)](session)
