"""
ElementActions: the verb surface page objects and tests call.

Every verb is one of three shapes built on the wait engine:
- immediate query (exists / is_visible / is_clickable / get_element ...):
  one lookup, no waiting, False/None instead of an exception
- bounded wait (verify_* / wait_*): resolve a timeout from the session's
  TimeoutPolicy using the verb's natural category, poll until the condition
  holds, WaitTimeoutError naming the locator and the seconds used otherwise
- act-then-verify (click_and_*): wait for clickability, click exactly once,
  then wait for the post-condition; the click itself is never retried

Targets are either locators (CSS strings or Locator) or element handles the
caller already holds.
"""

# @file purpose: Implement the element action facade on top of the wait engine.
from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Callable, List, NamedTuple, Optional, Type, TypeVar, Union

from ..core import wait as wait_engine
from ..core.errors import (
    ActionExecutionError,
    ActionPreconditionError,
    ElementNotFoundError,
    InvalidPageStateError,
    RetryBudgetExhaustedError,
    TransientObservationError,
    WaitTimeoutError,
)
from ..core.timeouts import TimeoutCategory
from ..core.wait import Waiter
from ..io.driver import By, Driver, ElementHandle, Locator, LocatorLike, as_locator
from ..pages.base import SubPage, TopLevelPage
from .helpers import has_class

if TYPE_CHECKING:
    from ..browser.session import Session

logger = logging.getLogger(__name__)

T = TypeVar("T")
TP = TypeVar("TP", bound=TopLevelPage)
SP = TypeVar("SP", bound=SubPage)

Target = Union[str, Locator, ElementHandle]
DEFAULT = TimeoutCategory.DEFAULT

# Hover handlers driven by javascript need a moment before the click.
HOVER_PAUSE_SECONDS = 0.5
_PARENT = Locator("..", By.XPATH)


class ListSelection(NamedTuple):
    """Result of the *_and_select_from_list verbs."""

    element: ElementHandle
    retries_used: int


def is_locator(target: Any) -> bool:
    return isinstance(target, (str, Locator))


class ElementActions:
    def __init__(self, session: "Session") -> None:
        self.session = session
        self.timeouts = session.timeouts
        self.waiter = Waiter(session.timeouts)

    @property
    def driver(self) -> Driver:
        return self.session.driver

    # ------------------------------------------------------------------
    # immediate queries
    # ------------------------------------------------------------------

    def exists(self, locator: LocatorLike, parent: Optional[ElementHandle] = None) -> bool:
        return bool(self.get_child_elements(locator, parent))

    def get_element(self, locator: LocatorLike) -> Optional[ElementHandle]:
        return self.get_child_element(locator, None)

    def get_elements(self, locator: LocatorLike) -> List[ElementHandle]:
        return self.get_child_elements(locator, None)

    def get_child_element(
        self, locator: LocatorLike, parent: Optional[ElementHandle]
    ) -> Optional[ElementHandle]:
        found = self.get_child_elements(locator, parent)
        return found[0] if found else None

    def get_child_elements(
        self, locator: LocatorLike, parent: Optional[ElementHandle]
    ) -> List[ElementHandle]:
        try:
            return self._find_elements(locator, parent)
        except TransientObservationError:
            # the parent went stale: nothing can be found under it
            return []

    def get_parent_element(self, el: ElementHandle) -> ElementHandle:
        return self.driver.find_element(_PARENT, el)

    def is_clickable(self, target: Target) -> bool:
        """Present, displayed and with a non-zero size. Never raises."""
        try:
            el = self.get_element(target) if is_locator(target) else target
            if el is None:
                return False
            if not self.driver.is_displayed(el):
                return False
            size = self.driver.size(el)
            return size.width > 0 and size.height > 0
        except Exception:  # noqa: BLE001
            return False

    def is_visible(self, target: Target) -> bool:
        """Same test as is_clickable."""
        return self.is_clickable(target)

    def does_element_have_class(self, locator: LocatorLike, css_class: str) -> bool:
        el = self.verify_element_present(locator)
        return has_class(self.driver, el, css_class)

    def find_element_containing_text(self, locator: LocatorLike, text: str) -> Optional[ElementHandle]:
        return self._first_containing_text(locator, text, visible_only=False)

    def find_visible_element_containing_text(
        self, locator: LocatorLike, text: str
    ) -> Optional[ElementHandle]:
        return self._first_containing_text(locator, text, visible_only=True)

    def find_element_containing_child(
        self, parent_locator: LocatorLike, child_locator: LocatorLike
    ) -> Optional[ElementHandle]:
        found = self.find_elements_containing_child(parent_locator, child_locator)
        return found[0] if found else None

    def find_elements_containing_child(
        self, parent_locator: LocatorLike, child_locator: LocatorLike
    ) -> List[ElementHandle]:
        """Elements matching `parent_locator` with at least one `child_locator` match inside."""
        child = as_locator(child_locator)
        return [p for p in self.get_elements(parent_locator) if self.get_child_elements(child, p)]

    def get_current_url(self) -> Optional[str]:
        return self.driver.current_url()

    def get_web_page_ready_state(self) -> Any:
        return self.execute_script("return document.readyState")

    # ------------------------------------------------------------------
    # bounded waits
    # ------------------------------------------------------------------

    def verify_element_present(self, locator: LocatorLike, timeout: TimeoutCategory = DEFAULT) -> ElementHandle:
        loc = as_locator(locator)
        secs = self.waiter.seconds(TimeoutCategory.PRESENCE, timeout)
        el = self.waiter.until(
            lambda: self._first(loc),
            secs,
            message=f"Failure in verify_element_present: element '{loc}' never became present after {secs} seconds!",
            action="verify_element_present",
            locator=loc,
        )
        logger.debug("SUCCESS: Verified element '%s' is present", loc)
        return el

    def verify_element_not_present(self, locator: LocatorLike, timeout: TimeoutCategory = DEFAULT) -> None:
        loc = as_locator(locator)
        secs = self.waiter.seconds(TimeoutCategory.PRESENCE, timeout)
        self.waiter.until(
            lambda: not self._find_elements(loc),
            secs,
            message=f"Failure in verify_element_not_present: element '{loc}' was still present after {secs} seconds!",
            action="verify_element_not_present",
            locator=loc,
        )
        logger.debug("SUCCESS: Verified element '%s' is NOT present", loc)

    def verify_element_visible(self, locator: LocatorLike, timeout: TimeoutCategory = DEFAULT) -> ElementHandle:
        loc = as_locator(locator)
        secs = self.waiter.seconds(TimeoutCategory.VISIBILITY, timeout)

        def probe() -> Optional[ElementHandle]:
            el = self._first(loc)
            if el is not None and self._displayed_with_size(el):
                return el
            return None

        el = self.waiter.until(
            probe,
            secs,
            message=f"Error in verify_element_visible: element '{loc}' never became visible after {secs} seconds",
            action="verify_element_visible",
            locator=loc,
        )
        logger.info("SUCCESS: Verified element '%s' is visible", loc)
        return el

    def verify_element_invisible(self, locator: LocatorLike, timeout: TimeoutCategory = DEFAULT) -> None:
        """Absent, hidden or stale all count as invisible."""
        loc = as_locator(locator)
        secs = self.waiter.seconds(TimeoutCategory.VISIBILITY, timeout)

        def probe() -> bool:
            try:
                el = self._first(loc)
                return el is None or not self.driver.is_displayed(el)
            except TransientObservationError:
                return True

        self.waiter.until(
            probe,
            secs,
            message=f"Failure in verify_element_invisible: element '{loc}' was still visible after {secs} seconds",
            action="verify_element_invisible",
            locator=loc,
        )
        logger.info("SUCCESS: Verified element '%s' is invisible", loc)

    def verify_element_selected(self, target: Target, timeout: TimeoutCategory = DEFAULT) -> ElementHandle:
        return self._wait_for_selection(target, True, timeout)

    def verify_element_not_selected(self, target: Target, timeout: TimeoutCategory = DEFAULT) -> ElementHandle:
        return self._wait_for_selection(target, False, timeout)

    def verify_element_contains_text(
        self, locator: LocatorLike, text: str, timeout: TimeoutCategory = DEFAULT
    ) -> ElementHandle:
        loc = as_locator(locator)
        secs = self.waiter.seconds(TimeoutCategory.PRESENCE, timeout)

        def probe() -> Optional[ElementHandle]:
            el = self._first(loc)
            if el is not None and text in (self.driver.text(el) or ""):
                return el
            return None

        el = self.waiter.until(
            probe,
            secs,
            message=f"Failure in verify_element_contains_text: an element '{loc}' was never found containing text '{text}'!",
            action="verify_element_contains_text",
            locator=loc,
        )
        logger.info("SUCCESS: Verified element '%s' contains text '%s'", loc, text)
        return el

    def verify_element_has_class(
        self, locator: LocatorLike, css_class: str, timeout: TimeoutCategory = DEFAULT
    ) -> ElementHandle:
        return self._wait_for_class(locator, css_class, True, timeout)

    def verify_element_does_not_have_class(
        self, locator: LocatorLike, css_class: str, timeout: TimeoutCategory = DEFAULT
    ) -> ElementHandle:
        return self._wait_for_class(locator, css_class, False, timeout)

    def wait_until_clickable(self, target: Target, timeout: TimeoutCategory = DEFAULT) -> ElementHandle:
        secs = self.waiter.seconds(TimeoutCategory.CLICK, timeout)
        if is_locator(target):
            loc = as_locator(target)
            logger.info("Waiting for element '%s' to be clickable, using timeout of %d seconds", loc, secs)

            def probe() -> Optional[ElementHandle]:
                el = self._first(loc)
                return el if el is not None and self.is_clickable(el) else None

            return self.waiter.until(
                probe,
                secs,
                message=f"Element '{loc}' never became clickable after {secs} seconds",
                action="wait_until_clickable",
                locator=loc,
            )

        el = target
        return self.waiter.until(
            lambda: el if self.is_clickable(el) else None,
            secs,
            message=f"Element never became clickable after {secs} seconds",
            action="wait_until_clickable",
        )

    def get_element_with_wait(self, locator: LocatorLike) -> ElementHandle:
        return self.get_child_element_with_wait(locator, None)

    def get_child_element_with_wait(
        self, locator: LocatorLike, parent: Optional[ElementHandle]
    ) -> ElementHandle:
        """Uses the driver's implicit wait; returns a handle or raises, never None."""
        loc = as_locator(locator)
        try:
            el = self.driver.find_element(loc, parent)
        except ElementNotFoundError as e:
            ms = self.timeouts.implicit_wait_millis
            raise WaitTimeoutError(
                f"Timeout using implicit wait of {ms} ms waiting to find element '{loc}'",
                timeout=self.timeouts.implicit_wait,
                action="get_element_with_wait",
                locator=loc,
                cause=e,
            ) from e
        logger.debug("Successfully found element '%s'", loc)
        return el

    def find_element_containing_text_with_wait(
        self, locator: LocatorLike, text: str, timeout: TimeoutCategory = DEFAULT
    ) -> ElementHandle:
        loc = as_locator(locator)
        secs = self.waiter.seconds(TimeoutCategory.PRESENCE, timeout)
        return self.waiter.until(
            lambda: self.find_element_containing_text(loc, text),
            secs,
            message=(
                f"Failure in find_element_containing_text_with_wait: never found text '{text}' "
                f"in element '{loc}' with timeout of {secs} seconds"
            ),
            action="find_element_containing_text_with_wait",
            locator=loc,
        )

    def find_visible_element_containing_text_with_wait(
        self, locator: LocatorLike, text: str, timeout: TimeoutCategory = DEFAULT
    ) -> ElementHandle:
        loc = as_locator(locator)
        secs = self.waiter.seconds(TimeoutCategory.PRESENCE, timeout)
        return self.waiter.until(
            lambda: self.find_visible_element_containing_text(loc, text),
            secs,
            message=(
                f"Failure in find_visible_element_containing_text_with_wait: never found a visible "
                f"element '{loc}' with text '{text}' with timeout of {secs} seconds"
            ),
            action="find_visible_element_containing_text_with_wait",
            locator=loc,
        )

    def find_element_containing_child_with_wait(
        self, parent_locator: LocatorLike, child_locator: LocatorLike, timeout: TimeoutCategory = DEFAULT
    ) -> ElementHandle:
        """Polls without reloading the page."""
        loc = as_locator(parent_locator)
        child = as_locator(child_locator)
        secs = self.waiter.seconds(TimeoutCategory.PRESENCE, timeout)
        return self.waiter.until(
            lambda: self.find_element_containing_child(loc, child),
            secs,
            message=(
                f"Failure in find_element_containing_child_with_wait: never found element '{loc}' "
                f"containing child '{child}' with timeout of {secs} seconds"
            ),
            action="find_element_containing_child_with_wait",
            locator=loc,
        )

    def find_elements_containing_child_with_wait(
        self, parent_locator: LocatorLike, child_locator: LocatorLike, timeout: TimeoutCategory = DEFAULT
    ) -> List[ElementHandle]:
        loc = as_locator(parent_locator)
        child = as_locator(child_locator)
        secs = self.waiter.seconds(TimeoutCategory.PRESENCE, timeout)
        return self.waiter.until(
            lambda: self.find_elements_containing_child(loc, child) or None,
            secs,
            message=(
                f"Failure in find_elements_containing_child_with_wait: never found elements '{loc}' "
                f"containing child '{child}' with timeout of {secs} seconds"
            ),
            action="find_elements_containing_child_with_wait",
            locator=loc,
        )

    def verify_element_removed(self, element: ElementHandle, timeout: TimeoutCategory = DEFAULT) -> None:
        """Wait for a held handle to go stale, i.e. leave the DOM."""
        secs = self.waiter.seconds(TimeoutCategory.PRESENCE, timeout)
        self.waiter.until(
            lambda: self._is_stale(element),
            secs,
            message=f"Element was never removed from the DOM after {secs} seconds",
            action="verify_element_removed",
        )
        logger.debug("SUCCESS: Verified element was removed from the DOM")

    def wait_for_web_page_ready_state_to_be_complete(self, timeout: TimeoutCategory = DEFAULT) -> None:
        secs = self.waiter.seconds(TimeoutCategory.PAGE_READY, timeout)
        self.waiter.until(
            lambda: self.get_web_page_ready_state() == "complete",
            secs,
            message=f"Timeout waiting for document.readyState to be 'complete' after {secs} seconds",
            action="wait_for_web_page_ready_state_to_be_complete",
        )
        logger.debug("Web page ready state is 'complete'")

    def wait_for_javascript_symbol_to_be_defined(self, symbol: str, timeout: TimeoutCategory = DEFAULT) -> None:
        secs = self.waiter.seconds(TimeoutCategory.PAGE_LOAD, timeout)
        script = f"return (typeof {symbol} != 'undefined') && ({symbol} != null)"
        self.waiter.until(
            lambda: self.execute_script(script),
            secs,
            message=f"Timeout waiting for javascript symbol '{symbol}' to be defined with {secs} seconds timeout used",
            action="wait_for_javascript_symbol_to_be_defined",
        )
        logger.info("Success verifying javascript symbol '%s' is defined!", symbol)

    def wait_for_javascript_symbol_to_have_value(
        self, symbol: str, value: str, timeout: TimeoutCategory = DEFAULT
    ) -> None:
        secs = self.waiter.seconds(TimeoutCategory.PAGE_LOAD, timeout)
        script = f"return ({symbol}) === ({value})"
        self.waiter.until(
            lambda: self.execute_script(script),
            secs,
            message=(
                f"Timeout waiting for javascript symbol '{symbol}' to have value '{value}' "
                f"with {secs} seconds timeout used"
            ),
            action="wait_for_javascript_symbol_to_have_value",
        )
        logger.info("Success verifying javascript symbol '%s' has value '%s'!", symbol, value)

    def verify_page_refreshed(
        self, element_before_refresh: ElementHandle, locator_after_refresh: LocatorLike,
        timeout: TimeoutCategory = DEFAULT,
    ) -> ElementHandle:
        """Wait for an old handle to go stale, then for `locator_after_refresh`."""
        secs = self.waiter.seconds(TimeoutCategory.PAGE_REFRESH, timeout)
        loc = as_locator(locator_after_refresh)
        logger.info("Waiting for '%s' to be present after page refreshes, using timeout of %d seconds", loc, secs)
        self.waiter.until(
            lambda: self._is_stale(element_before_refresh),
            secs,
            message="Timeout waiting for element to become stale (waiting for page to reload).",
            action="verify_page_refreshed",
        )
        el = self.verify_element_present(loc)
        logger.info("Successfully verified page refreshed by finding element '%s'.", loc)
        return el

    def wait_on_function(
        self, fn: Callable[[], Optional[T]], message: str, timeout: TimeoutCategory = DEFAULT
    ) -> T:
        """Poll any callable; not-found and stale errors count as "not yet"."""
        secs = self.waiter.seconds(TimeoutCategory.MEDIUM, timeout)
        return self.waiter.until(
            fn,
            secs,
            message=message,
            ignoring=(ElementNotFoundError, TransientObservationError),
            action="wait_on_function",
        )

    def wait_on_predicate(
        self, predicate: Callable[[], bool], message: str, timeout: TimeoutCategory = DEFAULT
    ) -> None:
        self.wait_on_function(lambda: bool(predicate()), message, timeout)

    def wait_on_predicate_with_refresh(
        self, predicate: Callable[[], bool], message: str, timeout: TimeoutCategory = DEFAULT
    ) -> None:
        """Like wait_on_predicate, but reload the page after every miss."""
        secs = self.waiter.seconds(TimeoutCategory.MEDIUM, timeout)
        logger.info("Waiting on predicate with refresh, using timeout of %d seconds", secs)
        self.waiter.until_with_refresh(
            lambda: bool(predicate()),
            secs,
            self.session.refresh_page,
            message=message,
            window=0,
            poll_interval=self.timeouts.poll_interval,
            action="wait_on_predicate_with_refresh",
        )

    def accept_alert(self, timeout: TimeoutCategory = DEFAULT) -> None:
        self._wait_for_alert("accepting", timeout)
        self.driver.accept_alert()

    def dismiss_alert(self, timeout: TimeoutCategory = DEFAULT) -> None:
        self._wait_for_alert("dismissing", timeout)
        self.driver.dismiss_alert()

    # ------------------------------------------------------------------
    # inverted waits: succeed when the positive condition never holds
    # ------------------------------------------------------------------

    def verify_element_with_text_not_present(
        self, locator: LocatorLike, text: str, timeout: TimeoutCategory = DEFAULT
    ) -> None:
        loc = as_locator(locator)
        secs = self.waiter.seconds(TimeoutCategory.PRESENCE, timeout)
        outcome = self.waiter.try_until(lambda: self.find_element_containing_text(loc, text), secs)
        if outcome.met:
            raise InvalidPageStateError(
                f"Error in verify_element_with_text_not_present: found element '{loc}' containing text '{text}'!",
                action="verify_element_with_text_not_present",
                locator=loc,
            )

    def verify_element_with_text_is_invisible(
        self, locator: LocatorLike, text: str, timeout: TimeoutCategory = DEFAULT
    ) -> None:
        loc = as_locator(locator)
        secs = self.waiter.seconds(TimeoutCategory.PRESENCE, timeout)
        outcome = self.waiter.try_until(
            lambda: self.find_visible_element_containing_text(loc, text), secs
        )
        if outcome.met:
            raise InvalidPageStateError(
                f"Error in verify_element_with_text_is_invisible: found visible element '{loc}' containing text '{text}'",
                action="verify_element_with_text_is_invisible",
                locator=loc,
            )

    # ------------------------------------------------------------------
    # act-then-verify
    # ------------------------------------------------------------------

    def click(self, target: Target, timeout: TimeoutCategory = DEFAULT) -> ElementHandle:
        el = self.wait_until_clickable(target, timeout)
        self._click_once(el, target)
        logger.info("Clicked element '%s'", self._describe(target))
        return el

    def click_no_wait(self, locator: LocatorLike) -> ElementHandle:
        loc = as_locator(locator)
        el = self.get_element(loc)
        if not self.is_clickable(el):
            raise ActionExecutionError(
                "Element is not clickable", action="click_no_wait", locator=loc
            )
        self._click_once(el, loc)
        logger.info("Clicked element '%s', no waiting.", loc)
        return el

    def click_and_verify_present(
        self, target: Target, locator_to_verify: LocatorLike, timeout: TimeoutCategory = DEFAULT
    ) -> ElementHandle:
        self.click(target, timeout)
        logger.info("After click, waiting for '%s' to be present.", locator_to_verify)
        return self.verify_element_present(locator_to_verify, timeout)

    def click_and_verify_visible(
        self, target: Target, locator_to_verify: LocatorLike, timeout: TimeoutCategory = DEFAULT
    ) -> ElementHandle:
        self.click(target, timeout)
        logger.info("After click, waiting for '%s' to be visible.", locator_to_verify)
        return self.verify_element_visible(locator_to_verify, timeout)

    def click_and_verify_not_present(
        self, target: Target, locator_to_verify: LocatorLike, timeout: TimeoutCategory = DEFAULT
    ) -> None:
        self.click(target, timeout)
        logger.info("After click, waiting for '%s' to NOT be present.", locator_to_verify)
        self.verify_element_not_present(locator_to_verify, timeout)

    def click_and_verify_not_visible(
        self, target: Target, locator_to_verify: LocatorLike, timeout: TimeoutCategory = DEFAULT
    ) -> None:
        self.click(target, timeout)
        logger.info("After click, waiting for '%s' to NOT be visible.", locator_to_verify)
        self.verify_element_invisible(locator_to_verify, timeout)

    def click_and_load_top_level_page(
        self, target: Target, page_cls: Type[TP], timeout: TimeoutCategory = DEFAULT
    ) -> TP:
        self.click(target, timeout)
        return self.load_top_level_page(page_cls)

    def click_and_load_sub_page(
        self, target: Target, page_cls: Type[SP], timeout: TimeoutCategory = DEFAULT
    ) -> SP:
        self.click(target, timeout)
        return self.load_sub_page(page_cls)

    def click_and_select_from_list(self, target: Target, popover_locator: LocatorLike) -> ElementHandle:
        """Open a menu with one click, then click the popover item."""
        el = self.get_element(target) if is_locator(target) else target
        if el is None:
            raise ActionPreconditionError(
                "Element to click cannot be missing", action="click_and_select_from_list",
                locator=target,
            )
        self.click(el)
        self.verify_element_present(popover_locator)
        return self.click(popover_locator)

    # ------------------------------------------------------------------
    # text entry
    # ------------------------------------------------------------------

    def clear_text(self, target: Target) -> ElementHandle:
        el = self.verify_element_present(target) if is_locator(target) else target
        try:
            self.driver.clear(el)
        except Exception as e:  # noqa: BLE001
            raise ActionExecutionError(
                f"Error clearing text from element: {e}", action="clear_text",
                locator=self._describe(target), cause=e,
            ) from e
        logger.info("Cleared text from element '%s'", self._describe(target))
        return el

    def input_text(self, target: Target, text: str) -> ElementHandle:
        el = self.get_element_with_wait(target) if is_locator(target) else target
        logger.info("Inputting text '%s' into element '%s'", text, self._describe(target))
        self._send_keys(el, text, target)
        return el

    def input_text_slowly(self, target: Target, text: str) -> ElementHandle:
        """One key at a time, pausing between keys so incremental handlers fire."""
        el = self.get_element_with_wait(target) if is_locator(target) else target
        logger.info("Inputting text '%s' slowly into element '%s'", text, self._describe(target))
        for ch in text:
            self._send_keys(el, ch, target)
            wait_engine.sleep(self.timeouts.pause_between_keys)
        return el

    def input_text_and_select_from_list(
        self, input_field: ElementHandle, value: str, popover_locator: LocatorLike, retry_count: int = 0
    ) -> ListSelection:
        return self._enter_text_and_select_from_list(
            input_field, value, popover_locator, retry_count, slowly=False
        )

    def input_text_slowly_and_select_from_list(
        self, input_field: ElementHandle, value: str, popover_locator: LocatorLike, retry_count: int = 0
    ) -> ListSelection:
        return self._enter_text_and_select_from_list(
            input_field, value, popover_locator, retry_count, slowly=True
        )

    def enter_text_for_autocomplete_and_select_first_match(
        self,
        input_locator: LocatorLike,
        text: str,
        popup_locator: LocatorLike,
        required_popup_text: str,
        min_chars: int = 0,
    ) -> ElementHandle:
        """
        Type `text` one character at a time (after pre-filling `min_chars`
        characters at once) until a popup item containing `required_popup_text`
        shows up, then hover it and click it.

        Each character gets one second for the popup to appear, the last one
        gets five.
        """
        if text is None or min_chars < 0 or min_chars > len(text):
            raise ActionPreconditionError(
                f"Minimum characters to enter ({min_chars}) is greater than the length of the input text '{text}'!",
                action="enter_text_for_autocomplete_and_select_first_match",
                locator=input_locator,
            )
        self.scroll_into_view(input_locator)
        if min_chars > 0:
            self.input_text(input_locator, text[:min_chars])

        last = len(text) - 1
        for i in range(min_chars, len(text)):
            self.input_text(input_locator, text[i])
            timeout = TimeoutCategory.FIVE_SECONDS if i == last else TimeoutCategory.ONE_SECOND
            try:
                popup = self.find_element_containing_text_with_wait(popup_locator, required_popup_text, timeout)
            except Exception as e:  # noqa: BLE001
                logger.debug("No autocomplete popup after %d characters: %s", i + 1, e)
                continue
            try:
                self.driver.hover(popup)
                wait_engine.sleep(HOVER_PAUSE_SECONDS)
                self.driver.click(popup)
            except Exception as e:  # noqa: BLE001
                logger.debug("Exception clicking popup from autocomplete: %s", e)
                continue
            logger.info('Success - clicked popup for autocomplete text "%s"', text)
            return popup

        raise WaitTimeoutError(
            f"No popup '{as_locator(popup_locator)}' found with required text '{required_popup_text}'",
            timeout=self.timeouts.seconds_for(TimeoutCategory.FIVE_SECONDS),
            action="enter_text_for_autocomplete_and_select_first_match",
            locator=as_locator(popup_locator),
        )

    def wait_for_rich_text_editor_ready(self) -> None:
        """TinyMCE: the global, its active editor, and its initialized flag."""
        self.wait_for_javascript_symbol_to_be_defined("tinyMCE")
        self.wait_for_javascript_symbol_to_be_defined("tinyMCE.activeEditor")
        self.wait_for_javascript_symbol_to_have_value("tinyMCE.activeEditor.initialized", "true")

    def input_rich_text(self, text: str) -> None:
        self.wait_for_rich_text_editor_ready()
        self.execute_script(f"tinyMCE.activeEditor.setContent({json.dumps(text)})")

    # ------------------------------------------------------------------
    # scrolling
    # ------------------------------------------------------------------

    def scroll_into_view(self, target: Target, timeout: TimeoutCategory = DEFAULT) -> None:
        """Scroll the window so the element sits at the vertical middle of the viewport."""
        el = self.verify_element_present(target, timeout) if is_locator(target) else target
        viewport_height = self.driver.window_size().height
        y = max(0, self.driver.location(el).y - viewport_height // 2)
        self.execute_script(f"window.scrollTo(0, {y})")

    def scroll_into_view_within(self, container: LocatorLike, target: Target) -> None:
        """Scroll a scrollable container so the element is at its top edge."""
        parent = self.verify_element_present(container)
        el = self.verify_element_present(target) if is_locator(target) else target
        current_scroll_top = int(self.execute_script("return args[0].scrollTop", parent) or 0)
        y = self.driver.location(el).y
        parent_y = self.driver.location(parent).y
        scroll_to = max(0, y - parent_y + current_scroll_top)
        self.execute_script(f"args[0].scrollTop = {scroll_to}", parent)

    # ------------------------------------------------------------------
    # finders that reload the page between attempts
    # ------------------------------------------------------------------

    def find_element_with_refresh(self, locator: LocatorLike, timeout: TimeoutCategory = DEFAULT) -> ElementHandle:
        return self.find_element_containing_text_with_refresh(locator, "", timeout)

    def find_element_containing_text_with_refresh(
        self, locator: LocatorLike, text: str, timeout: TimeoutCategory = DEFAULT
    ) -> ElementHandle:
        return self._find_with_refresh(locator, text, visible_only=False, timeout=timeout)

    def find_visible_element_with_refresh(
        self, locator: LocatorLike, timeout: TimeoutCategory = DEFAULT
    ) -> ElementHandle:
        return self.find_visible_element_containing_text_with_refresh(locator, "", timeout)

    def find_visible_element_containing_text_with_refresh(
        self, locator: LocatorLike, text: str, timeout: TimeoutCategory = DEFAULT
    ) -> ElementHandle:
        return self._find_with_refresh(locator, text, visible_only=True, timeout=timeout)

    # ------------------------------------------------------------------
    # scripts, navigation and pages
    # ------------------------------------------------------------------

    def execute_script(self, source: str, *args: Any) -> Any:
        """Run javascript; extra arguments are visible to it as `args`."""
        logger.debug("Executing javascript: '%s'", source)
        try:
            return self.driver.execute_script(source, *args)
        except TransientObservationError:
            raise
        except Exception as e:  # noqa: BLE001
            raise ActionExecutionError(
                f"Exception executing javascript '{source}'", action="execute_script", cause=e
            ) from e

    def open_web_page(self, url: str) -> TopLevelPage:
        return self.session.open_page_by_url(url, TopLevelPage)

    def load_top_level_page(self, page_cls: Type[TP]) -> TP:
        return self.session.load_top_level_page(page_cls)

    def load_sub_page(self, page_cls: Type[SP]) -> SP:
        return self.session.load_sub_page(page_cls)

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------

    def _find_elements(self, locator: LocatorLike, parent: Optional[ElementHandle] = None) -> List[ElementHandle]:
        return list(self.driver.find_elements(as_locator(locator), parent))

    def _first(self, locator: LocatorLike) -> Optional[ElementHandle]:
        found = self._find_elements(locator)
        return found[0] if found else None

    def _is_stale(self, el: ElementHandle) -> bool:
        try:
            self.driver.tag_name(el)
        except TransientObservationError:
            return True
        return False

    def _displayed_with_size(self, el: ElementHandle) -> bool:
        if not self.driver.is_displayed(el):
            return False
        size = self.driver.size(el)
        return size.width > 0 and size.height > 0

    def _first_containing_text(
        self, locator: LocatorLike, text: str, *, visible_only: bool
    ) -> Optional[ElementHandle]:
        loc = as_locator(locator)
        for el in self.get_elements(loc):
            try:
                if text in (self.driver.text(el) or "") and (
                    not visible_only or self.driver.is_displayed(el)
                ):
                    logger.info("SUCCESS: Found element '%s' containing text '%s'", loc, text)
                    return el
            except TransientObservationError:
                # one stale match does not end the search
                logger.debug("Stale element while searching '%s' for text '%s'", loc, text)
        return None

    def _wait_for_selection(self, target: Target, selected: bool, timeout: TimeoutCategory) -> ElementHandle:
        secs = self.waiter.seconds(TimeoutCategory.SELECTION, timeout)
        state = "selected" if selected else "deselected"
        describe = self._describe(target)

        def probe() -> Optional[ElementHandle]:
            el = self._first(target) if is_locator(target) else target
            if el is not None and self.driver.is_selected(el) == selected:
                return el
            return None

        el = self.waiter.until(
            probe,
            secs,
            message=f"Element '{describe}' never became {state} after {secs} seconds!",
            action=f"verify_element_{'selected' if selected else 'not_selected'}",
            locator=describe,
        )
        logger.info("SUCCESS: Verified element '%s' is %s", describe, state)
        return el

    def _wait_for_class(
        self, locator: LocatorLike, css_class: str, present: bool, timeout: TimeoutCategory
    ) -> ElementHandle:
        loc = as_locator(locator)
        secs = self.waiter.seconds(TimeoutCategory.MEDIUM, timeout)

        def probe() -> Optional[ElementHandle]:
            el = self._first(loc)
            if el is not None and has_class(self.driver, el, css_class) == present:
                return el
            return None

        negation = "" if present else "NOT "
        return self.waiter.until(
            probe,
            secs,
            message=f"Waiting for element '{loc}' to {negation}have css class '{css_class}'",
            action="verify_element_has_class" if present else "verify_element_does_not_have_class",
            locator=loc,
        )

    def _wait_for_alert(self, verb: str, timeout: TimeoutCategory) -> None:
        secs = self.waiter.seconds(TimeoutCategory.PRESENCE, timeout)
        self.waiter.until(
            self.driver.alert_present,
            secs,
            message=f"Waiting for javascript alert to be present before {verb} alert.",
            action="alert",
        )

    def _find_with_refresh(
        self, locator: LocatorLike, text: str, *, visible_only: bool, timeout: TimeoutCategory
    ) -> ElementHandle:
        loc = as_locator(locator)
        secs = self.waiter.seconds(TimeoutCategory.POLLING_WITH_REFRESH, timeout)
        logger.info(
            "Waiting for element containing text '%s' defined by '%s', timeout of %d seconds", text, loc, secs
        )
        found = self.waiter.until_with_refresh(
            lambda: self._first_containing_text(loc, text, visible_only=visible_only),
            secs,
            self.session.refresh_page,
            message=f"Timeout waiting to find text '{text}' in an element matching '{loc}'",
            action="find_with_refresh",
            locator=loc,
        )
        logger.info("Success finding element containing text '%s' defined by '%s'!", text, loc)
        return found

    def _enter_text_and_select_from_list(
        self,
        input_field: ElementHandle,
        value: str,
        popover_locator: LocatorLike,
        retry_count: int,
        *,
        slowly: bool,
    ) -> ListSelection:
        if input_field is None:
            raise ActionPreconditionError(
                "Input field cannot be None", action="input_text_and_select_from_list"
            )
        if retry_count < 0:
            raise ActionPreconditionError(
                f"retry_count must be >= 0, got {retry_count}", action="input_text_and_select_from_list"
            )

        loc = as_locator(popover_locator)
        last_error: Exception | None = None
        for attempt in range(retry_count + 1):
            try:
                self.clear_text(input_field)
                if slowly:
                    self.input_text_slowly(input_field, value)
                else:
                    self.input_text(input_field, value)
                self.verify_element_present(loc)
                self.click(loc)
            except Exception as e:  # noqa: BLE001
                last_error = e
                logger.error("Attempt %d to select '%s' from list failed: %s", attempt + 1, loc, e)
                continue
            if attempt:
                logger.warning(
                    "Entered text successfully and selected '%s' from list after %d retries", loc, attempt
                )
            return ListSelection(element=input_field, retries_used=attempt)

        logger.warning("Failed to enter text and select '%s' from list.", loc)
        raise RetryBudgetExhaustedError(
            f"Failed to input text and select from list after {retry_count} retries",
            retries_used=retry_count,
            action="input_text_and_select_from_list",
            locator=loc,
            cause=last_error,
        ) from last_error

    def _click_once(self, el: ElementHandle, target: Target) -> None:
        try:
            self.driver.click(el)
        except Exception as e:  # noqa: BLE001
            raise ActionExecutionError(
                "failed to click element", action="click", locator=self._describe(target), cause=e
            ) from e

    def _send_keys(self, el: ElementHandle, text: str, target: Target) -> None:
        try:
            self.driver.send_keys(el, text)
        except Exception as e:  # noqa: BLE001
            raise ActionExecutionError(
                f"Error inputting text '{text}': {e}", action="input_text",
                locator=self._describe(target), cause=e,
            ) from e

    def _describe(self, target: Target) -> str:
        if is_locator(target):
            return str(as_locator(target))
        try:
            return f"<{self.driver.tag_name(target)}>"
        except Exception:  # noqa: BLE001
            return "<element>"
