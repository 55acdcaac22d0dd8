"""
Playwright-based Driver implementation (sync API).

Conforms to io/driver.py's Driver Protocol:
- start() / stop() / quit()
- find_elements / find_element (implicit wait)
- navigate / refresh / current_url / execute_script
- element queries and interactions on Playwright ElementHandles
- alerts (captured through the page "dialog" event)
- window_size / swipe (mouse drag) / delete_cookies / screenshot

Playwright errors about detached nodes become TransientObservationError so the
wait engine can retry them; lookup timeouts become ElementNotFoundError.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, List, Optional, TypeVar

from playwright.sync_api import (
    Browser,
    BrowserContext,
    Dialog,
    ElementHandle,
    Error as PwError,
    Page,
    Playwright,
    TimeoutError as PwTimeoutError,
    sync_playwright,
)

from ..core.errors import ActionExecutionError, ElementNotFoundError, TransientObservationError
from .driver import By, Locator, Location, Size

logger = logging.getLogger(__name__)

T = TypeVar("T")

_STALE_MARKERS = ("not attached", "detached", "Execution context was destroyed")

_LOCATION_JS = (
    "e => { const r = e.getBoundingClientRect();"
    " return [Math.round(r.left + window.scrollX), Math.round(r.top + window.scrollY)]; }"
)
_SELECTED_JS = "e => !!(e.checked || e.selected)"


def _selector(locator: Locator) -> str:
    if locator.by is By.CSS:
        return f"css={locator.value}"
    if locator.by is By.XPATH:
        return f"xpath={locator.value}"
    if locator.by is By.ID:
        return f'css=[id="{locator.value}"]'
    return f"text={locator.value}"


class PlaywrightDriver:
    """
    A concrete Driver based on Playwright.
    - One browser, one context and one page per driver (one session).
    - Handles are Playwright `ElementHandle`s from that page.
    """

    def __init__(
        self,
        *,
        headless: bool = True,
        browser: str = "chromium",
        slow_mo_ms: int = 0,
        implicit_wait_ms: int = 2_000,
        page_load_timeout_ms: int = 80_000,
    ) -> None:
        self.headless = headless
        self.browser_name = browser
        self.slow_mo_ms = slow_mo_ms
        self.implicit_wait_ms = implicit_wait_ms
        self.page_load_timeout_ms = page_load_timeout_ms

        self._pw: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None
        self._dialog: Optional[Dialog] = None

    # ---------------- lifecycle ----------------

    def start(self) -> "PlaywrightDriver":
        """Launch Playwright, the browser and a fresh page once."""
        if self._page is not None:
            return self
        pw = sync_playwright().start()
        self._pw = pw
        launcher = getattr(pw, self.browser_name)
        self._browser = launcher.launch(headless=self.headless, slow_mo=self.slow_mo_ms)
        self._context = self._browser.new_context()
        self._context.set_default_navigation_timeout(self.page_load_timeout_ms)
        self._page = self._context.new_page()
        self._page.on("dialog", self._on_dialog)
        return self

    def stop(self) -> None:
        """Close the page, context and browser, then stop Playwright."""
        try:
            if self._context is not None:
                self._context.close()
            if self._browser is not None:
                self._browser.close()
        finally:
            if self._pw is not None:
                self._pw.stop()
            self._pw = None
            self._browser = None
            self._context = None
            self._page = None
            self._dialog = None

    def quit(self) -> None:
        self.stop()

    # ---------------- lookup ----------------

    def find_elements(self, locator: Locator, parent: Any = None) -> List[ElementHandle]:
        root = parent if parent is not None else self.page
        return self._guard(lambda: root.query_selector_all(_selector(locator)))

    def find_element(self, locator: Locator, parent: Any = None) -> ElementHandle:
        root = parent if parent is not None else self.page
        try:
            el = self._guard(
                lambda: root.wait_for_selector(
                    _selector(locator), state="attached", timeout=self.implicit_wait_ms
                )
            )
        except PwTimeoutError as e:
            raise ElementNotFoundError(
                "no element matches locator", locator=locator, cause=e
            ) from e
        if el is None:
            raise ElementNotFoundError("no element matches locator", locator=locator)
        return el

    # ---------------- navigation ----------------

    def navigate(self, url: str) -> None:
        self.page.goto(url, wait_until="load")

    def refresh(self) -> None:
        self.page.reload(wait_until="load")

    def current_url(self) -> Optional[str]:
        return self.page.url or None

    def execute_script(self, source: str, *args: Any) -> Any:
        # Selenium-style bodies ("return x") are wrapped into a function.
        body = source if source.lstrip().startswith(("(", "function", "async")) else (
            f"(args) => {{ {source} }}"
        )
        return self._guard(lambda: self.page.evaluate(body, list(args)))

    # ---------------- element queries ----------------

    def is_displayed(self, el: ElementHandle) -> bool:
        return self._guard(el.is_visible)

    def is_selected(self, el: ElementHandle) -> bool:
        return bool(self._guard(lambda: el.evaluate(_SELECTED_JS)))

    def size(self, el: ElementHandle) -> Size:
        box = self._guard(el.bounding_box)
        if box is None:
            return Size(0, 0)
        return Size(int(box["width"]), int(box["height"]))

    def location(self, el: ElementHandle) -> Location:
        x, y = self._guard(lambda: el.evaluate(_LOCATION_JS))
        return Location(int(x), int(y))

    def tag_name(self, el: ElementHandle) -> str:
        return self._guard(lambda: el.evaluate("e => e.tagName.toLowerCase()"))

    def text(self, el: ElementHandle) -> str:
        return self._guard(el.inner_text)

    def attribute(self, el: ElementHandle, name: str) -> Optional[str]:
        return self._guard(lambda: el.get_attribute(name))

    # ---------------- element interactions ----------------

    def click(self, el: ElementHandle) -> None:
        self._guard(lambda: el.click(timeout=self.implicit_wait_ms))

    def send_keys(self, el: ElementHandle, text: str) -> None:
        self._guard(lambda: el.type(text))

    def clear(self, el: ElementHandle) -> None:
        self._guard(lambda: el.fill(""))

    def hover(self, el: ElementHandle) -> None:
        self._guard(lambda: el.hover(timeout=self.implicit_wait_ms))

    # ---------------- alerts ----------------

    def alert_present(self) -> bool:
        return self._dialog is not None

    def accept_alert(self) -> None:
        self._take_dialog().accept()

    def dismiss_alert(self) -> None:
        self._take_dialog().dismiss()

    # ---------------- window / touch ----------------

    def window_size(self) -> Size:
        vp = self.page.viewport_size
        if vp is None:
            w, h = self.page.evaluate("() => [window.innerWidth, window.innerHeight]")
            return Size(int(w), int(h))
        return Size(vp["width"], vp["height"])

    def swipe(self, start_x: int, start_y: int, end_x: int, end_y: int, duration_ms: int) -> None:
        mouse = self.page.mouse
        mouse.move(start_x, start_y)
        mouse.down()
        mouse.move(end_x, end_y, steps=max(1, duration_ms // 50))
        mouse.up()

    # ---------------- utilities ----------------

    def delete_cookies(self) -> None:
        self._ensure_started()
        assert self._context is not None
        self._context.clear_cookies()

    def screenshot(self, path: str) -> None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        self.page.screenshot(path=path, full_page=True)

    # ---------------- internals ----------------

    @property
    def page(self) -> Page:
        self._ensure_started()
        assert self._page is not None
        return self._page

    def _ensure_started(self) -> None:
        if self._page is None:
            raise RuntimeError("Browser not started. Call start() first.")

    def _on_dialog(self, dialog: Dialog) -> None:
        logger.debug("dialog opened: %s %r", dialog.type, dialog.message)
        self._dialog = dialog

    def _take_dialog(self) -> Dialog:
        if self._dialog is None:
            raise ActionExecutionError("no alert is open", action="alert")
        dialog, self._dialog = self._dialog, None
        return dialog

    @staticmethod
    def _guard(fn: Callable[[], T]) -> T:
        """Run a Playwright call, mapping detached-node errors to staleness."""
        try:
            return fn()
        except PwTimeoutError:
            raise
        except PwError as e:
            if any(marker in str(e) for marker in _STALE_MARKERS):
                raise TransientObservationError("stale element handle", cause=e) from e
            raise
