"""
Session: one driver, one TimeoutPolicy, one actions facade and one cached page.

Page lifecycle and the single-slot page cache:

    EMPTY  --open/load/refresh succeeds-->  LOADED
    LOADED --URL or requested class changes-->  STALE
    any    --navigate / reload / failed check-->  EMPTY (then reloaded)

`load_top_level_page(cls)` reuses the cached page only when it is an instance
of `cls` and the driver's current host and path (trailing slash ignored) equal
the ones recorded when the page was cached. Anything unparsable counts as a
miss. The slot is always replaced or cleared as a whole, never edited.
"""
# @file purpose: Session-owned page lifecycle and single-slot page cache.

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Type, TypeVar
from urllib.parse import urljoin, urlsplit

from ..actions.base import ElementActions
from ..actions.platforms import Platform, actions_for
from ..core.timeouts import TimeoutPolicy
from ..io.driver import Driver
from ..pages.base import SubPage, TopLevelPage
from ..pages.binder import DeclarativeBinder, ElementBinder
from ..pages.utils import load_current_page

logger = logging.getLogger(__name__)

TP = TypeVar("TP", bound=TopLevelPage)
SP = TypeVar("SP", bound=SubPage)


class PageState(str, Enum):
    EMPTY = "empty"
    LOADED = "loaded"
    STALE = "stale"


@dataclass(frozen=True)
class CachedPage:
    url: str
    page: TopLevelPage


def _host_and_path(url: str) -> tuple[Optional[str], str]:
    parts = urlsplit(url)
    path = parts.path[:-1] if parts.path.endswith("/") else parts.path
    return parts.hostname, path


class Session:
    def __init__(
        self,
        driver: Driver,
        *,
        base_url: str,
        timeouts: Optional[TimeoutPolicy] = None,
        platform: Platform = Platform.WEB,
        binder: Optional[ElementBinder] = None,
    ) -> None:
        self.driver = driver
        self.base_url = base_url
        self.timeouts = timeouts or TimeoutPolicy()
        self.platform = Platform(platform)
        self.binder: ElementBinder = binder or DeclarativeBinder()
        self.actions: ElementActions = actions_for(self, self.platform)
        self._cached: Optional[CachedPage] = None

    # ---------------- cache ----------------

    @property
    def cached_page(self) -> Optional[TopLevelPage]:
        return self._cached.page if self._cached is not None else None

    @property
    def state(self) -> PageState:
        if self._cached is None:
            return PageState.EMPTY
        if self._should_use_cached_page(type(self._cached.page)):
            return PageState.LOADED
        return PageState.STALE

    def invalidate_cached_page(self) -> None:
        self._cached = None

    def run_leave_page_hook(self) -> None:
        if self._cached is not None:
            self._cached.page.leave_page_hook()

    # ---------------- navigation & loading ----------------

    def resolve_url(self, href: str) -> str:
        """Absolute hrefs pass through; anything else is joined onto base_url."""
        if urlsplit(href).scheme:
            return href
        base = self.base_url if self.base_url.endswith("/") else self.base_url + "/"
        return urljoin(base, href.lstrip("/"))

    def open_page_by_url(self, href: str, page_cls: Type[TP] = TopLevelPage) -> TP:  # type: ignore[assignment]
        url = self.resolve_url(href)
        logger.info("Opening web page by URL %s", url)
        self.run_leave_page_hook()
        self.invalidate_cached_page()
        self.driver.navigate(url)
        return self._load_fresh(page_cls)

    def load_top_level_page(self, page_cls: Type[TP]) -> TP:
        if self._should_use_cached_page(page_cls):
            logger.info("CACHE HIT: Fetching page of type %s from the page cache", page_cls.__name__)
            assert self._cached is not None
            return self._cached.page  # type: ignore[return-value]
        logger.info("Loading page of type %s", page_cls.__name__)
        self.run_leave_page_hook()
        self.invalidate_cached_page()
        return self._load_fresh(page_cls)

    def reload_top_level_page(self, page_cls: Type[TP]) -> TP:
        """Rebuild the page from the current DOM even if the cache would hit."""
        self.invalidate_cached_page()
        return self.load_top_level_page(page_cls)

    def load_sub_page(self, page_cls: Type[SP]) -> SP:
        """Sub pages are never cached."""
        return load_current_page(page_cls, self.actions)

    def refresh_page(self, page_cls: Optional[Type[TP]] = None) -> Optional[TP]:
        """
        Reload the browser page.

        Without `page_cls` the cached page (if any) keeps its identity and only
        rebinds its elements. With `page_cls` a fresh page object is built and
        cached.
        """
        self.run_leave_page_hook()
        if page_cls is None:
            self.driver.refresh()
            if self._cached is not None:
                self._cached.page.refresh_elements()
            return None
        self.invalidate_cached_page()
        self.driver.refresh()
        return self._load_fresh(page_cls)

    # ---------------- utilities ----------------

    def current_url(self) -> Optional[str]:
        return self.driver.current_url()

    def clean_session(self) -> None:
        self.driver.delete_cookies()

    def save_screenshot(self, path: str | Path) -> Path:
        out = Path(path)
        self.driver.screenshot(str(out))
        return out

    def quit(self) -> None:
        self.invalidate_cached_page()
        self.driver.quit()

    # ---------------- internals ----------------

    def _load_fresh(self, page_cls: Type[TP]) -> TP:
        page = load_current_page(page_cls, self.actions)
        self._set_cached_page(page)
        return page

    def _set_cached_page(self, page: TopLevelPage) -> None:
        url = self.driver.current_url() or ""
        self._cached = CachedPage(url=url, page=page)
        logger.debug("Set cached page of type %s with URL %s", type(page).__name__, url)

    def _should_use_cached_page(self, page_cls: type) -> bool:
        cached = self._cached
        if cached is None:
            return False
        if not isinstance(cached.page, page_cls):
            return False
        try:
            current_url = self.driver.current_url()
            if not current_url or not cached.url:
                return False
            current_host, current_path = _host_and_path(current_url)
            cached_host, cached_path = _host_and_path(cached.url)
        except ValueError as e:
            logger.debug("Error parsing URLs for the page cache: %s", e)
            return False
        return current_host == cached_host and current_path == cached_path
