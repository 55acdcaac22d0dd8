"""
Page objects.

- Page: anything built from the current DOM through bind+hook
- TopLevelPage: a whole web page (or app screen), optionally tied to a URL path
  with @web_page_path and to an identifier locator
- SubPage: a fragment of a page (nav bar, side bar, list item) with a
  container locator and a back-reference to its parent page

Fields are declared on the class:

    @web_page_path("/login")
    class LoginPage(TopLevelPage):
        page_identifier = "#login-form"
        username = Element("#username")
        rows = Elements("table tr")
        header = SubPageField(HeaderBar)
"""
# @file purpose: Page object base classes and declarative field markers.

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Generic, Optional, Type, TypeVar

from ..core.timeouts import TimeoutCategory
from ..io.driver import LocatorLike

if TYPE_CHECKING:
    from ..actions.base import ElementActions

logger = logging.getLogger(__name__)

P = TypeVar("P", bound="Page")
S = TypeVar("S", bound="SubPage")


# ------------------------------------------------------------------------------
# declarative fields
# ------------------------------------------------------------------------------


class _Field:
    """Class-level marker; the bound value lives in the instance __dict__."""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Any, owner: type) -> Any:
        if instance is None:
            return self
        return instance.__dict__.get(self.name, self._unbound())

    def _unbound(self) -> Any:
        return None


class Element(_Field):
    """First element matching `locator`, or None when absent at bind time."""

    def __init__(self, locator: LocatorLike) -> None:
        self.locator = locator


class Elements(_Field):
    """All elements matching `locator` at bind time."""

    def __init__(self, locator: LocatorLike) -> None:
        self.locator = locator

    def _unbound(self) -> Any:
        return []


class SubPageField(_Field, Generic[S]):
    """A nested SubPage, bound recursively with the owning page as parent."""

    def __init__(self, page_cls: Type[S]) -> None:
        self.page_cls = page_cls


def declared_fields(cls: type, kind: type) -> dict[str, Any]:
    """Fields of `kind` declared on `cls` or any base; subclasses win on name clashes."""
    found: dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        for name, value in vars(klass).items():
            if isinstance(value, kind):
                found[name] = value
            elif name in found:
                del found[name]
    return found


# ------------------------------------------------------------------------------
# pages
# ------------------------------------------------------------------------------


@dataclass(frozen=True)
class WebPagePath:
    path: str
    regex: bool = False


def web_page_path(path: str, *, regex: bool = False) -> Callable[[Type[P]], Type[P]]:
    """Class decorator declaring the URL path a TopLevelPage lives at."""

    def deco(cls: Type[P]) -> Type[P]:
        cls.page_path = WebPagePath(path=path, regex=regex)
        return cls

    return deco


class Page:
    """Common base: holds the actions facade and runs the default load hook."""

    page_identifier: Optional[LocatorLike] = None

    def __init__(self, actions: "ElementActions") -> None:
        self.actions = actions

    @property
    def a(self) -> "ElementActions":
        """Short alias used inside page methods: self.a.click(...)."""
        return self.actions

    def page_load_hook(self) -> None:
        """Wait for the page identifier, if the page declares one."""
        if self.page_identifier is not None:
            self.actions.verify_element_present(self.page_identifier, TimeoutCategory.PAGE_LOAD)

    def init_sub_pages(self) -> None:
        from .utils import init_sub_pages

        init_sub_pages(self, self.actions)


class TopLevelPage(Page):
    page_path: Optional[WebPagePath] = None

    @property
    def web_page_path(self) -> str:
        return self.page_path.path if self.page_path is not None else "/"

    def page_load_hook(self) -> None:
        self.verify_current_url()
        super().page_load_hook()

    def verify_current_url(self) -> None:
        """
        Check the browser's current path against @web_page_path.

        A plain path only has to be a suffix of the current path (the server's
        root context is unknown); a regex must match the whole path.
        Touch platforms and drivers without a URL skip the check.
        """
        if self.page_path is None or self.actions.session.platform.is_touch:
            return
        current_url = self.actions.get_current_url()
        if current_url is None:
            return

        from .utils import verify_path

        verify_path(current_url, self.page_path.path, regex=self.page_path.regex)

    def leave_page_hook(self) -> None:
        """Runs before the session navigates away from (or reloads) this page."""

    def refresh_elements(self) -> None:
        """Rebind element fields against the current DOM and re-run the hooks."""
        session = self.actions.session
        session.binder.bind(self, session.driver)
        self.init_sub_pages()
        self.page_load_hook()

    def refresh_page(self) -> None:
        session = self.actions.session
        session.refresh_page()
        if session.cached_page is not self:
            self.refresh_elements()


class SubPage(Page):
    container: Optional[LocatorLike] = None

    def __init__(self, actions: "ElementActions", parent: Optional[Page] = None) -> None:
        super().__init__(actions)
        self.parent = parent

    def has_parent(self) -> bool:
        return self.parent is not None
