"""
Helpers shared by the session and the page classes: bind+hook, sub page
initialization and URL path verification.
"""
# @file purpose: Page loading helpers (bind+hook, sub pages, path checks).

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Type, TypeVar
from urllib.parse import urlsplit

from ..core.errors import InvalidPageUrlError
from .base import Page, SubPage, SubPageField, declared_fields

if TYPE_CHECKING:
    from ..actions.base import ElementActions

logger = logging.getLogger(__name__)

P = TypeVar("P", bound=Page)


def load_current_page(page_cls: Type[P], actions: "ElementActions") -> P:
    """
    Bind+hook: build `page_cls` from the current DOM, bind its sub pages, then
    run its load hook. Any hook failure propagates to the caller.
    """
    session = actions.session
    page = page_cls(actions)
    session.binder.bind(page, session.driver)
    page.init_sub_pages()
    page.page_load_hook()
    return page


def init_sub_pages(page: Page, actions: "ElementActions") -> None:
    for name, field in declared_fields(type(page), SubPageField).items():
        if not issubclass(field.page_cls, SubPage):
            logger.warning(
                "%s.%s is declared as a sub page but %s is not a SubPage",
                type(page).__name__,
                name,
                field.page_cls.__name__,
            )
            continue
        session = actions.session
        sub = field.page_cls(actions, parent=page)
        session.binder.bind(sub, session.driver)
        sub.page_load_hook()
        sub.init_sub_pages()
        page.__dict__[name] = sub


def _strip_trailing_slash(path: str) -> str:
    return path[:-1] if path.endswith("/") else path


def verify_path(current_url: str, expected: str, *, regex: bool = False) -> None:
    """
    Raise InvalidPageUrlError unless the path of `current_url` matches `expected`.
    Trailing slashes are ignored on both sides.
    """
    try:
        current_path = _strip_trailing_slash(urlsplit(current_url).path)
    except ValueError as e:
        raise InvalidPageUrlError(
            f"Cannot parse the current URL of the web browser: {current_url}",
            action="verify_current_url",
            url=current_url,
            cause=e,
        ) from e
    expected_path = _strip_trailing_slash(expected)

    if regex:
        if re.fullmatch(expected_path, current_path) is None:
            raise InvalidPageUrlError(
                f"The current path of the web browser is {current_path}, "
                f"but expected it to match the regex '{expected_path}'",
                action="verify_current_url",
                url=current_url,
            )
        logger.info("SUCCESS - the current path %s matches the regex '%s'", current_path, expected_path)
        return

    if not current_path.endswith(expected_path):
        raise InvalidPageUrlError(
            f"The current path of the web browser is {current_path}, "
            f"but expected the path to end with '{expected_path}'",
            action="verify_current_url",
            url=current_url,
        )
    logger.info("SUCCESS - the current path %s matches the required path '%s'", current_path, expected_path)
