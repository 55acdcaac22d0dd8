"""
ElementBinder: populate a page object's declared Element/Elements fields from
the driver's current DOM.

DeclarativeBinder reads the field markers declared on the page class (see
pages/base.py). SubPages search inside their container element when they declare
one and it is present, otherwise from the document root.
"""
# @file purpose: Bind declared element fields to fresh driver handles.

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol, TypeVar

from ..io.driver import Driver, ElementHandle, as_locator
from .base import Element, Elements, Page, SubPage, declared_fields

logger = logging.getLogger(__name__)

P = TypeVar("P", bound=Page)


class ElementBinder(Protocol):
    def bind(self, page: P, driver: Driver) -> P: ...


class DeclarativeBinder:
    def bind(self, page: P, driver: Driver) -> P:
        root = self._search_root(page, driver)
        cls = type(page)
        for name, field in declared_fields(cls, Element).items():
            found = driver.find_elements(as_locator(field.locator), root)
            page.__dict__[name] = found[0] if found else None
        for name, field in declared_fields(cls, Elements).items():
            page.__dict__[name] = list(driver.find_elements(as_locator(field.locator), root))
        logger.debug("bound %s", cls.__name__)
        return page

    @staticmethod
    def _search_root(page: Any, driver: Driver) -> Optional[ElementHandle]:
        if not isinstance(page, SubPage) or page.container is None:
            return None
        found = driver.find_elements(as_locator(page.container))
        return found[0] if found else None
