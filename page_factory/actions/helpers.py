"""Element helpers that need a driver but no waiting."""
# @file purpose: CSS class inspection helpers.

from __future__ import annotations

from typing import List

from ..io.driver import Driver, ElementHandle


def css_classes(driver: Driver, el: ElementHandle) -> List[str]:
    """Classes of `el`; the class attribute may contain runs of whitespace."""
    raw = driver.attribute(el, "class")
    if not raw:
        return []
    return raw.split()


def has_class(driver: Driver, el: ElementHandle, css_class: str) -> bool:
    return css_class in css_classes(driver, el)
