"""Visible text resolver."""

from __future__ import annotations

from typing import TYPE_CHECKING

from webactor import xpath
from webactor.models import ElementKind, Query
from webactor.resolvers import BaseResolver

if TYPE_CHECKING:
    from webactor.locator import Locator


class VisibleTextResolver(BaseResolver):
    """Links and buttons whose visible text equals the locator text."""

    @property
    def name(self) -> str:
        return "text"

    def queries(self, kind: ElementKind, locator: Locator) -> list[Query]:
        if kind is not ElementKind.CLICKABLE or not locator.text:
            return []
        text = xpath.literal(locator.text)
        branches = [
            f".//a[normalize-space(.)={text}]",
            f".//button[normalize-space(.)={text}]",
            f".//*[@role='button' or @role='link'][normalize-space(.)={text}]",
            ".//input[@type='submit' or @type='button' or @type='reset']"
            f"[normalize-space(@value)={text}]",
            f".//a[.//img[normalize-space(@alt)={text}]]",
        ]
        return [Query("xpath", " | ".join(branches))]
