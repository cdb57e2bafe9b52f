"""Accessible name resolver."""

from __future__ import annotations

from typing import TYPE_CHECKING

from webactor import xpath
from webactor.models import Query
from webactor.resolvers import BaseResolver

if TYPE_CHECKING:
    from webactor.locator import Locator
    from webactor.models import ElementKind


class AccessibleNameResolver(BaseResolver):
    """Exact accessible-name match on elements of the requested role."""

    @property
    def name(self) -> str:
        return "aria"

    def queries(self, kind: ElementKind, locator: Locator) -> list[Query]:
        if not locator.text:
            return []
        text = xpath.literal(locator.text)
        condition = f"@aria-label={text} or @title={text}"
        return [Query("xpath", xpath.with_role(kind, condition))]
