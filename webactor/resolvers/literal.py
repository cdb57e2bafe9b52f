"""Literal CSS/XPath fallback resolver."""

from __future__ import annotations

from typing import TYPE_CHECKING

from webactor import xpath
from webactor.locator import LocatorStrategy
from webactor.models import ElementKind, Query
from webactor.resolvers import BaseResolver

if TYPE_CHECKING:
    from webactor.locator import Locator


class LiteralResolver(BaseResolver):
    """Use the locator as written; form controls also match by ``name``."""

    @property
    def name(self) -> str:
        return "literal"

    def queries(self, kind: ElementKind, locator: Locator) -> list[Query]:
        queries: list[Query] = []
        if kind is not ElementKind.CLICKABLE and locator.strategy is LocatorStrategy.CSS:
            named = f"@name={xpath.literal(locator.value)}"
            queries.append(Query("xpath", xpath.with_role(kind, named)))
        queries.append(locator.query())
        return queries
