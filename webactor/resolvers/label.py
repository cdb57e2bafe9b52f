"""Form label resolver."""

from __future__ import annotations

from typing import TYPE_CHECKING

from webactor import xpath
from webactor.models import ElementKind, Query
from webactor.resolvers import BaseResolver

if TYPE_CHECKING:
    from webactor.locator import Locator


class LabelResolver(BaseResolver):
    """Form controls associated with a label containing the locator text.

    Covers both ``<label for=...>`` and controls nested inside the label.
    """

    @property
    def name(self) -> str:
        return "label"

    def queries(self, kind: ElementKind, locator: Locator) -> list[Query]:
        if kind is ElementKind.CLICKABLE or not locator.text:
            return []
        label = f"label[contains(normalize-space(.), {xpath.literal(locator.text)})]"
        role = xpath.ROLE_PREDICATES[kind]
        by_for = xpath.with_role(kind, f"@id=//{label}/@for")
        nested = f".//{label}//*[{role}]"
        return [Query("xpath", f"{by_for} | {nested}")]
