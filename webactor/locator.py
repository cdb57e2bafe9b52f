"""Locator parsing: selector expressions to strategy-tagged descriptors."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from webactor import xpath
from webactor.models import Query

# Characters that only make sense in a CSS selector, never in plain prose.
_CSS_SIGNIFICANT = frozenset("#.[]:>+~*=()'\"|^$@/\\")


class LocatorStrategy(str, Enum):
    """Available lookup strategies."""

    CSS = "css"
    XPATH = "xpath"
    ID = "id"
    NAME = "name"
    ACCESSIBILITY_ID = "accessibility_id"
    TEXT = "text"


_STRUCTURED_KEYS: dict[str, LocatorStrategy] = {
    "css": LocatorStrategy.CSS,
    "xpath": LocatorStrategy.XPATH,
    "id": LocatorStrategy.ID,
    "name": LocatorStrategy.NAME,
    "aria": LocatorStrategy.ACCESSIBILITY_ID,
    "accessibility_id": LocatorStrategy.ACCESSIBILITY_ID,
    "android": LocatorStrategy.ACCESSIBILITY_ID,
    "ios": LocatorStrategy.ACCESSIBILITY_ID,
    "text": LocatorStrategy.TEXT,
}


class Locator(BaseModel):
    """A parsed selector. Exactly one strategy is active per instance.

    ``text`` is set when the selector may also be read as literal visible
    text, which the semantic helpers (clickable, checkable, field) use
    before falling back to the strategy itself.
    """

    model_config = ConfigDict(frozen=True)

    strategy: LocatorStrategy
    value: str
    raw: str
    text: str | None = None

    def query(self) -> Query:
        """Compile to a driver query (CSS or XPath only)."""
        if self.strategy is LocatorStrategy.CSS:
            return Query("css", self.value)
        if self.strategy is LocatorStrategy.XPATH:
            return Query("xpath", self.value)
        if self.strategy is LocatorStrategy.ID:
            return Query("xpath", xpath.attribute_equals("id", self.value))
        if self.strategy is LocatorStrategy.NAME:
            return Query("xpath", xpath.attribute_equals("name", self.value))
        if self.strategy is LocatorStrategy.ACCESSIBILITY_ID:
            return Query("xpath", xpath.attribute_equals("aria-label", self.value))
        return Query("xpath", xpath.containing_text(self.value))

    def __str__(self) -> str:
        return self.raw


def _looks_like_xpath(value: str) -> bool:
    return value.startswith(("//", "(", "./", "../"))


def parse(selector: str | dict[str, str] | Locator) -> Locator:
    """Build a Locator from a string, a ``{strategy: value}`` dict or a Locator.

    Malformed CSS or XPath is accepted here; the driver reports it at
    resolution time, where it counts as zero matches.
    """
    if isinstance(selector, Locator):
        return selector
    if isinstance(selector, dict):
        return _parse_structured(selector)
    if not isinstance(selector, str):
        raise TypeError(f"Unsupported locator type: {type(selector).__name__}")

    value = selector.strip()
    if not value:
        raise ValueError("Locator must not be empty")
    if _looks_like_xpath(value):
        return Locator(strategy=LocatorStrategy.XPATH, value=value, raw=selector)
    if value.startswith("~"):
        return Locator(
            strategy=LocatorStrategy.ACCESSIBILITY_ID, value=value[1:], raw=selector
        )
    text = None if _CSS_SIGNIFICANT.intersection(value) else value
    return Locator(strategy=LocatorStrategy.CSS, value=value, raw=selector, text=text)


def _parse_structured(selector: dict[str, Any]) -> Locator:
    keys = [key for key in selector if key in _STRUCTURED_KEYS]
    if len(keys) != 1 or len(selector) != 1:
        raise ValueError(
            f"Structured locator needs exactly one of {sorted(_STRUCTURED_KEYS)}, "
            f"got {sorted(selector)}"
        )
    key = keys[0]
    value = str(selector[key])
    strategy = _STRUCTURED_KEYS[key]
    return Locator(
        strategy=strategy,
        value=value,
        raw=f"{{{key}: {value}}}",
        text=value if strategy is LocatorStrategy.TEXT else None,
    )
