"""Predicates for see/dontSee operations and their failure diagnostics."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from webactor.exceptions import _MISSING, AssertionFailedError
from webactor.models import ElementHandle, Query

if TYPE_CHECKING:
    from webactor.drivers import BaseDriver

_FONT_WEIGHTS = {"normal": "400", "bold": "700"}
_RGB = re.compile(r"^rgb\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*\)$")
_RGBA = re.compile(r"^rgba\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*,\s*([\d.]+)\s*\)$")
_CHECKABLE_TYPES = frozenset({"checkbox", "radio"})


@dataclass
class Check:
    """Outcome of one predicate, with what is needed to report it."""

    passed: bool
    subject: str
    relation: str
    expected: Any
    actual: Any = field(default=_MISSING)
    message: str | None = None
    negated_message: str | None = None


def equals(subject: str, expected: Any, actual: Any) -> Check:
    return Check(actual == expected, subject, "equal", expected, actual)


def title_equals(expected: str, actual: str) -> Check:
    return Check(
        actual == expected,
        "web page title",
        "be",
        expected,
        actual,
        message=f"expected web page title to be {expected}, but found {actual}",
        negated_message=f"expected web page title not to be {expected}",
    )


def includes(
    subject: str, needle: str, haystack: str | list[str], actual: Any = _MISSING
) -> Check:
    """``needle`` is a substring of the text, or of any text in a list."""
    texts = [haystack] if isinstance(haystack, str) else haystack
    passed = any(needle in text for text in texts)
    return Check(passed, subject, "include", needle, actual)


def count_equals(
    locator: str, expected: int, actual: int, visible: bool = False
) -> Check:
    what = "visible elements" if visible else "elements"
    return Check(
        actual == expected,
        f"number of {what} ({locator})",
        "be",
        expected,
        actual,
        message=f"expected number of {what} ({locator}) is {expected}, but found {actual}",
        negated_message=f"expected number of {what} ({locator}) is not {expected}",
    )


def _compact(mapping: dict[str, Any]) -> str:
    return json.dumps(mapping, separators=(",", ":"), ensure_ascii=False)


def normalize_css(name: str, value: Any) -> str:
    """Canonical form for comparing CSS values across backends."""
    text = str(value).strip()
    if name == "font-weight":
        return _FONT_WEIGHTS.get(text.lower(), text)
    match = _RGB.match(text)
    if match:
        return "rgba({}, {}, {}, 1)".format(*match.groups())
    match = _RGBA.match(text)
    if match:
        r, g, b, a = match.groups()
        return f"rgba({r}, {g}, {b}, {float(a):g})"
    return text


class AssertionEngine:
    """Evaluates predicates over element values read from the driver.

    ``verify`` is the only place a Check becomes an error; the negated form
    of every see-assertion is the same Check verified with ``negate=True``.
    """

    def __init__(self, driver: BaseDriver) -> None:
        self._driver = driver

    def verify(self, check: Check, negate: bool = False) -> None:
        if check.passed != negate:
            return
        if negate:
            raise AssertionFailedError(
                check.subject,
                check.relation,
                check.expected,
                negated=True,
                message=check.negated_message,
            )
        raise AssertionFailedError(
            check.subject,
            check.relation,
            check.expected,
            actual=check.actual,
            message=check.message,
        )

    async def text_check(
        self, subject: str, handles: list[ElementHandle], needle: str
    ) -> Check:
        texts = [await self._driver.read_text(h) for h in handles]
        return includes(subject, needle, texts)

    async def visibility_check(
        self, locator: str, handles: list[ElementHandle]
    ) -> Check:
        visible = [h for h in handles if await self._driver.is_visible(h)]
        return Check(
            bool(visible),
            f"elements of {locator}",
            "be",
            "seen",
            message=f"expected element {locator} to be visible",
            negated_message=f"expected element {locator} not to be visible",
        )

    async def attributes_check(
        self, locator: str, handles: list[ElementHandle], expected: dict[str, Any]
    ) -> Check:
        """All matched elements carry all given attribute values."""
        passed = True
        for handle in handles:
            for name, value in expected.items():
                actual = await self._driver.read_attribute(handle, name)
                if actual != str(value):
                    passed = False
                    break
            if not passed:
                break
        return Check(
            passed,
            f"elements ({locator})",
            "have attributes",
            expected,
            message=f"Not all elements ({locator}) have attributes {_compact(expected)}",
        )

    async def css_check(
        self, locator: str, handles: list[ElementHandle], expected: dict[str, Any]
    ) -> Check:
        """All matched elements have all given computed CSS values."""
        wanted = {name: normalize_css(name, value) for name, value in expected.items()}
        passed = True
        for handle in handles:
            for name, value in wanted.items():
                actual = await self._driver.read_css_property(handle, name)
                if normalize_css(name, actual) != value:
                    passed = False
                    break
            if not passed:
                break
        return Check(
            passed,
            f"elements ({locator})",
            "have CSS property",
            expected,
            message=f"Not all elements ({locator}) have CSS property {_compact(expected)}",
        )

    async def checked_check(self, locator: str, handles: list[ElementHandle]) -> Check:
        checked = [bool(await self._driver.read_property(h, "checked")) for h in handles]
        return Check(
            any(checked),
            f"checkable {locator}",
            "be",
            "checked",
            message=f"expected checkable {locator} to be checked",
            negated_message=f"expected checkable {locator} not to be checked",
        )

    async def field_check(
        self, locator: str, handles: list[ElementHandle], expected: str | bool
    ) -> Check:
        """Compare a field's canonical value with ``expected``.

        Booleans compare the checked state of the first match; checkbox and
        radio groups compare against the set of checked values; selects
        against the selected option values; other fields their value.
        """
        subject = f"fields by {locator}"
        first = handles[0]
        tag = str(await self._driver.read_property(first, "tagName") or "").lower()
        kind = (await self._driver.read_attribute(first, "type") or "").lower()
        checkable = tag == "input" and kind in _CHECKABLE_TYPES

        if isinstance(expected, bool):
            if checkable:
                actual = bool(await self._driver.read_property(first, "checked"))
            else:
                actual = bool(await self._value(first))
            return Check(actual == expected, subject, "be", expected, actual)

        wanted = str(expected)
        if checkable:
            values = [
                await self._value(h)
                for h in handles
                if await self._driver.read_property(h, "checked")
            ]
            return Check(wanted in values, subject, "include", wanted, values)
        if tag == "select":
            values = await self.selected_values(first)
            multiple = bool(await self._driver.read_property(first, "multiple"))
            if not multiple:
                values = values[:1] or [""]
            actual = values if multiple else values[0]
            return Check(wanted in values, subject, "include", wanted, actual)
        value = await self._value(first)
        return Check(value == wanted, subject, "include", wanted, value)

    async def selected_values(self, select: ElementHandle) -> list[str]:
        natives = await self._driver.query_all(Query("xpath", ".//option"), select)
        values = []
        for native in natives:
            option = ElementHandle(native, select.context)
            if await self._driver.read_property(option, "selected"):
                values.append(await self._value(option))
        return values

    async def _value(self, handle: ElementHandle) -> str:
        value = await self._driver.read_property(handle, "value")
        return "" if value is None else str(value)
