"""Shared test fixtures for WebActor.

``FakeDriver`` implements the driver interface over lxml documents so the
core runs its real CSS and XPath queries without a browser.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import urljoin

import lxml.html
import pytest
from cssselect import SelectorError
from lxml import etree

from webactor import WebActor
from webactor.drivers import BaseDriver, DialogCallback
from webactor.exceptions import DriverError
from webactor.models import DialogKind, ElementHandle, Query, TabInfo

# Path to test fixtures
FIXTURES_DIR = Path(__file__).parent / "fixtures"
PAGES_DIR = FIXTURES_DIR / "pages"

BASE_URL = "http://local.test"

ROUTES = {
    "/": "index.html",
    "/info": "info.html",
    "/tab": "tab.html",
    "/form": "form.html",
    "/popup": "popup.html",
    "/iframe": "iframe.html",
    "/frame/inner": "frame_inner.html",
    "/frame/deep": "frame_deep.html",
}

BLANK = "<html><head><title></title></head><body></body></html>"
_HIDDEN_STYLE = re.compile(r"(display\s*:\s*none|visibility\s*:\s*hidden)", re.I)
_INVISIBLE_TAGS = {"head", "script", "style", "title", "meta", "link"}


def load_pages() -> dict[str, str]:
    return {
        BASE_URL + path: (PAGES_DIR / name).read_text(encoding="utf-8")
        for path, name in ROUTES.items()
    }


def inline_style(el: Any) -> dict[str, str]:
    style: dict[str, str] = {}
    for part in (el.get("style") or "").split(";"):
        if ":" in part:
            name, value = part.split(":", 1)
            style[name.strip().lower()] = value.strip()
    return style


@dataclass
class FakeTab:
    url: str = "about:blank"
    root: Any = field(default_factory=lambda: lxml.html.document_fromstring(BLANK))


class FakeDriver(BaseDriver):
    """In-memory browser over lxml.

    Fixture pages script their behaviour with data attributes:
    ``data-dialog``/``data-message`` open a dialog on click (a resolved
    dialog writes Yes or No into ``#result``), ``data-hide``/``data-show``
    toggle ``hidden`` on the elements a CSS selector matches.
    """

    def __init__(self, pages: dict[str, str], dialogs_block_page: bool = False) -> None:
        self.pages = pages
        self.dialogs_block_page = dialogs_block_page
        self.tabs: list[FakeTab] = [FakeTab()]
        self.active = 0
        self.frames: list[Any] = []
        self.callback: DialogCallback | None = None
        self.dialog: tuple[DialogKind, str] | None = None
        self.resolutions: list[bool] = []
        self.clicks: list[Any] = []
        self.hovered: Any = None
        self.key_presses: list[tuple[list[str], list[str]]] = []
        self.window: tuple[int, int] | None = None
        self.query_count = 0
        self._frame_roots: dict[Any, Any] = {}

    @property
    def name(self) -> str:
        return "fake"

    @property
    def tab(self) -> FakeTab:
        return self.tabs[self.active]

    def _root(self) -> Any:
        return self.frames[-1] if self.frames else self.tab.root

    def _load(self, url: str) -> Any:
        if url not in self.pages:
            raise DriverError(f"net::ERR_NAME_NOT_RESOLVED at {url}")
        return lxml.html.document_fromstring(self.pages[url])

    def _blocked(self) -> None:
        if self.dialog is not None:
            raise DriverError("unexpected alert open")

    # --- Navigation ---

    async def navigate(self, url: str) -> None:
        self._blocked()
        self.tab.root = self._load(url)
        self.tab.url = url
        self.frames.clear()

    async def current_url(self) -> str:
        return self.tab.url

    async def page_source(self) -> str:
        return lxml.html.tostring(self._root(), encoding="unicode")

    async def title(self) -> str:
        return self.tab.root.findtext(".//title") or ""

    # --- Elements ---

    async def query_all(
        self, query: Query, within: ElementHandle | None = None
    ) -> list[Any]:
        self._blocked()
        self.query_count += 1
        root = within.native if within is not None else self._root()
        try:
            if query.kind == "css":
                found = root.cssselect(query.value)
            else:
                found = root.xpath(query.value)
        except (etree.XPathError, SelectorError) as exc:
            raise DriverError(f"invalid selector {query.value!r}: {exc}") from exc
        return [el for el in found if isinstance(el, etree.ElementBase)]

    async def element_id(self, handle: ElementHandle) -> str:
        return handle.native.getroottree().getpath(handle.native)

    async def is_visible(self, handle: ElementHandle) -> bool:
        el = handle.native
        if el.tag == "input" and el.get("type") == "hidden":
            return False
        while el is not None:
            if self._hidden(el):
                return False
            el = el.getparent()
        return True

    def _hidden(self, el: Any) -> bool:
        if not isinstance(el.tag, str) or el.tag in _INVISIBLE_TAGS:
            return True
        return el.get("hidden") is not None or bool(
            _HIDDEN_STYLE.search(el.get("style") or "")
        )

    async def read_text(self, handle: ElementHandle) -> str:
        if not await self.is_visible(handle):
            return ""
        return " ".join(self._text(handle.native).split())

    def _text(self, el: Any) -> str:
        parts = [el.text or ""]
        for child in el:
            if isinstance(child.tag, str) and not self._hidden(child):
                parts.append(self._text(child))
            parts.append(child.tail or "")
        return " ".join(parts)

    async def read_attribute(self, handle: ElementHandle, name: str) -> str | None:
        return handle.native.get(name)

    async def read_css_property(self, handle: ElementHandle, name: str) -> str:
        return inline_style(handle.native).get(name, "")

    async def read_property(self, handle: ElementHandle, name: str) -> Any:
        el = handle.native
        if name == "tagName":
            return el.tag.upper()
        if name in ("checked", "multiple", "disabled"):
            return el.get(name) is not None
        if name == "selected":
            return self._selected(el)
        if name == "value":
            return self._value(el)
        return el.get(name)

    def _options(self, select: Any) -> list[Any]:
        return select.xpath(".//option")

    def _selected(self, option: Any) -> bool:
        if option.get("selected") is not None:
            return True
        select = next(option.iterancestors("select"), None)
        if select is None or select.get("multiple") is not None:
            return False
        options = self._options(select)
        none_selected = all(o.get("selected") is None for o in options)
        return none_selected and options[0] is option

    def _value(self, el: Any) -> str:
        if el.tag == "textarea":
            return el.text or ""
        if el.tag == "option":
            return el.get("value", (el.text or "").strip())
        if el.tag == "select":
            for option in self._options(el):
                if self._selected(option):
                    return self._value(option)
            return ""
        if el.get("type") in ("checkbox", "radio"):
            return el.get("value", "on")
        return el.get("value", "")

    # --- Native actions ---

    async def perform_click(self, handle: ElementHandle) -> None:
        self._blocked()
        el = handle.native
        self.clicks.append(el)
        kind = el.get("type")
        if el.tag == "input" and kind == "checkbox":
            self._toggle(el, el.get("checked") is None)
        elif el.tag == "input" and kind == "radio":
            for other in el.getroottree().xpath(f"//input[@type='radio'][@name='{el.get('name')}']"):
                self._toggle(other, False)
            self._toggle(el, True)
        for attr, show in (("data-hide", False), ("data-show", True)):
            if el.get(attr):
                for target in self._root().cssselect(el.get(attr)):
                    if show:
                        target.attrib.pop("hidden", None)
                    else:
                        target.set("hidden", "hidden")
        if el.get("data-dialog"):
            await self._open_dialog(DialogKind(el.get("data-dialog")), el.get("data-message", ""))
            return
        href = el.get("href")
        if el.tag == "a" and href and not href.startswith("#"):
            url = urljoin(self.tab.url, href)
            if el.get("target") == "_blank":
                self.tabs.append(FakeTab(url=url, root=self._load(url)))
            else:
                await self.navigate(url)

    @staticmethod
    def _toggle(el: Any, checked: bool) -> None:
        if checked:
            el.set("checked", "checked")
        else:
            el.attrib.pop("checked", None)

    async def hover(self, handle: ElementHandle) -> None:
        self.hovered = handle.native

    async def type_into(self, handle: ElementHandle, text: str, clear: bool) -> None:
        self._blocked()
        el = handle.native
        if el.tag == "textarea":
            el.text = ("" if clear else el.text or "") + text
        else:
            el.set("value", ("" if clear else el.get("value", "")) + text)

    async def perform_key_press(self, modifiers: list[str], keys: list[str]) -> None:
        self._blocked()
        self.key_presses.append((list(modifiers), list(keys)))

    async def resize_window(self, width: int, height: int) -> None:
        self.window = (width, height)

    # --- Tabs ---

    async def list_tabs(self) -> list[TabInfo]:
        return [TabInfo(index=i, url=tab.url) for i, tab in enumerate(self.tabs)]

    async def activate_tab(self, index: int) -> None:
        if not 0 <= index < len(self.tabs):
            raise DriverError(f"No tab at index {index}")
        self.active = index
        self.frames.clear()

    async def close_tab(self, index: int) -> None:
        del self.tabs[index]
        if self.active >= len(self.tabs):
            self.active = len(self.tabs) - 1

    async def open_blank_tab(self) -> None:
        self.tabs.append(FakeTab())

    # --- Dialogs ---

    def on_dialog_opened(self, callback: DialogCallback | None) -> None:
        self.callback = callback

    async def _open_dialog(self, kind: DialogKind, message: str) -> None:
        self.dialog = (kind, message)
        if self.callback is not None:
            await self.callback(kind, message)

    async def resolve_dialog(self, accept: bool) -> None:
        if self.dialog is None:
            raise DriverError("No dialog is open")
        kind, _ = self.dialog
        self.dialog = None
        self.resolutions.append(accept)
        if kind is not DialogKind.ALERT:
            for result in self.tab.root.cssselect("#result"):
                result.text = "Yes" if accept else "No"

    # --- Frames ---

    async def enter_frame(self, handle: ElementHandle) -> None:
        el = handle.native
        if el not in self._frame_roots:
            self._frame_roots[el] = self._load(el.get("src", ""))
        self.frames.append(self._frame_roots[el])

    async def exit_to_root(self) -> None:
        self.frames.clear()


@pytest.fixture
def pages() -> dict[str, str]:
    """Fixture pages keyed by URL."""
    return load_pages()


@pytest.fixture
def driver(pages: dict[str, str]) -> FakeDriver:
    return FakeDriver(pages)


@pytest.fixture
def blocking_driver(pages: dict[str, str]) -> FakeDriver:
    """A driver whose dialogs stall the page, like Playwright."""
    return FakeDriver(pages, dialogs_block_page=True)


def make_actor(driver: FakeDriver, **options: Any) -> WebActor:
    settings = {
        "url": BASE_URL,
        "wait_for_timeout": 0.3,
        "poll_interval": 0.05,
        "wait_for_action": 0,
    }
    settings.update(options)
    return WebActor(driver, **settings)


@pytest.fixture
async def actor(driver: FakeDriver) -> WebActor:
    """A started session on the fake driver."""
    async with make_actor(driver) as session:
        yield session


@pytest.fixture
async def blocking_actor(blocking_driver: FakeDriver) -> WebActor:
    async with make_actor(blocking_driver) as session:
        yield session


@pytest.fixture
def base_url() -> str:
    return BASE_URL


@pytest.fixture
def load(driver: FakeDriver):
    """Navigate the fake driver straight to a fixture path."""

    async def _load(path: str) -> None:
        await driver.navigate(BASE_URL + path)

    return _load


@pytest.fixture
def actor_factory(driver: FakeDriver):
    """Build an unstarted session with custom settings."""

    def factory(**options: Any) -> WebActor:
        return make_actor(driver, **options)

    return factory
