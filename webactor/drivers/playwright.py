"""Puppeteer-style backend over async Playwright."""

from __future__ import annotations

import functools
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from playwright.async_api import Dialog, Frame, Page
from playwright.async_api import Error as PlaywrightError

from webactor.drivers import BaseDriver, DialogCallback
from webactor.exceptions import DriverError
from webactor.logger import get_logger
from webactor.models import DialogKind, ElementHandle, Query, TabInfo

log = get_logger(__name__)

T = TypeVar("T")

_ELEMENT_ID = """(el) => {
    if (!el.__webactorId) {
        window.__webactorSeq = (window.__webactorSeq || 0) + 1;
        el.__webactorId = String(window.__webactorSeq);
    }
    return el.__webactorId;
}"""

_COMPUTED_STYLE = "(el, name) => getComputedStyle(el).getPropertyValue(name)"

_CARET_TO_END = """(el) => {
    el.focus();
    if (typeof el.value === "string" && el.setSelectionRange) {
        try { el.setSelectionRange(el.value.length, el.value.length); } catch (e) {}
    }
}"""


def _translated(
    method: Callable[..., Awaitable[T]],
) -> Callable[..., Awaitable[T]]:
    """Re-raise Playwright errors as DriverError."""

    @functools.wraps(method)
    async def wrapper(self: PlaywrightDriver, *args: Any, **kwargs: Any) -> T:
        try:
            return await method(self, *args, **kwargs)
        except PlaywrightError as exc:
            raise DriverError(f"{method.__name__} failed: {exc.message}") from exc

    return wrapper


class PlaywrightDriver(BaseDriver):
    """Drives the pages of one Playwright browser context.

    The caller owns the browser: pass the page the session starts on. Tabs
    are the context's pages in opening order.
    """

    dialogs_block_page = True

    def __init__(self, page: Page) -> None:
        self._page = page
        self._context = page.context
        self._frame: Frame | None = None
        self._dialog: Dialog | None = None
        self._callback: DialogCallback | None = None
        self._watched: list[Page] = []
        self._watch(page)
        self._context.on("page", self._watch)

    @property
    def name(self) -> str:
        return "playwright"

    @property
    def page(self) -> Page:
        """The page of the active tab."""
        return self._page

    def _scope(self) -> Frame:
        return self._frame or self._page.main_frame

    # --- Navigation ---

    @_translated
    async def navigate(self, url: str) -> None:
        self._frame = None
        await self._page.goto(url)

    async def current_url(self) -> str:
        return self._page.url

    @_translated
    async def page_source(self) -> str:
        return await self._scope().content()

    @_translated
    async def title(self) -> str:
        return await self._page.title()

    # --- Elements ---

    @_translated
    async def query_all(
        self, query: Query, within: ElementHandle | None = None
    ) -> list[Any]:
        selector = f"{query.kind}={query.value}"
        root = within.native if within is not None else self._scope()
        return await root.query_selector_all(selector)

    @_translated
    async def element_id(self, handle: ElementHandle) -> str:
        return await handle.native.evaluate(_ELEMENT_ID)

    @_translated
    async def is_visible(self, handle: ElementHandle) -> bool:
        return await handle.native.is_visible()

    @_translated
    async def read_text(self, handle: ElementHandle) -> str:
        return await handle.native.inner_text()

    @_translated
    async def read_attribute(self, handle: ElementHandle, name: str) -> str | None:
        return await handle.native.get_attribute(name)

    @_translated
    async def read_css_property(self, handle: ElementHandle, name: str) -> str:
        return await handle.native.evaluate(_COMPUTED_STYLE, name)

    @_translated
    async def read_property(self, handle: ElementHandle, name: str) -> Any:
        prop = await handle.native.get_property(name)
        return await prop.json_value()

    # --- Native actions ---

    @_translated
    async def perform_click(self, handle: ElementHandle) -> None:
        await handle.native.click()

    @_translated
    async def hover(self, handle: ElementHandle) -> None:
        await handle.native.hover()

    @_translated
    async def type_into(self, handle: ElementHandle, text: str, clear: bool) -> None:
        if clear:
            await handle.native.fill(text)
            return
        await handle.native.evaluate(_CARET_TO_END)
        await self._page.keyboard.type(text)

    @_translated
    async def perform_key_press(self, modifiers: list[str], keys: list[str]) -> None:
        keyboard = self._page.keyboard
        for modifier in modifiers:
            await keyboard.down(modifier)
        try:
            for key in keys:
                await keyboard.press(key)
        finally:
            for modifier in reversed(modifiers):
                await keyboard.up(modifier)

    @_translated
    async def resize_window(self, width: int, height: int) -> None:
        await self._page.set_viewport_size({"width": width, "height": height})

    # --- Tabs ---

    async def list_tabs(self) -> list[TabInfo]:
        return [
            TabInfo(index=index, url=page.url)
            for index, page in enumerate(self._context.pages)
        ]

    @_translated
    async def activate_tab(self, index: int) -> None:
        page = self._page_at(index)
        await page.bring_to_front()
        self._page = page
        self._frame = None
        self._watch(page)

    @_translated
    async def close_tab(self, index: int) -> None:
        await self._page_at(index).close()

    @_translated
    async def open_blank_tab(self) -> None:
        self._watch(await self._context.new_page())

    def _page_at(self, index: int) -> Page:
        pages = self._context.pages
        if not 0 <= index < len(pages):
            raise DriverError(f"No tab at index {index}")
        return pages[index]

    # --- Dialogs ---

    def on_dialog_opened(self, callback: DialogCallback | None) -> None:
        self._callback = callback

    def _watch(self, page: Page) -> None:
        if page in self._watched:
            return
        self._watched.append(page)
        page.on("dialog", self._handle_dialog)

    async def _handle_dialog(self, dialog: Dialog) -> None:
        self._dialog = dialog
        if self._callback is None:
            # Playwright's behaviour without a listener.
            await self.resolve_dialog(False)
            return
        await self._callback(DialogKind(dialog.type), dialog.message)

    @_translated
    async def resolve_dialog(self, accept: bool) -> None:
        dialog = self._dialog
        if dialog is None:
            raise DriverError("No dialog is open")
        self._dialog = None
        if accept:
            await dialog.accept()
        else:
            await dialog.dismiss()

    # --- Frames ---

    @_translated
    async def enter_frame(self, handle: ElementHandle) -> None:
        frame = await handle.native.content_frame()
        if frame is None:
            raise DriverError("Element does not host a frame")
        self._frame = frame
        log.debug("frame_scope", url=frame.url)

    async def exit_to_root(self) -> None:
        self._frame = None
