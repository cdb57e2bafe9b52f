"""WebDriver-style backend over Selenium.

Selenium is blocking, so every remote call runs in a worker thread. The
protocol has no dialog events: after each native action the driver probes
for an open alert and reports it to the registered callback.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Callable
from typing import Any, TypeVar

from selenium.common.exceptions import NoAlertPresentException, WebDriverException
from selenium.webdriver.common.action_chains import ActionChains
from selenium.webdriver.common.by import By
from selenium.webdriver.common.keys import Keys
from selenium.webdriver.remote.webdriver import WebDriver

from webactor.drivers import BaseDriver, DialogCallback
from webactor.exceptions import DriverError
from webactor.logger import get_logger
from webactor.models import DialogKind, ElementHandle, Query, TabInfo

log = get_logger(__name__)

T = TypeVar("T")

_BY = {"css": By.CSS_SELECTOR, "xpath": By.XPATH}
_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def key_code(name: str) -> str:
    """Map a key name (``Enter``, ``ArrowDown``, ``a``) to a Selenium key."""
    if len(name) == 1:
        return name
    code = getattr(Keys, _CAMEL_BOUNDARY.sub("_", name).upper(), None)
    if code is None:
        raise DriverError(f"Unknown key {name!r}")
    return code


class SeleniumDriver(BaseDriver):
    """Drives a Selenium WebDriver session. Tabs are its window handles."""

    def __init__(self, webdriver: WebDriver) -> None:
        self._driver = webdriver
        self._callback: DialogCallback | None = None
        self._alert_reported = False

    @property
    def name(self) -> str:
        return "selenium"

    @property
    def webdriver(self) -> WebDriver:
        return self._driver

    async def _call(self, fn: Callable[..., T], *args: Any) -> T:
        try:
            return await asyncio.to_thread(fn, *args)
        except WebDriverException as exc:
            raise DriverError(f"{getattr(fn, '__name__', 'call')} failed: {exc.msg}") from exc

    # --- Navigation ---

    async def navigate(self, url: str) -> None:
        await self._call(self._driver.get, url)

    async def current_url(self) -> str:
        return await self._call(lambda: self._driver.current_url)

    async def page_source(self) -> str:
        return await self._call(lambda: self._driver.page_source)

    async def title(self) -> str:
        return await self._call(lambda: self._driver.title)

    # --- Elements ---

    async def query_all(
        self, query: Query, within: ElementHandle | None = None
    ) -> list[Any]:
        root = within.native if within is not None else self._driver
        return await self._call(root.find_elements, _BY[query.kind], query.value)

    async def element_id(self, handle: ElementHandle) -> str:
        return handle.native.id

    async def is_visible(self, handle: ElementHandle) -> bool:
        return await self._call(handle.native.is_displayed)

    async def read_text(self, handle: ElementHandle) -> str:
        return await self._call(lambda: handle.native.text)

    async def read_attribute(self, handle: ElementHandle, name: str) -> str | None:
        return await self._call(handle.native.get_dom_attribute, name)

    async def read_css_property(self, handle: ElementHandle, name: str) -> str:
        return await self._call(handle.native.value_of_css_property, name)

    async def read_property(self, handle: ElementHandle, name: str) -> Any:
        return await self._call(handle.native.get_property, name)

    # --- Native actions ---

    async def perform_click(self, handle: ElementHandle) -> None:
        await self._call(handle.native.click)
        await self._probe_alert()

    async def hover(self, handle: ElementHandle) -> None:
        chain = ActionChains(self._driver).move_to_element(handle.native)
        await self._call(chain.perform)

    async def type_into(self, handle: ElementHandle, text: str, clear: bool) -> None:
        if clear:
            await self._call(handle.native.clear)
        await self._call(handle.native.send_keys, text)

    async def perform_key_press(self, modifiers: list[str], keys: list[str]) -> None:
        chain = ActionChains(self._driver)
        for modifier in modifiers:
            chain.key_down(key_code(modifier))
        for key in keys:
            chain.send_keys(key_code(key))
        for modifier in reversed(modifiers):
            chain.key_up(key_code(modifier))
        await self._call(chain.perform)
        await self._probe_alert()

    async def resize_window(self, width: int, height: int) -> None:
        await self._call(self._driver.set_window_size, width, height)

    # --- Tabs ---

    async def list_tabs(self) -> list[TabInfo]:
        handles = await self._call(lambda: self._driver.window_handles)
        return [TabInfo(index=index) for index in range(len(handles))]

    async def activate_tab(self, index: int) -> None:
        handle = await self._handle_at(index)
        await self._call(self._driver.switch_to.window, handle)

    async def close_tab(self, index: int) -> None:
        handle = await self._handle_at(index)
        await self._call(self._driver.switch_to.window, handle)
        await self._call(self._driver.close)

    async def open_blank_tab(self) -> None:
        await self._call(self._driver.switch_to.new_window, "tab")

    async def _handle_at(self, index: int) -> str:
        handles = await self._call(lambda: self._driver.window_handles)
        if not 0 <= index < len(handles):
            raise DriverError(f"No tab at index {index}")
        return handles[index]

    # --- Dialogs ---

    def on_dialog_opened(self, callback: DialogCallback | None) -> None:
        self._callback = callback

    async def _probe_alert(self) -> None:
        if self._callback is None:
            return
        try:
            message = await asyncio.to_thread(lambda: self._driver.switch_to.alert.text)
        except NoAlertPresentException:
            # Closed by us or by the browser's unhandled prompt behavior.
            self._alert_reported = False
            return
        except WebDriverException as exc:
            log.debug("alert_probe_failed", error=exc.msg)
            return
        if self._alert_reported:
            return
        self._alert_reported = True
        await self._callback(DialogKind.ALERT, message or "")

    async def resolve_dialog(self, accept: bool) -> None:
        def resolve() -> None:
            alert = self._driver.switch_to.alert
            if accept:
                alert.accept()
            else:
                alert.dismiss()

        self._alert_reported = False
        await self._call(resolve)

    # --- Frames ---

    async def enter_frame(self, handle: ElementHandle) -> None:
        await self._call(self._driver.switch_to.frame, handle.native)

    async def exit_to_root(self) -> None:
        await self._call(self._driver.switch_to.default_content)
