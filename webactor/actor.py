"""WebActor: the caller-facing test vocabulary over one driver session."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any
from urllib.parse import urlparse

from webactor.assertions import (
    AssertionEngine,
    count_equals,
    equals,
    includes,
    normalize_css,
    title_equals,
)
from webactor.config import ConfigScope, HelperConfig
from webactor.contexts import ContextManager
from webactor.dialogs import DialogController
from webactor.drivers import BaseDriver
from webactor.exceptions import ElementNotFoundError
from webactor.keys import split_keys
from webactor.locator import parse
from webactor.logger import get_logger
from webactor.models import ElementHandle, PopupAction, TabInfo
from webactor.resolver import ElementResolver, LocatorLike
from webactor.wait import SmartWaitScheduler

log = get_logger(__name__)

_CLICK_STRATEGIES = "text|CSS|XPath"
_FIELD_STRATEGIES = "label|name|CSS|XPath"


class WebActor:
    """One automation session: a driver plus the state layered over it.

    Every operation re-resolves its locators against the active tab and
    frame. Positive lookups honour the ``smart_wait`` window; negative
    assertions (``dont_see*``) check once.
    """

    def __init__(
        self,
        driver: BaseDriver,
        config: HelperConfig | None = None,
        **options: Any,
    ) -> None:
        if config is None:
            config = HelperConfig.build(**options)
        elif options:
            config = HelperConfig.build(**{**config.model_dump(), **options})
        self.driver = driver
        self._config = ConfigScope(config)
        self.scheduler = SmartWaitScheduler(self._config)
        self.resolver = ElementResolver(driver, self.scheduler)
        self.dialogs = DialogController(
            driver, self._config, tab_index=lambda: self.contexts.active_index
        )
        self.contexts = ContextManager(
            driver, self.resolver, on_tab_change=self.dialogs.discard
        )
        self.assertions = AssertionEngine(driver)

    @property
    def config(self) -> HelperConfig:
        """Settings currently in effect, overrides included."""
        return self._config.current

    # --- Lifecycle ---

    async def start(self) -> None:
        """Wire dialog events, read the tab list and apply the window size."""
        self.contexts.reset()
        self.dialogs.attach()
        await self.contexts.refresh()
        dimensions = self.config.window_dimensions
        if dimensions:
            await self.driver.resize_window(*dimensions)
        log.info("session_started", driver=self.driver.name, url=self.config.url)

    async def stop(self) -> None:
        self.dialogs.detach()
        log.info("session_stopped", driver=self.driver.name)

    async def __aenter__(self) -> WebActor:
        await self.start()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.stop()

    @contextmanager
    def settings(self, **changes: Any) -> Iterator[HelperConfig]:
        """Temporarily override settings, e.g. ``with I.settings(smart_wait=3):``."""
        with self._config.override(**changes) as config:
            yield config

    # --- Navigation ---

    async def am_on_page(self, url: str) -> None:
        await self._before("am_on_page")
        await self.contexts.reset_frames()
        target = self._absolute(url)
        await self.driver.navigate(target)
        log.info("navigated", url=target)

    async def resize_window(self, width: int, height: int) -> None:
        await self._before("resize_window")
        await self.driver.resize_window(width, height)

    async def grab_current_url(self) -> str:
        return await self.driver.current_url()

    async def grab_title(self) -> str:
        return await self.driver.title()

    async def grab_source(self) -> str:
        return await self.driver.page_source()

    async def see_in_current_url(self, part: str) -> None:
        await self._check_url_includes(part, negate=False)

    async def dont_see_in_current_url(self, part: str) -> None:
        await self._check_url_includes(part, negate=True)

    async def see_current_url_equals(self, url: str) -> None:
        await self._check_url_equals(url, negate=False)

    async def dont_see_current_url_equals(self, url: str) -> None:
        await self._check_url_equals(url, negate=True)

    async def see_title_equals(self, title: str) -> None:
        await self._before("see_title_equals")
        actual = await self.driver.title()
        self.assertions.verify(title_equals(title, actual))

    async def see_in_source(self, text: str) -> None:
        await self._check_source(text, negate=False)

    async def dont_see_in_source(self, text: str) -> None:
        await self._check_source(text, negate=True)

    # --- Text ---

    async def see(self, text: str, context: LocatorLike | None = None) -> None:
        await self._check_text(text, context, negate=False)

    async def dont_see(self, text: str, context: LocatorLike | None = None) -> None:
        await self._check_text(text, context, negate=True)

    async def see_text_equals(self, text: str, context: LocatorLike) -> None:
        await self._before("see_text_equals")
        first = await self._first(context)
        actual = await self.driver.read_text(first)
        self.assertions.verify(equals(f"element {parse(context)}", text, actual))

    async def grab_text_from(self, locator: LocatorLike) -> str:
        await self._before("grab_text_from")
        return await self.driver.read_text(await self._first(locator))

    # --- Elements ---

    async def see_element(self, locator: LocatorLike) -> None:
        await self._check_element(locator, negate=False)

    async def dont_see_element(self, locator: LocatorLike) -> None:
        await self._check_element(locator, negate=True)

    async def see_number_of_elements(self, locator: LocatorLike, num: int) -> None:
        await self._before("see_number_of_elements")
        target = parse(locator)
        handles = await self.resolver.find(target, self.contexts.current, smart=True)
        self.assertions.verify(count_equals(target.raw, num, len(handles)))

    async def see_number_of_visible_elements(
        self, locator: LocatorLike, num: int
    ) -> None:
        await self._before("see_number_of_visible_elements")
        target = parse(locator)
        handles = await self.resolver.find_visible(
            target, self.contexts.current, smart=True
        )
        self.assertions.verify(
            count_equals(target.raw, num, len(handles), visible=True)
        )

    async def grab_number_of_visible_elements(self, locator: LocatorLike) -> int:
        await self._before("grab_number_of_visible_elements")
        handles = await self.resolver.find_visible(locator, self.contexts.current)
        return len(handles)

    async def see_attributes_on_elements(
        self, locator: LocatorLike, attributes: dict[str, Any]
    ) -> None:
        await self._before("see_attributes_on_elements")
        target = parse(locator)
        handles = await self._all(target)
        check = await self.assertions.attributes_check(target.raw, handles, attributes)
        self.assertions.verify(check)

    async def see_css_properties_on_elements(
        self, locator: LocatorLike, properties: dict[str, Any]
    ) -> None:
        await self._before("see_css_properties_on_elements")
        target = parse(locator)
        handles = await self._all(target)
        check = await self.assertions.css_check(target.raw, handles, properties)
        self.assertions.verify(check)

    async def grab_attribute_from(self, locator: LocatorLike, name: str) -> str | None:
        await self._before("grab_attribute_from")
        return await self.driver.read_attribute(await self._first(locator), name)

    async def grab_css_property_from(self, locator: LocatorLike, name: str) -> str:
        await self._before("grab_css_property_from")
        value = await self.driver.read_css_property(await self._first(locator), name)
        return normalize_css(name, value)

    # --- Semantic lookups ---

    async def locate_clickable(
        self, locator: LocatorLike, context: LocatorLike | None = None
    ) -> list[ElementHandle]:
        scope = await self._scope(context)
        return await self.resolver.locate_clickable(
            locator, self.contexts.current, within=scope
        )

    async def locate_checkable(
        self, locator: LocatorLike, context: LocatorLike | None = None
    ) -> list[ElementHandle]:
        scope = await self._scope(context)
        return await self.resolver.locate_checkable(
            locator, self.contexts.current, within=scope
        )

    async def locate_fields(self, locator: LocatorLike) -> list[ElementHandle]:
        return await self.resolver.locate_fields(locator, self.contexts.current)

    # --- Actions ---

    async def click(
        self, locator: LocatorLike, context: LocatorLike | None = None
    ) -> None:
        await self._before("click")
        target = parse(locator)
        scope = await self._scope(context)
        handles = await self.resolver.locate_clickable(
            target, self.contexts.current, within=scope, smart=True
        )
        if not handles:
            raise ElementNotFoundError(target.raw, _CLICK_STRATEGIES)
        await self.driver.perform_click(handles[0])
        log.info("clicked", locator=target.raw)
        await self.scheduler.after_action()

    async def move_cursor_to(self, locator: LocatorLike) -> None:
        await self._before("move_cursor_to")
        await self.driver.hover(await self._first(locator))

    async def press_key(self, keys: str | list[str]) -> None:
        await self._before("press_key")
        modifiers, pressed = split_keys(keys)
        await self.driver.perform_key_press(modifiers, pressed)
        log.debug("keys_pressed", modifiers=modifiers, keys=pressed)
        await self.scheduler.after_action()

    # --- Forms ---

    async def fill_field(self, field: LocatorLike, value: Any) -> None:
        await self._before("fill_field")
        handle = (await self._fields(field))[0]
        await self.driver.type_into(handle, str(value), clear=True)
        await self.scheduler.after_action()

    async def append_field(self, field: LocatorLike, value: Any) -> None:
        await self._before("append_field")
        handle = (await self._fields(field))[0]
        await self.driver.type_into(handle, str(value), clear=False)
        await self.scheduler.after_action()

    async def check_option(
        self, field: LocatorLike, context: LocatorLike | None = None
    ) -> None:
        await self._before("check_option")
        target = parse(field)
        scope = await self._scope(context)
        handles = await self.resolver.locate_checkable(
            target, self.contexts.current, within=scope, smart=True
        )
        if not handles:
            raise ElementNotFoundError(target.raw, _FIELD_STRATEGIES)
        if not await self.driver.read_property(handles[0], "checked"):
            await self.driver.perform_click(handles[0])
            await self.scheduler.after_action()

    async def see_checkbox_is_checked(self, field: LocatorLike) -> None:
        await self._check_checked(field, negate=False)

    async def dont_see_checkbox_is_checked(self, field: LocatorLike) -> None:
        await self._check_checked(field, negate=True)

    async def see_in_field(self, field: LocatorLike, value: str | bool) -> None:
        await self._check_field(field, value, negate=False)

    async def dont_see_in_field(self, field: LocatorLike, value: str | bool) -> None:
        await self._check_field(field, value, negate=True)

    async def grab_value_from(self, field: LocatorLike) -> str:
        await self._before("grab_value_from")
        value = await self.driver.read_property((await self._fields(field))[0], "value")
        return "" if value is None else str(value)

    # --- Waits ---

    async def wait_for_element(
        self, locator: LocatorLike, sec: float | None = None
    ) -> None:
        await self._before("wait_for_element")
        target = parse(locator)
        spec = self.scheduler.spec(sec)

        async def present() -> bool:
            return bool(await self.resolver.find(target, self.contexts.current))

        await self.scheduler.retry(
            present,
            spec.timeout,
            f"element ({target.raw}) still not present on page after {spec.timeout:g} sec",
        )

    async def wait_for_visible(
        self, locator: LocatorLike, sec: float | None = None
    ) -> None:
        await self._before("wait_for_visible")
        target = parse(locator)
        spec = self.scheduler.spec(sec)

        async def visible() -> bool:
            return bool(await self.resolver.find_visible(target, self.contexts.current))

        await self.scheduler.retry(
            visible,
            spec.timeout,
            f"element ({target.raw}) still not visible after {spec.timeout:g} sec",
        )

    async def wait_to_hide(self, locator: LocatorLike, sec: float | None = None) -> None:
        await self._before("wait_to_hide")
        target = parse(locator)
        spec = self.scheduler.spec(sec)

        async def hidden() -> bool:
            handles = await self.resolver.find_visible(target, self.contexts.current)
            return not handles

        await self.scheduler.retry(
            hidden,
            spec.timeout,
            f"element ({target.raw}) still visible after {spec.timeout:g} sec",
        )

    async def wait_for_text(
        self,
        text: str,
        sec: float | None = None,
        context: LocatorLike | None = None,
    ) -> None:
        await self._before("wait_for_text")
        scope = parse(context or "body")
        spec = self.scheduler.spec(sec)

        async def has_text() -> bool:
            handles = await self.resolver.find(scope, self.contexts.current)
            texts = [await self.driver.read_text(h) for h in handles]
            return includes("text", text, texts).passed

        await self.scheduler.retry(
            has_text,
            spec.timeout,
            f"element ({scope.raw}) is not in DOM or there is no "
            f'element({scope.raw}) with text "{text}" after {spec.timeout:g} sec',
        )

    async def wait_for_value(
        self, field: LocatorLike, value: str, sec: float | None = None
    ) -> None:
        await self._before("wait_for_value")
        target = parse(field)
        spec = self.scheduler.spec(sec)

        async def has_value() -> bool:
            handles = await self.resolver.locate_fields(target, self.contexts.current)
            for handle in handles:
                current = await self.driver.read_property(handle, "value")
                if value in str(current or ""):
                    return True
            return False

        await self.scheduler.retry(
            has_value,
            spec.timeout,
            f"element ({target.raw}) is not in DOM or there is no "
            f'element({target.raw}) with value "{value}" after {spec.timeout:g} sec',
        )

    async def wait_number_of_visible_elements(
        self, locator: LocatorLike, num: int, sec: float | None = None
    ) -> None:
        await self._before("wait_number_of_visible_elements")
        target = parse(locator)
        spec = self.scheduler.spec(sec)

        async def counted() -> bool:
            handles = await self.resolver.find_visible(target, self.contexts.current)
            return len(handles) == num

        await self.scheduler.retry(
            counted,
            spec.timeout,
            f"The number of elements {target.raw} is not {num} "
            f"after {spec.timeout:g} sec",
        )

    async def wait_in_url(self, part: str, sec: float | None = None) -> None:
        await self._before("wait_in_url")
        seen = {"url": ""}

        async def matches() -> bool:
            seen["url"] = await self.driver.current_url()
            return part in seen["url"]

        await self.scheduler.retry(
            matches,
            sec,
            lambda: f"expected url to include {part}, but found {seen['url']}",
        )

    async def wait_url_equals(self, url: str, sec: float | None = None) -> None:
        await self._before("wait_url_equals")
        expected = self._absolute(url)
        seen = {"url": ""}

        async def matches() -> bool:
            seen["url"] = await self.driver.current_url()
            return seen["url"] == expected

        await self.scheduler.retry(
            matches,
            sec,
            lambda: f"expected url to be {expected}, but found {seen['url']}",
        )

    # --- Tabs and frames ---

    async def open_new_tab(self) -> None:
        await self._before("open_new_tab")
        await self.contexts.open_new_tab()

    async def switch_to_next_tab(self, num: int = 1) -> None:
        await self._before("switch_to_next_tab")
        await self.contexts.switch_to_next_tab(num)

    async def switch_to_previous_tab(self, num: int = 1) -> None:
        await self._before("switch_to_previous_tab")
        await self.contexts.switch_to_previous_tab(num)

    async def close_current_tab(self) -> None:
        await self._before("close_current_tab")
        await self.contexts.close_current_tab()

    async def grab_all_tabs(self) -> list[TabInfo]:
        return await self.contexts.refresh()

    async def grab_number_of_open_tabs(self) -> int:
        return len(await self.contexts.refresh())

    async def switch_to(self, locator: LocatorLike | None = None) -> None:
        await self._before("switch_to")
        await self.contexts.switch_to(locator)

    # --- Popups ---

    def am_accepting_popups(self) -> None:
        self.dialogs.set_default_disposition(PopupAction.ACCEPT)

    def am_cancelling_popups(self) -> None:
        self.dialogs.set_default_disposition(PopupAction.CANCEL)

    async def accept_popup(self) -> None:
        await self.dialogs.accept()

    async def cancel_popup(self) -> None:
        await self.dialogs.cancel()

    async def see_in_popup(self, text: str) -> None:
        self.dialogs.see_in_popup(text)

    async def grab_popup_text(self) -> str | None:
        return self.dialogs.grab_popup_text()

    # --- Private helpers ---

    async def _before(self, action: str) -> None:
        """Resolve a dialog left over from the previous action."""
        if self.dialogs.pending is not None:
            log.debug("settling_dialog", before=action)
        await self.dialogs.settle()

    def _absolute(self, url: str) -> str:
        base = self.config.url
        if not base or urlparse(url).scheme:
            return url
        return base.rstrip("/") + "/" + url.lstrip("/")

    async def _all(self, locator: LocatorLike) -> list[ElementHandle]:
        target = parse(locator)
        handles = await self.resolver.find(target, self.contexts.current, smart=True)
        if not handles:
            raise ElementNotFoundError(target.raw)
        return handles

    async def _first(self, locator: LocatorLike) -> ElementHandle:
        return (await self._all(locator))[0]

    async def _scope(self, context: LocatorLike | None) -> ElementHandle | None:
        if context is None:
            return None
        return await self._first(context)

    async def _fields(self, field: LocatorLike, smart: bool = True) -> list[ElementHandle]:
        target = parse(field)
        handles = await self.resolver.locate_fields(
            target, self.contexts.current, smart=smart
        )
        if not handles:
            raise ElementNotFoundError(target.raw, _FIELD_STRATEGIES)
        return handles

    async def _check_text(
        self, text: str, context: LocatorLike | None, negate: bool
    ) -> None:
        await self._before("dont_see" if negate else "see")
        scope = parse(context or "body")
        subject = f"element {scope.raw}" if context else "web page"
        handles = await self.resolver.find(
            scope, self.contexts.current, smart=not negate
        )
        check = await self.assertions.text_check(subject, handles, text)
        self.assertions.verify(check, negate)

    async def _check_element(self, locator: LocatorLike, negate: bool) -> None:
        await self._before("dont_see_element" if negate else "see_element")
        target = parse(locator)
        handles = await self.resolver.find(
            target, self.contexts.current, smart=not negate
        )
        check = await self.assertions.visibility_check(target.raw, handles)
        self.assertions.verify(check, negate)

    async def _check_field(
        self, field: LocatorLike, value: str | bool, negate: bool
    ) -> None:
        await self._before("dont_see_in_field" if negate else "see_in_field")
        target = parse(field)
        handles = await self._fields(target, smart=not negate)
        check = await self.assertions.field_check(target.raw, handles, value)
        self.assertions.verify(check, negate)

    async def _check_checked(self, field: LocatorLike, negate: bool) -> None:
        await self._before(
            "dont_see_checkbox_is_checked" if negate else "see_checkbox_is_checked"
        )
        target = parse(field)
        handles = await self.resolver.locate_checkable(
            target, self.contexts.current, smart=not negate
        )
        if not handles:
            raise ElementNotFoundError(target.raw, _FIELD_STRATEGIES)
        check = await self.assertions.checked_check(target.raw, handles)
        self.assertions.verify(check, negate)

    async def _check_url_includes(self, part: str, negate: bool) -> None:
        await self._before("dont_see_in_current_url" if negate else "see_in_current_url")
        url = await self.driver.current_url()
        self.assertions.verify(includes("url", part, url, actual=url), negate)

    async def _check_url_equals(self, url: str, negate: bool) -> None:
        await self._before(
            "dont_see_current_url_equals" if negate else "see_current_url_equals"
        )
        actual = await self.driver.current_url()
        self.assertions.verify(equals("url", self._absolute(url), actual), negate)

    async def _check_source(self, text: str, negate: bool) -> None:
        await self._before("dont_see_in_source" if negate else "see_in_source")
        source = await self.driver.page_source()
        self.assertions.verify(includes("HTML source of a page", text, source), negate)
