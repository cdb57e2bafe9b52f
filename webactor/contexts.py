"""Tab and frame state machine."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from webactor.exceptions import DriverError, ElementNotFoundError, InvalidTransitionError
from webactor.locator import Locator, parse
from webactor.logger import get_logger
from webactor.models import ContextRef, TabInfo

if TYPE_CHECKING:
    from webactor.drivers import BaseDriver
    from webactor.resolver import ElementResolver

log = get_logger(__name__)

_FRAME_TAGS = frozenset({"IFRAME", "FRAME"})
_FRAME_STRATEGIES = "text|CSS|XPath"


class ContextManager:
    """Tracks open tabs, the active tab and the frame stack inside it.

    Every transition validates its target before touching any state, so a
    rejected transition leaves the session exactly as it was.
    """

    def __init__(
        self,
        driver: BaseDriver,
        resolver: ElementResolver,
        on_tab_change: Callable[[], None] | None = None,
    ) -> None:
        self._driver = driver
        self._resolver = resolver
        self._on_tab_change = on_tab_change
        self._tabs: list[TabInfo] = []
        self._active = 0
        self._frames: list[str] = []

    @property
    def current(self) -> ContextRef:
        """The context all queries and assertions run against."""
        return ContextRef(tab_index=self._active, frames=tuple(self._frames))

    @property
    def active_index(self) -> int:
        return self._active

    @property
    def tabs(self) -> list[TabInfo]:
        """Tab snapshot from the last refresh."""
        return list(self._tabs)

    @property
    def frame_stack(self) -> list[str]:
        return list(self._frames)

    def reset(self) -> None:
        """Forget all state; used when a session starts."""
        self._tabs = []
        self._active = 0
        self._frames = []

    async def refresh(self) -> list[TabInfo]:
        """Re-read the tab list; pages may open tabs on their own."""
        self._tabs = await self._driver.list_tabs()
        if self._tabs and self._active >= len(self._tabs):
            self._active = len(self._tabs) - 1
        return self.tabs

    # --- Tabs ---

    async def open_new_tab(self) -> None:
        await self._driver.open_blank_tab()
        tabs = await self.refresh()
        await self._activate(len(tabs) - 1)

    async def switch_to_next_tab(self, offset: int = 1) -> None:
        tabs = await self.refresh()
        target = self._active + offset
        if not 0 <= target < len(tabs):
            raise InvalidTransitionError("switch to next tab", offset)
        await self._activate(target)

    async def switch_to_previous_tab(self, offset: int = 1) -> None:
        tabs = await self.refresh()
        target = self._active - offset
        if not 0 <= target < len(tabs):
            raise InvalidTransitionError("switch to previous tab", offset)
        await self._activate(target)

    async def close_current_tab(self) -> None:
        tabs = await self.refresh()
        if len(tabs) <= 1:
            raise InvalidTransitionError("close the last remaining tab")
        closing = self._active
        await self._driver.close_tab(closing)
        await self.refresh()
        log.info("tab_closed", index=closing)
        await self._activate(max(closing - 1, 0))

    async def _activate(self, index: int) -> None:
        await self._driver.activate_tab(index)
        self._active = index
        self._frames.clear()
        if self._on_tab_change:
            self._on_tab_change()
        log.info("tab_switched", index=index, tabs=len(self._tabs))

    # --- Frames ---

    async def switch_to(self, locator: str | dict[str, str] | Locator | None) -> None:
        """Descend into a frame, or return to the tab's document for None.

        None resets the whole frame stack in one step, whatever the depth.
        """
        if locator is None:
            await self.reset_frames()
            return

        target = parse(locator)
        handles = await self._resolver.find(target, self.current)
        if not handles:
            raise ElementNotFoundError(target.raw, _FRAME_STRATEGIES)
        frame = handles[0]
        tag = await self._driver.read_property(frame, "tagName")
        if str(tag or "").upper() not in _FRAME_TAGS:
            log.warning("frame_target_invalid", locator=target.raw, reason="not_a_frame")
            raise ElementNotFoundError(target.raw, _FRAME_STRATEGIES)
        try:
            await self._driver.enter_frame(frame)
        except DriverError as exc:
            log.warning(
                "frame_target_invalid",
                locator=target.raw,
                reason="driver_error",
                error=str(exc),
            )
            raise ElementNotFoundError(target.raw, _FRAME_STRATEGIES) from exc
        self._frames.append(target.raw)
        log.info("frame_entered", locator=target.raw, depth=len(self._frames))

    async def reset_frames(self) -> None:
        await self._driver.exit_to_root()
        if self._frames:
            log.info("frame_root", depth=len(self._frames))
        self._frames.clear()
