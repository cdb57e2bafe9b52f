"""Driver capability interface.

The core is written once against :class:`BaseDriver`. Backends translate
their native errors into :class:`~webactor.exceptions.DriverError` and never
leak them to callers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

from webactor.models import DialogKind, ElementHandle, Query, TabInfo

DialogCallback = Callable[[DialogKind, str], Awaitable[None]]


class BaseDriver(ABC):
    """Base class for automation backends."""

    #: True when an unhandled native dialog stalls the page, so the dialog
    #: has to be resolved from inside the open event.
    dialogs_block_page: bool = False

    @property
    @abstractmethod
    def name(self) -> str:
        """Driver name for logging."""

    # --- Navigation ---

    @abstractmethod
    async def navigate(self, url: str) -> None:
        """Load ``url`` in the active tab."""

    @abstractmethod
    async def current_url(self) -> str:
        """URL of the active tab."""

    @abstractmethod
    async def page_source(self) -> str:
        """HTML of the active document (frame-aware)."""

    @abstractmethod
    async def title(self) -> str:
        """Title of the active tab."""

    # --- Elements ---

    @abstractmethod
    async def query_all(
        self, query: Query, within: ElementHandle | None = None
    ) -> list[Any]:
        """Return native elements matching ``query`` in document order."""

    @abstractmethod
    async def element_id(self, handle: ElementHandle) -> str:
        """Stable identity of the underlying element."""

    @abstractmethod
    async def is_visible(self, handle: ElementHandle) -> bool:
        """Whether the element has a rendered box and is not hidden."""

    @abstractmethod
    async def read_text(self, handle: ElementHandle) -> str:
        """Rendered text of the element."""

    @abstractmethod
    async def read_attribute(self, handle: ElementHandle, name: str) -> str | None:
        """Attribute value, or None when absent."""

    @abstractmethod
    async def read_css_property(self, handle: ElementHandle, name: str) -> str:
        """Computed CSS property value."""

    @abstractmethod
    async def read_property(self, handle: ElementHandle, name: str) -> Any:
        """DOM property value (``tagName``, ``checked``, ``value``...)."""

    # --- Native actions ---

    @abstractmethod
    async def perform_click(self, handle: ElementHandle) -> None:
        """Click the element."""

    @abstractmethod
    async def hover(self, handle: ElementHandle) -> None:
        """Move the pointer over the element."""

    @abstractmethod
    async def type_into(self, handle: ElementHandle, text: str, clear: bool) -> None:
        """Type ``text`` into a field, clearing it first when ``clear``."""

    @abstractmethod
    async def perform_key_press(self, modifiers: list[str], keys: list[str]) -> None:
        """Hold ``modifiers`` while pressing each of ``keys``."""

    @abstractmethod
    async def resize_window(self, width: int, height: int) -> None:
        """Resize the browser window or viewport."""

    # --- Tabs ---

    @abstractmethod
    async def list_tabs(self) -> list[TabInfo]:
        """Open tabs in global tab order."""

    @abstractmethod
    async def activate_tab(self, index: int) -> None:
        """Make the tab at ``index`` the target of subsequent calls."""

    @abstractmethod
    async def close_tab(self, index: int) -> None:
        """Close the tab at ``index``."""

    @abstractmethod
    async def open_blank_tab(self) -> None:
        """Open a blank tab at the end of the tab order."""

    # --- Dialogs ---

    @abstractmethod
    def on_dialog_opened(self, callback: DialogCallback | None) -> None:
        """Register the callback invoked when a native dialog opens."""

    @abstractmethod
    async def resolve_dialog(self, accept: bool) -> None:
        """Accept or dismiss the open native dialog."""

    # --- Frames ---

    @abstractmethod
    async def enter_frame(self, handle: ElementHandle) -> None:
        """Address subsequent queries to the frame ``handle`` hosts."""

    @abstractmethod
    async def exit_to_root(self) -> None:
        """Address subsequent queries to the tab's top document."""
