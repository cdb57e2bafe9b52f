"""Native dialog (alert/confirm/prompt) interception."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from webactor.config import ConfigScope
from webactor.exceptions import AssertionFailedError, DialogStateError, DriverError
from webactor.logger import get_logger
from webactor.models import DialogKind, PendingDialog, PopupAction

if TYPE_CHECKING:
    from webactor.drivers import BaseDriver

log = get_logger(__name__)

_PAST = {PopupAction.ACCEPT: "accepted", PopupAction.CANCEL: "cancelled"}


class DialogController:
    """Holds at most one dialog per session.

    On backends where an open dialog stalls the page, the dialog is resolved
    with the default disposition as soon as it opens; its message stays
    readable until the next action.

    ``grab_popup_text`` returns None when no dialog is held instead of
    raising. This is the one deliberate exception to the error policy.
    """

    def __init__(
        self,
        driver: BaseDriver,
        config: ConfigScope,
        tab_index: Callable[[], int] = lambda: 0,
    ) -> None:
        self._driver = driver
        self._config = config
        self._tab_index = tab_index
        self._disposition: PopupAction | None = None
        self._pending: PendingDialog | None = None

    @property
    def pending(self) -> PendingDialog | None:
        return self._pending

    @property
    def default_disposition(self) -> PopupAction:
        return self._disposition or self._config.current.default_popup_action

    def set_default_disposition(self, action: PopupAction | str) -> None:
        self._disposition = PopupAction(action)
        log.debug("popup_disposition", action=self._disposition.value)

    def attach(self) -> None:
        self._driver.on_dialog_opened(self._on_opened)

    def detach(self) -> None:
        self._driver.on_dialog_opened(None)

    async def _on_opened(self, kind: DialogKind, message: str) -> None:
        dialog = PendingDialog(kind=kind, message=message, tab_index=self._tab_index())
        self._pending = dialog
        log.info("dialog_opened", kind=kind.value, message=message)
        if self._driver.dialogs_block_page:
            try:
                await self._resolve(dialog, self.default_disposition)
            except DriverError as exc:
                log.warning("dialog_resolve_failed", kind=kind.value, error=str(exc))

    async def accept(self) -> None:
        await self._answer(PopupAction.ACCEPT)

    async def cancel(self) -> None:
        await self._answer(PopupAction.CANCEL)

    async def _answer(self, action: PopupAction) -> None:
        dialog = self._pending
        verb = "accept popup" if action is PopupAction.ACCEPT else "cancel popup"
        if dialog is None:
            raise DialogStateError(verb)
        try:
            if not dialog.resolved:
                await self._resolve(dialog, action)
            elif dialog.disposition is not action:
                raise DialogStateError(
                    verb, f"popup was already {_PAST[dialog.disposition]}"
                )
        finally:
            self._pending = None

    def see_in_popup(self, expected: str) -> None:
        dialog = self._pending
        if dialog is None:
            raise DialogStateError("see in popup")
        if expected not in dialog.message:
            raise AssertionFailedError(
                "text in popup", "include", expected, actual=dialog.message
            )

    def grab_popup_text(self) -> str | None:
        return self._pending.message if self._pending else None

    async def settle(self) -> None:
        """Resolve a leftover dialog with the default disposition, then drop it."""
        dialog = self._pending
        if dialog is None:
            return
        try:
            if not dialog.resolved:
                await self._resolve(dialog, self.default_disposition)
        except DriverError as exc:
            # The backend closed it on its own.
            log.info("dialog_already_closed", kind=dialog.kind.value, error=str(exc))
        finally:
            self._pending = None

    def discard(self) -> None:
        """Drop the held dialog without touching the driver."""
        if self._pending is not None:
            log.debug("dialog_discarded", tab=self._pending.tab_index)
        self._pending = None

    async def _resolve(self, dialog: PendingDialog, action: PopupAction) -> None:
        await self._driver.resolve_dialog(action is PopupAction.ACCEPT)
        dialog.resolved = True
        dialog.disposition = action
        log.info("dialog_resolved", kind=dialog.kind.value, action=action.value)
