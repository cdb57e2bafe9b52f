"""Data models shared across WebActor components."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field

# Head of the expression or of a union branch, past any opening parentheses.
_HEAD = r"(^|\|)(\s*(?:\(\s*)*)"
_ABSOLUTE_STEP = re.compile(_HEAD + r"/")
_RELATIVE_STEP = re.compile(_HEAD + r"\.//")


# --- Enums ---


class PopupAction(str, Enum):
    """Disposition applied to a native dialog."""

    ACCEPT = "accept"
    CANCEL = "cancel"


class DialogKind(str, Enum):
    """Native dialog types."""

    ALERT = "alert"
    CONFIRM = "confirm"
    PROMPT = "prompt"
    BEFOREUNLOAD = "beforeunload"


class ElementKind(str, Enum):
    """Element families targeted by the semantic locator helpers."""

    CLICKABLE = "clickable"
    CHECKABLE = "checkable"
    FIELD = "field"


# --- Runtime references ---


@dataclass(frozen=True)
class Query:
    """A driver-level query. ``kind`` is always ``css`` or ``xpath``."""

    kind: Literal["css", "xpath"]
    value: str

    def scoped(self) -> Query:
        """Rewrite an XPath to run relative to a scope element.

        Absolute paths become relative, including parenthesised ones like
        ``(//a)[1]``, and descendant steps also match the scope element
        itself.
        """
        if self.kind != "xpath":
            return self
        value = _ABSOLUTE_STEP.sub(r"\1\2./", self.value)
        return Query("xpath", _RELATIVE_STEP.sub(r"\1\2descendant-or-self::", value))


@dataclass(frozen=True)
class ContextRef:
    """Addressing context: a tab and the frame path below its document."""

    tab_index: int = 0
    frames: tuple[str, ...] = ()

    @property
    def depth(self) -> int:
        return len(self.frames)


@dataclass(frozen=True, eq=False)
class ElementHandle:
    """Opaque reference to a live element, tagged with its context."""

    native: Any
    context: ContextRef = field(default_factory=ContextRef)


# --- Session state models ---


class TabInfo(BaseModel):
    """Snapshot of an open tab."""

    index: int
    url: str | None = None


class PendingDialog(BaseModel):
    """The single dialog slot held by a session."""

    kind: DialogKind = DialogKind.ALERT
    message: str = ""
    tab_index: int = 0
    resolved: bool = False
    disposition: PopupAction | None = None


class WaitSpec(BaseModel):
    """Parameters of one bounded retry loop."""

    timeout: float = Field(ge=0)
    interval: float = Field(gt=0, default=0.2)
