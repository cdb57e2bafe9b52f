"""WebActor exception hierarchy."""

from __future__ import annotations

import json
from typing import Any

_MISSING = object()


def _format_value(value: Any) -> str:
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple, set)):
        return "[" + ", ".join(_format_value(v) for v in value) + "]"
    return str(value)


class WebActorError(Exception):
    """Base exception for all WebActor errors."""


class ElementNotFoundError(WebActorError):
    """Raised when a locator resolves to zero elements."""

    def __init__(self, locator: str, strategies: str | None = None) -> None:
        self.locator = locator
        self.strategies = strategies
        msg = f"Element {locator} was not found"
        if strategies:
            msg += f" by {strategies}"
        super().__init__(msg)


class AssertionFailedError(WebActorError):
    """Raised when a see/dontSee predicate evaluates false."""

    def __init__(
        self,
        subject: str,
        relation: str,
        expected: Any,
        actual: Any = _MISSING,
        negated: bool = False,
        message: str | None = None,
    ) -> None:
        self.subject = subject
        self.relation = relation
        self.expected = expected
        self.actual = None if actual is _MISSING else actual
        self.negated = negated
        if message is None:
            message = (
                f"expected {subject} {'not ' if negated else ''}to "
                f"{relation} {_format_value(expected)}"
            )
            if actual is not _MISSING:
                message += f", but found {_format_value(actual)}"
        super().__init__(message)


class WaitTimeoutError(WebActorError):
    """Raised when a wait loop exhausts its deadline."""

    def __init__(self, message: str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(message)


class InvalidTransitionError(WebActorError):
    """Raised on a tab or frame transition with no valid target."""

    def __init__(self, action: str, offset: int | None = None) -> None:
        self.action = action
        self.offset = offset
        if offset is None:
            msg = f"There is no ability to {action}"
        else:
            msg = f"There is no ability to {action} with offset {offset}"
        super().__init__(msg)


class DialogStateError(WebActorError):
    """Raised when a popup operation has no matching dialog."""

    def __init__(self, action: str, detail: str = "no popup dialog found") -> None:
        self.action = action
        self.detail = detail
        super().__init__(f"Cannot {action}: {detail}")


class DriverError(WebActorError):
    """Raised when a driver backend reports a protocol failure."""


class ConfigurationError(WebActorError):
    """Raised when helper configuration is invalid."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Invalid configuration: {detail}")
