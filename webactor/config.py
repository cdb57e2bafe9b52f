"""Helper configuration and scoped overrides."""

from __future__ import annotations

import os
import re
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from webactor.exceptions import ConfigurationError
from webactor.models import PopupAction

_WINDOW_SIZE = re.compile(r"^\s*(\d+)\s*x\s*(\d+)\s*$")


class HelperConfig(BaseModel):
    """Session-wide settings. Durations are in seconds."""

    url: str = ""
    window_size: str | None = None
    wait_for_timeout: float = Field(default=1.0, ge=0)
    smart_wait: float = Field(default=0.0, ge=0)
    poll_interval: float = Field(default=0.2, gt=0)
    wait_for_action: float = Field(default=0.1, ge=0)
    default_popup_action: PopupAction = PopupAction.ACCEPT

    @field_validator("window_size")
    @classmethod
    def _check_window_size(cls, value: str | None) -> str | None:
        if value is not None and not _WINDOW_SIZE.match(value):
            raise ValueError(f"window_size must look like 500x700, got {value!r}")
        return value

    @property
    def window_dimensions(self) -> tuple[int, int] | None:
        """Parsed ``(width, height)`` of ``window_size``."""
        if not self.window_size:
            return None
        match = _WINDOW_SIZE.match(self.window_size)
        return int(match.group(1)), int(match.group(2))

    @classmethod
    def from_env(cls, prefix: str = "WEBACTOR_") -> HelperConfig:
        """Load config from environment variables."""
        data: dict[str, Any] = {}
        for name in cls.model_fields:
            value = os.environ.get(f"{prefix}{name.upper()}")
            if value is not None:
                data[name] = value
        return cls.build(**data)

    @classmethod
    def build(cls, **data: Any) -> HelperConfig:
        """Validate ``data``, raising ConfigurationError on bad values."""
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigurationError(str(exc)) from exc


class ConfigScope:
    """Stack of configurations; the top one is in effect."""

    def __init__(self, config: HelperConfig | None = None) -> None:
        self._stack: list[HelperConfig] = [config or HelperConfig()]

    @property
    def current(self) -> HelperConfig:
        return self._stack[-1]

    @contextmanager
    def override(self, **changes: Any) -> Iterator[HelperConfig]:
        """Push a temporary override; the previous settings return on exit."""
        config = HelperConfig.build(**{**self.current.model_dump(), **changes})
        self._stack.append(config)
        try:
            yield config
        finally:
            self._stack.pop()
