"""Configuration for the smoke check via environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass
class SmokeConfig:
    """Smoke check configuration loaded from environment variables."""

    site_url: str
    backend: str = "playwright"
    expected_title: str | None = None
    headless: bool = True
    timeout: float = 5.0

    @classmethod
    def from_env(cls) -> SmokeConfig:
        """Load config from environment variables."""
        return cls(
            site_url=os.environ.get("SMOKE_URL", ""),
            backend=os.environ.get("SMOKE_BACKEND", "playwright"),
            expected_title=os.environ.get("SMOKE_TITLE"),
            headless=os.environ.get("SMOKE_HEADLESS", "true").lower() == "true",
            timeout=float(os.environ.get("SMOKE_TIMEOUT", "5")),
        )
