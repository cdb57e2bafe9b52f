"""Semantic resolver interface and implementations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from webactor.locator import Locator
    from webactor.models import ElementKind, Query


class BaseResolver(ABC):
    """One step of the semantic lookup cascade."""

    @abstractmethod
    def queries(self, kind: ElementKind, locator: Locator) -> list[Query]:
        """Driver queries for this step. An empty list skips the step."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Resolver name for logging."""
