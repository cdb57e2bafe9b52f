"""Element resolution: direct lookups and the semantic cascade."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from webactor.exceptions import DriverError
from webactor.locator import Locator, LocatorStrategy, parse
from webactor.logger import get_logger
from webactor.models import ContextRef, ElementHandle, ElementKind, Query
from webactor.resolvers import BaseResolver
from webactor.resolvers.aria import AccessibleNameResolver
from webactor.resolvers.label import LabelResolver
from webactor.resolvers.literal import LiteralResolver
from webactor.resolvers.text import VisibleTextResolver

if TYPE_CHECKING:
    from webactor.drivers import BaseDriver
    from webactor.wait import SmartWaitScheduler

log = get_logger(__name__)

LocatorLike = str | dict[str, str] | Locator


class ElementResolver:
    """Queries the active driver for elements matching a locator.

    Semantic lookups try the resolvers in order and stop at the first step
    that yields elements. Driver errors (malformed selectors, protocol
    failures) count as zero matches.
    """

    def __init__(
        self,
        driver: BaseDriver,
        scheduler: SmartWaitScheduler,
        resolvers: list[BaseResolver] | None = None,
    ) -> None:
        self._driver = driver
        self._scheduler = scheduler
        self.resolvers = resolvers or [
            AccessibleNameResolver(),
            VisibleTextResolver(),
            LabelResolver(),
            LiteralResolver(),
        ]

    async def find(
        self,
        locator: LocatorLike,
        context: ContextRef = ContextRef(),
        within: ElementHandle | None = None,
        smart: bool = False,
    ) -> list[ElementHandle]:
        """All elements matching the locator's own strategy."""
        target = parse(locator)

        async def attempt() -> list[ElementHandle]:
            return await self._run([target.query()], context, within)

        return await self._scheduler.smart(attempt) if smart else await attempt()

    async def find_visible(
        self,
        locator: LocatorLike,
        context: ContextRef = ContextRef(),
        within: ElementHandle | None = None,
        smart: bool = False,
    ) -> list[ElementHandle]:
        """Matching elements that are rendered and not hidden."""
        handles = await self.find(locator, context, within, smart)
        return [h for h in handles if await self._driver.is_visible(h)]

    async def locate(
        self,
        kind: ElementKind,
        locator: LocatorLike,
        context: ContextRef = ContextRef(),
        within: ElementHandle | None = None,
        smart: bool = False,
    ) -> list[ElementHandle]:
        """Semantic lookup: accessible name, visible text, label, literal."""
        target = parse(locator)

        async def attempt() -> list[ElementHandle]:
            rejected: list[Query] = []
            handles = await self._cascade(kind, target, context, within, rejected)
            if handles or not self._reads_as_text(target, rejected):
                return handles
            # Not valid CSS after all: read it as visible text.
            log.debug("cascade_as_text", kind=kind.value, locator=target.raw)
            as_text = target.model_copy(update={"text": target.value})
            return await self._cascade(kind, as_text, context, within)

        return await self._scheduler.smart(attempt) if smart else await attempt()

    async def _cascade(
        self,
        kind: ElementKind,
        target: Locator,
        context: ContextRef,
        within: ElementHandle | None,
        rejected: list[Query] | None = None,
    ) -> list[ElementHandle]:
        for resolver in self.resolvers:
            queries = resolver.queries(kind, target)
            if not queries:
                continue
            handles = await self._run(queries, context, within, rejected)
            log.debug(
                "cascade_step",
                resolver=resolver.name,
                kind=kind.value,
                locator=target.raw,
                found=len(handles),
            )
            if handles:
                return handles
        return []

    @staticmethod
    def _reads_as_text(target: Locator, rejected: list[Query]) -> bool:
        return (
            target.strategy is LocatorStrategy.CSS
            and target.text is None
            and target.query() in rejected
        )

    async def locate_clickable(
        self, locator: LocatorLike, context: ContextRef = ContextRef(), **kwargs: Any
    ) -> list[ElementHandle]:
        return await self.locate(ElementKind.CLICKABLE, locator, context, **kwargs)

    async def locate_checkable(
        self, locator: LocatorLike, context: ContextRef = ContextRef(), **kwargs: Any
    ) -> list[ElementHandle]:
        return await self.locate(ElementKind.CHECKABLE, locator, context, **kwargs)

    async def locate_fields(
        self, locator: LocatorLike, context: ContextRef = ContextRef(), **kwargs: Any
    ) -> list[ElementHandle]:
        return await self.locate(ElementKind.FIELD, locator, context, **kwargs)

    async def _run(
        self,
        queries: list[Query],
        context: ContextRef,
        within: ElementHandle | None,
        rejected: list[Query] | None = None,
    ) -> list[ElementHandle]:
        """Run queries in order, merging results by element identity.

        Queries the driver fails on are appended to ``rejected``.
        """
        handles: list[ElementHandle] = []
        seen: set[str] = set()
        dedupe = len(queries) > 1
        for query in queries:
            if within is not None:
                query = query.scoped()
            try:
                natives = await self._driver.query_all(query, within)
            except DriverError as exc:
                log.warning(
                    "resolver_error",
                    driver=self._driver.name,
                    query=query.value,
                    error=str(exc),
                )
                if rejected is not None:
                    rejected.append(query)
                continue
            for native in natives:
                handle = ElementHandle(native, context)
                if dedupe:
                    key = await self._driver.element_id(handle)
                    if key in seen:
                        continue
                    seen.add(key)
                handles.append(handle)
        return handles
