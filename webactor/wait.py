"""Bounded polling: explicit waits and the implicit smart wait."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

from webactor.config import ConfigScope
from webactor.exceptions import (
    AssertionFailedError,
    ElementNotFoundError,
    WaitTimeoutError,
)
from webactor.logger import get_logger
from webactor.models import WaitSpec

log = get_logger(__name__)

T = TypeVar("T")

# Failures that count as "not yet" inside a wait loop.
_RETRYABLE = (ElementNotFoundError, AssertionFailedError)


class SmartWaitScheduler:
    """Runs probes in a strictly sequential retry loop with a deadline.

    A probe in flight is never interrupted: the deadline is checked only
    after a probe returns, so a loop overruns its timeout by at most one
    probe plus one poll interval.
    """

    def __init__(
        self,
        config: ConfigScope,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config
        self._clock = clock

    def spec(self, timeout: float | None = None) -> WaitSpec:
        """Build a WaitSpec from an explicit timeout or the session default."""
        current = self._config.current
        return WaitSpec(
            timeout=current.wait_for_timeout if timeout is None else timeout,
            interval=current.poll_interval,
        )

    async def retry(
        self,
        operation: Callable[[], Awaitable[T]],
        timeout: float | None = None,
        message: str | Callable[[], str] = "",
    ) -> T:
        """Poll ``operation`` until it returns a truthy value.

        NotFound and assertion failures raised by the probe are retried.
        When the deadline passes, raises WaitTimeoutError with ``message``.
        A zero timeout makes exactly one attempt.
        """
        spec = self.spec(timeout)
        result, attempts, last_error = await self._poll(operation, spec, swallow=True)
        if result:
            return result
        text = message() if callable(message) else message
        if not text:
            text = f"condition was not met after {spec.timeout:g} sec"
        log.info("wait_timeout", timeout=spec.timeout, attempts=attempts)
        raise WaitTimeoutError(text, spec.timeout) from last_error

    async def smart(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Retry an empty lookup for the ambient ``smart_wait`` window.

        Returns the last result, which may still be empty; the caller
        decides whether that is a NotFound.
        """
        window = self._config.current.smart_wait
        if window <= 0:
            return await operation()
        result, attempts, _ = await self._poll(
            operation, self.spec(window), swallow=False
        )
        if not result:
            log.debug("smart_wait_exhausted", window=window, attempts=attempts)
        return result

    async def after_action(self) -> None:
        """Pause after a native action so page handlers can run."""
        delay = self._config.current.wait_for_action
        if delay > 0:
            await asyncio.sleep(delay)

    async def _poll(
        self,
        operation: Callable[[], Awaitable[T]],
        spec: WaitSpec,
        swallow: bool,
    ) -> tuple[T | None, int, Exception | None]:
        deadline = self._clock() + spec.timeout
        attempts = 0
        last_error: Exception | None = None
        result: T | None = None
        while True:
            attempts += 1
            try:
                result = await operation()
            except _RETRYABLE as exc:
                if not swallow:
                    raise
                last_error = exc
                result = None
            if result:
                return result, attempts, None
            remaining = deadline - self._clock()
            if remaining <= 0:
                return result, attempts, last_error
            await asyncio.sleep(min(spec.interval, remaining))
