"""
Retry helper shared by every external call site.

Fixed delay between attempts, observer callback on each failure, and the
last exception re-raised once the budget is spent. Callers own their fallbacks.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

ErrorObserver = Callable[[BaseException, int], None]


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    attempts: int = 3,
    delay_ms: int = 1000,
    on_error: Optional[ErrorObserver] = None,
) -> T:
    """
    Run ``operation`` and retry it up to ``attempts`` more times.

    ``on_error(error, remaining)`` is called before each wait with the number of
    retries still available (counting down from ``attempts``).
    """
    remaining = attempts
    while True:
        try:
            return await operation()
        except Exception as e:
            if remaining <= 0:
                raise
            if on_error:
                on_error(e, remaining)
            if delay_ms > 0:
                await asyncio.sleep(delay_ms / 1000)
            remaining -= 1


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt/delay budget for one call site."""

    attempts: int = 2
    delay_ms: int = 1000

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        on_error: Optional[ErrorObserver] = None,
    ) -> T:
        return await retry_async(operation, self.attempts, self.delay_ms, on_error)

    def observer(self, site: str) -> ErrorObserver:
        """Observer that logs a warning naming the call site."""

        def _log(error: BaseException, remaining: int) -> None:
            logger.warning(
                f"{site} failed, retrying ({remaining}/{self.attempts} left): {error}"
            )

        return _log
