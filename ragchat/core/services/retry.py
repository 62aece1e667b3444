"""Bounded retries with jittered backoff for external adapter calls."""

import asyncio
import logging
import random
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from ..errors import RagChatError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Retry policy shared by adapter calls.

    ``retries=0`` means a single attempt: the call fails once and the
    caller degrades or errors.
    """
    retries: int = 0
    backoff_min_ms: int = 200
    backoff_max_ms: int = 500

    def _backoff_seconds(self) -> float:
        return random.uniform(self.backoff_min_ms, self.backoff_max_ms) / 1000

    def call(self, fn: Callable[[], T], name: str = "adapter") -> T:
        """Run a blocking call, retrying on any non-pipeline exception."""
        for attempt in range(self.retries + 1):
            try:
                return fn()
            except RagChatError:
                raise
            except Exception as e:
                if attempt >= self.retries:
                    raise
                logger.warning(
                    f"{name} failed (attempt {attempt + 1}/{self.retries + 1}): {e}"
                )
                time.sleep(self._backoff_seconds())
        raise AssertionError("unreachable")

    async def acall(
        self, fn: Callable[[], Awaitable[T]], name: str = "adapter"
    ) -> T:
        """Await a coroutine factory, retrying on any non-pipeline exception."""
        for attempt in range(self.retries + 1):
            try:
                return await fn()
            except RagChatError:
                raise
            except Exception as e:
                if attempt >= self.retries:
                    raise
                logger.warning(
                    f"{name} failed (attempt {attempt + 1}/{self.retries + 1}): {e}"
                )
                await asyncio.sleep(self._backoff_seconds())
        raise AssertionError("unreachable")
