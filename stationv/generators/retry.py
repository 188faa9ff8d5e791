"""Exponential-backoff retry for calls to the generation provider."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from stationv.errors import GenerationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RETRIES = 3
DEFAULT_DELAY = 1.0


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    *,
    retries: int = DEFAULT_RETRIES,
    delay: float = DEFAULT_DELAY,
    sleep: Callable[[float], Awaitable[object]] | None = None,
) -> T:
    """Await ``fn()``; on failure retry up to *retries* more times.

    The delay doubles after every failed attempt (1s, 2s, 4s by default).
    Once all attempts fail, the last error is raised as a
    :class:`GenerationError`.
    """
    sleep = sleep or asyncio.sleep
    attempt = 0
    while True:
        attempt += 1
        try:
            return await fn()
        except Exception as exc:
            if attempt > retries:
                raise GenerationError(f"Generation failed: {exc}", attempts=attempt) from exc
            logger.warning(
                "Generation call failed (attempt %d/%d), retrying in %.1fs: %s",
                attempt,
                retries + 1,
                delay,
                exc,
            )
            await sleep(delay)
            delay *= 2
