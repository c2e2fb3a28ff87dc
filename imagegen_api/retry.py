import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay_ms: int = 500,
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Await `operation` up to `max_attempts` times.

    Waits `base_delay_ms * 2**i` between attempt i and i+1. The last error is
    re-raised unchanged once attempts run out.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    for attempt in range(max_attempts):
        try:
            return await operation()
        except Exception as exc:  # noqa: BLE001
            if attempt == max_attempts - 1:
                logger.warning(
                    "attempt %d/%d failed, giving up: %s",
                    attempt + 1,
                    max_attempts,
                    exc,
                    extra={"attempt": attempt + 1},
                )
                raise
            delay_ms = base_delay_ms * (2**attempt)
            logger.warning(
                "attempt %d/%d failed, retrying in %dms: %s",
                attempt + 1,
                max_attempts,
                delay_ms,
                exc,
                extra={"attempt": attempt + 1, "delay_ms": delay_ms},
            )
            await sleep(delay_ms / 1000.0)

    raise AssertionError("unreachable")
