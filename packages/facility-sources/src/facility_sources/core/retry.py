import asyncio
from typing import Awaitable, Callable, TypeVar

from facility_sources.core.exceptions import UpstreamUnavailable

T = TypeVar("T")


def is_transient(exc: Exception) -> bool:
    return isinstance(exc, UpstreamUnavailable)


async def with_exponential_backoff(
    operation: Callable[[], Awaitable[T]],
    retries: int = 2,
    base_delay_seconds: float = 0.1,
    on_retry: Callable[[int, float], None] | None = None,
    should_retry: Callable[[Exception], bool] = is_transient,
) -> T:
    """Run ``operation``, retrying transient failures; the last error is re-raised as-is."""
    if retries < 1:
        raise ValueError("retries must be >= 1")
    attempt = 0
    while True:
        try:
            return await operation()
        except Exception as exc:
            attempt += 1
            if attempt >= retries or not should_retry(exc):
                raise
            delay = base_delay_seconds * (2 ** (attempt - 1))
            if on_retry:
                on_retry(attempt, delay)
            await asyncio.sleep(delay)
