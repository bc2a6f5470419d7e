"""
Retry with capped exponential backoff for async operations.
"""

import asyncio
import functools
import random
from typing import Any, Awaitable, Callable, Optional, Tuple, Type

from shared.logging import get_logger


class RetryConfig:
    """Attempt count and backoff shape for :func:`retry_on_exception`."""

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        exponential_base: float = 2.0,
        jitter: bool = True,
    ):
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter = jitter


class RetryError(Exception):
    """Raised once every attempt has failed."""

    def __init__(self, message: str, last_exception: Optional[BaseException], attempts: int):
        super().__init__(message)
        self.last_exception = last_exception
        self.attempts = attempts


def calculate_delay(attempt: int, config: RetryConfig) -> float:
    """
    Seconds to wait after failed ``attempt`` (1-based).

    ``base_delay * exponential_base ** (attempt - 1)``, capped at
    ``max_delay``, then spread by up to 10% either way when jitter is on.
    """
    delay = min(config.base_delay * config.exponential_base ** (attempt - 1), config.max_delay)
    if config.jitter:
        delay += random.uniform(-0.1, 0.1) * delay
    return max(0.0, delay)


def retry_on_exception(
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
    config: Optional[RetryConfig] = None,
) -> Callable:
    """Retry the decorated coroutine on ``exceptions``, raising RetryError when exhausted."""
    config = config or RetryConfig()

    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        logger = get_logger(f"retry.{func.__name__}")

        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            last_exception: Optional[BaseException] = None

            for attempt in range(1, config.max_attempts + 1):
                try:
                    result = await func(*args, **kwargs)
                except exceptions as exc:
                    last_exception = exc
                    if attempt == config.max_attempts:
                        break
                    delay = calculate_delay(attempt, config)
                    logger.warning("Attempt failed, backing off", attempt=attempt, delay=delay, error=str(exc))
                    await asyncio.sleep(delay)
                    continue

                if attempt > 1:
                    logger.info("Succeeded after retry", attempt=attempt)
                return result

            logger.error("Retries exhausted", attempts=config.max_attempts, error=str(last_exception))
            raise RetryError(
                f"{func.__name__} failed after {config.max_attempts} attempts",
                last_exception=last_exception,
                attempts=config.max_attempts,
            )

        return wrapper

    return decorator
