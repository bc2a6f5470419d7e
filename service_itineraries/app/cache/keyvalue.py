"""
Redis-backed key/value store adapter.

Redis is ONLY a cache, never the source of truth. Every operation fails soft:
transport errors, timeouts and malformed payloads are logged and turned into
a miss (reads) or a skipped write, so callers cannot tell "cache unavailable"
from "cache miss".
"""

import asyncio
import functools
from typing import Any, Awaitable, Callable, List, Optional

import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from shared.config import BaseConfig
from shared.logging import get_logger
from shared.retry import RetryConfig, RetryError, retry_on_exception

from . import serialization

ConnectionListener = Callable[[bool], Any]

_TRANSPORT_ERRORS = (RedisConnectionError, RedisTimeoutError, OSError, asyncio.TimeoutError)


def soft_fail(default: Any = None, timeout_attr: str = "operation_timeout") -> Callable:
    """
    Make a store coroutine fail soft.

    A store without a client short-circuits to ``default``. Otherwise the call
    is bounded by the store's timeout and any exception is logged and
    replaced by ``default``.
    """

    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        @functools.wraps(func)
        async def wrapper(self: "KeyValueStore", *args, **kwargs) -> Any:
            if self.client is None:
                return default

            try:
                result = await asyncio.wait_for(
                    func(self, *args, **kwargs),
                    timeout=getattr(self, timeout_attr),
                )
            except Exception as exc:
                if isinstance(exc, _TRANSPORT_ERRORS):
                    self._mark_connection(False, exc)
                self.logger.warning(
                    "Cache operation failed",
                    operation=func.__name__,
                    target=args[0] if args else None,
                    error=str(exc) or type(exc).__name__,
                )
                return default

            self._mark_connection(True)
            return result

        return wrapper

    return decorator


class KeyValueStore:
    """Fail-soft wrapper over a shared ``redis.asyncio`` client."""

    def __init__(
        self,
        client: Optional[redis.Redis],
        *,
        operation_timeout: float = 0.5,
        bulk_timeout: float = 2.0,
        scan_batch_size: int = 100,
    ):
        self.client = client
        self.operation_timeout = operation_timeout
        self.bulk_timeout = bulk_timeout
        self.scan_batch_size = scan_batch_size
        self.logger = get_logger("itineraries.cache.kv")

        self._connected = client is not None
        self._listeners: List[ConnectionListener] = []

    @classmethod
    def disabled(cls) -> "KeyValueStore":
        """Store that turns every operation into a miss or no-op."""
        return cls(None)

    @property
    def available(self) -> bool:
        return self.client is not None

    @property
    def connected(self) -> bool:
        """False after a transport error until the next successful call."""
        return self.available and self._connected

    def on_connection_change(self, listener: ConnectionListener) -> None:
        """Register a callback invoked with True/False on connection state changes."""
        self._listeners.append(listener)

    def _mark_connection(self, connected: bool, error: Optional[Exception] = None) -> None:
        if connected == self._connected:
            return
        self._connected = connected

        if connected:
            self.logger.info("Cache connection restored")
        else:
            self.logger.error("Cache connection lost", error=str(error))

        for listener in self._listeners:
            try:
                listener(connected)
            except Exception as exc:
                self.logger.warning("Connection listener failed", error=str(exc))

    @soft_fail(default=False)
    async def ping(self) -> bool:
        return bool(await self.client.ping())

    @soft_fail()
    async def get(self, key: str) -> Optional[str]:
        value = await self.client.get(key)
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    @soft_fail(default=False)
    async def set(self, key: str, value: str, ttl: int) -> bool:
        await self.client.set(key, value, ex=ttl)
        return True

    @soft_fail(default=0)
    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return await self.client.delete(*keys)

    @soft_fail(default=0, timeout_attr="bulk_timeout")
    async def delete_matching(self, pattern: str) -> int:
        """
        Delete every key matching a glob ``pattern``.

        Keys are collected with SCAN and deleted in batches. A key created
        after the scan has passed its slot is not deleted; invalidation is
        best-effort with respect to concurrent writers.
        """
        deleted = 0
        batch: List[str] = []
        async for key in self.client.scan_iter(match=pattern, count=self.scan_batch_size):
            batch.append(key)
            if len(batch) >= self.scan_batch_size:
                deleted += await self.client.delete(*batch)
                batch = []
        if batch:
            deleted += await self.client.delete(*batch)

        if deleted:
            self.logger.info("Cleared cache pattern", pattern=pattern, keys_count=deleted)
        return deleted

    @soft_fail()
    async def get_json(self, key: str) -> Optional[Any]:
        """Read and decode a JSON payload; malformed payloads are a miss."""
        value = await self.client.get(key)
        if value is None:
            self.logger.debug("Cache miss", key=key)
            return None
        self.logger.debug("Cache hit", key=key)
        return serialization.loads(value)

    @soft_fail(default=False)
    async def set_json(self, key: str, value: Any, ttl: int) -> bool:
        await self.client.set(key, serialization.dumps(value), ex=ttl)
        self.logger.debug("Cached value", key=key, ttl=ttl)
        return True

    async def close(self) -> None:
        """Release the underlying connection pool."""
        if self.client is None:
            return
        client, self.client = self.client, None
        try:
            await client.aclose()
        except Exception as exc:
            self.logger.warning("Error closing cache connection", error=str(exc))
        else:
            self.logger.info("Cache connection closed")


def _create_client(settings: BaseConfig) -> redis.Redis:
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=settings.cache_operation_timeout * 4,
        socket_timeout=settings.cache_operation_timeout * 4,
        health_check_interval=30,
    )


async def connect(settings: BaseConfig) -> Optional[KeyValueStore]:
    """
    Connect to the cache service with capped exponential backoff.

    Returns None when caching is disabled or every attempt failed; the
    caller then runs without a cache.
    """
    logger = get_logger("itineraries.cache.kv")

    if not settings.cache_enabled:
        logger.info("Caching disabled by configuration")
        return None

    client = _create_client(settings)
    retry_config = RetryConfig(
        max_attempts=settings.cache_connect_attempts,
        base_delay=settings.cache_connect_base_delay,
        max_delay=settings.cache_connect_max_delay,
    )

    @retry_on_exception((Exception,), retry_config)
    async def _ping() -> None:
        await client.ping()

    try:
        await _ping()
    except RetryError as exc:
        logger.error(
            "Cache unavailable, continuing without caching",
            attempts=exc.attempts,
            error=str(exc.last_exception),
        )
        try:
            await client.aclose()
        except Exception as close_exc:
            logger.debug("Error discarding cache client", error=str(close_exc))
        return None

    logger.info("Connected to cache", url=settings.redis_url)
    return KeyValueStore(
        client,
        operation_timeout=settings.cache_operation_timeout,
        bulk_timeout=settings.cache_bulk_timeout,
        scan_batch_size=settings.cache_scan_batch_size,
    )


async def close(store: Optional[KeyValueStore]) -> None:
    """Gracefully close a store returned by :func:`connect`."""
    if store is not None:
        await store.close()
