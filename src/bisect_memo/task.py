"""
Single-slot memoization for asynchronous producers.

This module provides the MemoizedTask class, which wraps a producer function
with exactly one cached in-flight/last result and an optional expiry:

- Concurrent callers share one pending producer call instead of starting new ones
- The cached result is dropped after `expiry` milliseconds (if configured)
- A transform is applied to the cached value on every `finish()` call
- Failed producer calls are never served twice; the next call retries

The slot lives in a per-instance aiocache memory backend, which owns the
expiry timer and cancels it whenever the slot is overwritten or deleted.

Example usage:
    from bisect_memo import MemoizedTask

    task = MemoizedTask(
        producer=fetch_rates,
        transform=lambda rates, currency: rates[currency],
        expiry=30_000,
    )

    usd = await task.finish("USD")
    eur = await task.finish("EUR")  # served from the same cached rates
"""

import asyncio
import inspect
import logging
import time
from typing import Any
from typing import Callable
from typing import Optional
from uuid import uuid4

from aiocache import SimpleMemoryCache
from aiocache.serializers import NullSerializer

from bisect_memo.config import MemoSettings
from bisect_memo.exceptions import ConfigurationError

logger = logging.getLogger("bisect_memo.task")

Producer = Callable[..., Any]
Transform = Callable[..., Any]

_SLOT_KEY = "result"


def _is_failed(future: asyncio.Future) -> bool:
    if not future.done():
        return False
    return future.cancelled() or future.exception() is not None


def _call_arg_routing(fn: Callable[..., Any]) -> tuple[bool, bool]:
    """
    Returns (forward_args, forward_kwargs) for calling `fn` after the value.

    Positional call arguments are forwarded if `fn` takes `*args` or more than
    one positional parameter. Keyword call arguments are forwarded if `fn`
    takes `**kwargs`, keyword-only parameters, or a named parameter after the
    value that a keyword can fill.
    """
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        # Builtins without introspectable signatures get the value only
        return False, False

    params = list(signature.parameters.values())
    positional = [
        p for p in params if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
    ]
    kinds = {p.kind for p in params}

    forward_args = inspect.Parameter.VAR_POSITIONAL in kinds or len(positional) > 1
    forward_kwargs = (
        inspect.Parameter.VAR_KEYWORD in kinds
        or inspect.Parameter.KEYWORD_ONLY in kinds
        or any(p.kind == p.POSITIONAL_OR_KEYWORD for p in positional[1:])
    )
    return forward_args, forward_kwargs


def _validate_expiry(expiry: Optional[float]) -> Optional[float]:
    if expiry is None:
        return None
    if isinstance(expiry, bool) or not isinstance(expiry, (int, float)):
        raise ConfigurationError(
            f"expiry must be a number of milliseconds, got {type(expiry).__name__}",
            details=expiry,
        )
    if expiry <= 0:
        raise ConfigurationError("expiry must be greater than zero", details=expiry)
    return expiry


class MemoizedTask:
    """
    Caches at most one pending or resolved result of an asynchronous producer.

    The first call to `start()` or `finish()` invokes the producer and stores the
    resulting future. Every later call, including calls arriving while the
    producer is still running, awaits that same future until it expires or is
    cleared. The cache holds a single slot: arguments of calls served from the
    cache are forwarded to the transform but never reach the producer.

    Args:
        producer (Callable): Function returning a value or an awaitable of a value.
        transform (Callable): Applied to the resolved value on each `finish()`.
            Receives the original call arguments too if its signature allows it.
        expiry (float | None): Lifetime of a cached result in milliseconds,
            measured from its creation. None means it never expires.
        settings (MemoSettings | None): Supplies `expiry_ms` when `expiry` is None.
        name (str | None): Label used in log records. Defaults to the
            producer's qualified name.

    Raises:
        ConfigurationError: If producer or transform is not callable, or the
            expiry is not a positive number.
    """

    def __init__(
        self,
        producer: Producer,
        transform: Transform,
        expiry: Optional[float] = None,
        settings: Optional[MemoSettings] = None,
        name: Optional[str] = None,
    ):
        if not callable(producer):
            raise ConfigurationError("producer must be callable", details=producer)
        if not callable(transform):
            raise ConfigurationError("transform must be callable", details=transform)

        if expiry is None and settings is not None:
            expiry = settings.expiry_ms

        self.producer = producer
        self.transform = transform
        self.expiry = _validate_expiry(expiry)
        self.name = name or getattr(producer, "__qualname__", repr(producer))

        self._forward_args, self._forward_kwargs = _call_arg_routing(transform)
        self._lock = asyncio.Lock()
        self._cache = SimpleMemoryCache(
            serializer=NullSerializer(), namespace=f"bisect_memo:{uuid4().hex}:"
        )
        self._current: Optional[asyncio.Future] = None
        self._expires_at: Optional[float] = None

    @property
    def ttl(self) -> Optional[float]:
        """Expiry converted to seconds, as used by the storage backend."""
        return self.expiry / 1000 if self.expiry is not None else None

    @property
    def is_cached(self) -> bool:
        """
        True if a result is held that has not expired, been cleared, or failed.
        """
        if self._current is None or _is_failed(self._current):
            return False
        return self._expires_at is None or time.monotonic() < self._expires_at

    async def start(self, *args: Any, **kwargs: Any) -> Any:
        """
        Returns the producer's value, invoking the producer only if nothing is cached.

        Callers waiting on a shared in-flight call are shielded from each other:
        cancelling one caller does not cancel the producer for the rest.

        Returns:
            Any: The raw (untransformed) producer value.

        Raises:
            Exception: Whatever the producer raised, unchanged.
        """
        future = await self._acquire(args, kwargs)
        return await asyncio.shield(future)

    async def finish(self, *args: Any, **kwargs: Any) -> Any:
        """
        Returns the cached producer value passed through the transform.

        Transform failures propagate to the caller but leave the cached
        producer result in place.
        """
        value = await self.start(*args, **kwargs)
        call_args = args if self._forward_args else ()
        call_kwargs = kwargs if self._forward_kwargs else {}
        result = self.transform(value, *call_args, **call_kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def clear(self) -> None:
        """
        Discards the cached result and cancels its expiry timer.

        Idempotent. A producer call still in flight is not cancelled; callers
        already waiting on it receive its outcome.
        """
        async with self._lock:
            await self._cache.delete(_SLOT_KEY)
            if self._current is not None:
                logger.debug(f"Cleared cached result for {self.name}")
            self._current = None
            self._expires_at = None

    async def aclose(self) -> None:
        await self.clear()

    async def __aenter__(self) -> "MemoizedTask":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def _acquire(self, args: tuple, kwargs: dict) -> asyncio.Future:
        # The lock covers the check-and-replace of the slot only, never the producer
        async with self._lock:
            cached = await self._cache.get(_SLOT_KEY)
            if cached is not None and not _is_failed(cached) and not self._expired():
                logger.debug(f"Cache HIT for {self.name}")
                return cached

            if cached is not None and _is_failed(cached):
                logger.debug(f"Discarding failed result for {self.name}")
            elif cached is not None:
                logger.debug(f"Cached result for {self.name} expired")
            else:
                logger.debug(f"Cache MISS for {self.name}, invoking producer")

            future = asyncio.ensure_future(self._produce(args, kwargs))
            # Overwriting the slot cancels the previous expiry timer
            await self._cache.set(_SLOT_KEY, future, ttl=self.ttl)
            self._current = future
            if self.ttl is not None:
                self._expires_at = time.monotonic() + self.ttl
            else:
                self._expires_at = None
            return future

    def _expired(self) -> bool:
        # Covers a timer that is due but has not run yet
        return self._expires_at is not None and time.monotonic() >= self._expires_at

    async def _produce(self, args: tuple, kwargs: dict) -> Any:
        try:
            result = self.producer(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.debug(f"Producer for {self.name} failed: {e!r}")
            raise
        return result

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, expiry={self.expiry!r}, "
            f"cached={self.is_cached})"
        )


def bisect(
    producer: Producer,
    transform: Transform,
    expiry: Optional[float] = None,
) -> MemoizedTask:
    """
    Wraps `producer` in a MemoizedTask.

    Example:
        rates = bisect(fetch_rates, lambda r: r["USD"], expiry=60_000)
        usd = await rates.finish()
    """
    return MemoizedTask(producer=producer, transform=transform, expiry=expiry)

