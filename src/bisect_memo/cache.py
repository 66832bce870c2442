"""
Decorator form of MemoizedTask.

`memoized` turns an async (or plain) producer function into a MemoizedTask,
so a module-level fetch function can be shared by every caller:

    @memoized(transform=lambda rates, currency: rates[currency], expiry=60_000)
    async def exchange_rates(currency: str) -> dict: ...

    usd = await exchange_rates.finish("USD")
"""

from typing import Callable
from typing import Optional

from bisect_memo.task import MemoizedTask
from bisect_memo.task import Transform


def memoized(
    transform: Transform, expiry: Optional[float] = None
) -> Callable[[Callable], MemoizedTask]:
    """
    Wraps the decorated producer in a MemoizedTask named after it.

    Args:
        transform (Callable): Applied to the cached value on each `finish()`.
        expiry (float | None): Lifetime of a cached result in milliseconds.
    """

    def decorator(fn: Callable) -> MemoizedTask:
        task = MemoizedTask(
            producer=fn,
            transform=transform,
            expiry=expiry,
            name=getattr(fn, "__qualname__", None),
        )
        task.__doc__ = fn.__doc__
        return task

    return decorator
