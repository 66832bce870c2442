"""
Test utilities for bisect-memo.

Fake producers that count invocations and let tests control when and how
each call resolves.
"""

import asyncio


class CountingProducer:
    """Async producer that records every invocation."""

    def __init__(self, value=1, delay: float = 0.0, error: Exception | None = None):
        """
        Args:
            value: Returned value, or a callable building it from the call args.
            delay: Seconds to sleep before resolving.
            error: Raised instead of returning a value if set.
        """
        self.value = value
        self.delay = delay
        self.error = error
        self.calls = []

    @property
    def call_count(self):
        """Number of times the producer was invoked."""
        return len(self.calls)

    async def __call__(self, *args, **kwargs):
        self.calls.append((args, kwargs))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if callable(self.value):
            return self.value(*args, **kwargs)
        return self.value


class GatedProducer:
    """Async producer that only resolves once the test opens the gate."""

    def __init__(self, value=1):
        self.value = value
        self.gate = asyncio.Event()
        self.call_count = 0

    async def __call__(self, *args, **kwargs):
        self.call_count += 1
        await self.gate.wait()
        return self.value
