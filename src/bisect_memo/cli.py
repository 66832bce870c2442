"""
Command-line interface for bisect-memo.

The CLI drives a MemoizedTask with a simulated producer so the caching and
expiry behaviour can be observed from a terminal.

Available commands:
- demo: call a memoized producer repeatedly at a fixed interval
- show-settings: print the settings resolved from the environment
"""

import asyncio
import logging
import time

import click

from bisect_memo.config import MemoSettings
from bisect_memo.task import MemoizedTask

logger = logging.getLogger("bisect_memo.cli")


@click.group()
@click.option("--log-level", default=None, help="Logging level (default: from settings)")
def cli(log_level):
    """bisect-memo CLI"""
    level = (log_level or MemoSettings().log_level).upper()
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


@cli.command()
@click.option("--calls", default=3, show_default=True, help="Number of finish() calls")
@click.option(
    "--interval", default=50.0, show_default=True, help="Delay between calls in ms"
)
@click.option(
    "--expiry",
    default=None,
    type=float,
    help="Cache expiry in ms (default: BISECT_MEMO_EXPIRY_MS or never)",
)
@click.option(
    "--latency", default=10.0, show_default=True, help="Simulated producer latency in ms"
)
@click.option("--value", default=1, show_default=True, help="Value the producer returns")
@click.option(
    "--increment", default=1, show_default=True, help="Added to the value by the transform"
)
def demo(calls, interval, expiry, latency, value, increment):
    """Call a memoized producer repeatedly and report producer invocations."""

    invocations = 0

    async def producer():
        nonlocal invocations
        invocations += 1
        logger.info("Producer invoked (#%d)", invocations)
        await asyncio.sleep(latency / 1000)
        return value

    async def _run():
        settings = MemoSettings()
        task = MemoizedTask(
            producer=producer,
            transform=lambda v: v + increment,
            expiry=expiry,
            settings=settings,
            name="demo",
        )
        started = time.monotonic()

        async with task:
            for i in range(calls):
                if i:
                    await asyncio.sleep(interval / 1000)
                result = await task.finish()
                elapsed = (time.monotonic() - started) * 1000
                click.echo(f"call {i + 1} at t={elapsed:.0f}ms -> {result}")

        click.echo(f"producer invocations: {invocations}")

    asyncio.run(_run())


@cli.command()
def show_settings():
    """Print the settings resolved from the environment."""
    settings = MemoSettings()
    expiry = f"{settings.expiry_ms:g}" if settings.expiry_ms is not None else "never"
    click.echo(f"expiry_ms: {expiry}")
    click.echo(f"log_level: {settings.log_level}")


if __name__ == "__main__":
    cli()
