"""Run hub operations from synchronous click commands."""

import asyncio
from collections.abc import Awaitable, Callable

import click

from mcp_hub.cli.output import user_output
from mcp_hub.core.context import HubContext
from mcp_hub.core.events import ConfigError, HubEvent
from mcp_hub.core.hub import ExtensionHub


def run_with_hub[T](
    ctx: HubContext,
    operation: Callable[[ExtensionHub], Awaitable[T]],
    *,
    refresh_if_stale: bool = True,
) -> T:
    """Create a hub, initialize it and run one operation on a fresh event loop.

    A stale catalog is refreshed before the operation runs. A failed refresh
    is reported as a warning and the operation proceeds with the last good
    catalog (or the built-in registry).
    """

    async def main() -> T:
        hub = ExtensionHub(ctx)
        warnings: list[str] = []

        def collect(event: HubEvent) -> None:
            if isinstance(event, ConfigError):
                warnings.append(event.message)

        unsubscribe = hub.events.subscribe(collect)
        task = hub.initialize(start_refresh=refresh_if_stale)
        if task is not None:
            await task
        unsubscribe()

        for message in warnings:
            user_output(
                click.style("Warning: ", fg="yellow")
                + f"Could not refresh extension catalog: {message}"
            )
        return await operation(hub)

    return asyncio.run(main())
