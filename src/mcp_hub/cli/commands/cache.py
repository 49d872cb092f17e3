"""Inspect and clear the catalog cache."""

import click

from mcp_hub.cli.error_boundary import cli_error_boundary
from mcp_hub.cli.output import format_timestamp, user_output
from mcp_hub.cli.runtime import run_with_hub
from mcp_hub.core.context import HubContext
from mcp_hub.core.hub import ExtensionHub
from mcp_hub.models.cache import CacheInfo


@click.group("cache")
def cache_group() -> None:
    """Manage the cached extension catalog."""


@cache_group.command("info")
@click.pass_obj
@cli_error_boundary
def cache_info_cmd(ctx: HubContext) -> None:
    """Show the state of the catalog cache."""

    async def info(hub: ExtensionHub) -> CacheInfo:
        return hub.cache_info()

    cache = run_with_hub(ctx, info, refresh_if_stale=False)
    user_output(f"Cached:        {'yes' if cache.has_cache else 'no'}")
    user_output(f"Version:       {cache.config_version}")
    user_output(f"Last fetch:    {format_timestamp(cache.last_fetch_time)}")
    user_output(f"Expired:       {'yes' if cache.is_expired else 'no'}")
    user_output(f"Expiry hours:  {cache.expiry_hours}")
    user_output(f"Auto update:   {'on' if cache.auto_update_enabled else 'off'}")


@cache_group.command("clear")
@click.pass_obj
@cli_error_boundary
def cache_clear_cmd(ctx: HubContext) -> None:
    """Delete the cached catalog; the next command refetches it."""

    async def clear(hub: ExtensionHub) -> None:
        hub.clear_cache()

    run_with_hub(ctx, clear, refresh_if_stale=False)
    user_output(click.style("✓ ", fg="green") + "Catalog cache cleared")
