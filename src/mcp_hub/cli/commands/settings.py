"""Show and change user settings."""

import click

from mcp_hub.cli.error_boundary import cli_error_boundary
from mcp_hub.cli.output import format_timestamp, user_output
from mcp_hub.core.context import HubContext


@click.group("settings")
def settings_group() -> None:
    """Manage hub settings."""


@settings_group.command("show")
@click.pass_obj
def settings_show_cmd(ctx: HubContext) -> None:
    """Show current settings."""
    settings = ctx.settings.current
    if ctx.settings.path is not None:
        user_output(f"Settings file:        {ctx.settings.path}")
    user_output(f"auto_update_enabled:  {str(settings.auto_update_enabled).lower()}")
    user_output(f"cache_expiry_hours:   {settings.cache_expiry_hours}")
    user_output(f"last_fetch_time:      {format_timestamp(settings.last_fetch_time)}")
    user_output(f"last_config_version:  {settings.last_config_version or '-'}")


@settings_group.command("set")
@click.option("--auto-update/--no-auto-update", default=None, help="Refresh stale catalogs.")
@click.option("--expiry-hours", type=click.IntRange(min=1), help="Hours before the cache expires.")
@click.pass_obj
@cli_error_boundary
def settings_set_cmd(ctx: HubContext, auto_update: bool | None, expiry_hours: int | None) -> None:
    """Change settings."""
    changes: dict[str, object] = {}
    if auto_update is not None:
        changes["auto_update_enabled"] = auto_update
    if expiry_hours is not None:
        changes["cache_expiry_hours"] = expiry_hours
    if not changes:
        raise click.UsageError(
            "Nothing to change: pass --auto-update/--no-auto-update or --expiry-hours"
        )

    ctx.settings.update(**changes)
    user_output(click.style("✓ ", fg="green") + "Settings saved")
