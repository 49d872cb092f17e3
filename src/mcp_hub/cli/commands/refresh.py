"""Force a refresh of the remote extension catalog."""

import click

from mcp_hub.cli.error_boundary import cli_error_boundary
from mcp_hub.cli.output import user_output
from mcp_hub.cli.runtime import run_with_hub
from mcp_hub.core.context import HubContext
from mcp_hub.core.events import ConfigError, HubEvent
from mcp_hub.core.hub import ExtensionHub


@click.command("refresh")
@click.pass_obj
@cli_error_boundary
def refresh_cmd(ctx: HubContext) -> None:
    """Fetch the extension catalog now, ignoring the cache expiry."""
    errors: list[str] = []

    async def refresh(hub: ExtensionHub) -> str | None:
        def collect(event: HubEvent) -> None:
            if isinstance(event, ConfigError):
                errors.append(event.message)

        hub.events.subscribe(collect)
        if not await hub.refresh_remote_configuration():
            return None
        catalog = hub.remote_config.current_config
        return catalog.version if catalog is not None else None

    version = run_with_hub(ctx, refresh, refresh_if_stale=False)
    if version is None:
        detail = errors[-1] if errors else "unknown error"
        user_output(click.style("Error: ", fg="red") + f"Catalog refresh failed: {detail}")
        raise SystemExit(1)
    user_output(click.style("✓ ", fg="green") + f"Extension catalog updated to version {version}")
