"""Install, uninstall and update commands."""

import click

from mcp_hub.cli.error_boundary import cli_error_boundary
from mcp_hub.cli.output import format_install_kind, user_output
from mcp_hub.cli.runtime import run_with_hub
from mcp_hub.core.context import HubContext
from mcp_hub.core.hub import ExtensionHub
from mcp_hub.models.extension import ExtensionState


@click.command("install")
@click.argument("extension_id")
@click.pass_obj
@cli_error_boundary
def install_cmd(ctx: HubContext, extension_id: str) -> None:
    """Install EXTENSION_ID."""

    async def install(hub: ExtensionHub) -> ExtensionState:
        return await hub.install(extension_id)

    state = run_with_hub(ctx, install)
    user_output(
        click.style("✓ ", fg="green")
        + f"Installed {state.display_name} {state.installed_version}"
        + f" ({format_install_kind(state.install_kind)})"
    )


@click.command("uninstall")
@click.argument("extension_id")
@click.pass_obj
@cli_error_boundary
def uninstall_cmd(ctx: HubContext, extension_id: str) -> None:
    """Uninstall EXTENSION_ID."""

    async def uninstall(hub: ExtensionHub) -> ExtensionState:
        return await hub.uninstall(extension_id)

    state = run_with_hub(ctx, uninstall)
    user_output(click.style("✓ ", fg="green") + f"Uninstalled {state.display_name}")


@click.command("update")
@click.argument("extension_id")
@click.pass_obj
@cli_error_boundary
def update_cmd(ctx: HubContext, extension_id: str) -> None:
    """Update EXTENSION_ID to the latest version."""

    async def update(hub: ExtensionHub) -> ExtensionState:
        return await hub.update(extension_id)

    state = run_with_hub(ctx, update)
    user_output(
        click.style("✓ ", fg="green")
        + f"Updated {state.display_name} to {state.installed_version}"
    )
