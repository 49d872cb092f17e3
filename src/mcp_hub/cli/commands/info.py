"""Show details of one extension."""

import click

from mcp_hub.cli.error_boundary import cli_error_boundary
from mcp_hub.cli.output import format_install_kind, user_output
from mcp_hub.cli.runtime import run_with_hub
from mcp_hub.core.context import HubContext
from mcp_hub.core.errors import ExtensionNotFoundError
from mcp_hub.core.hub import ExtensionHub
from mcp_hub.models.extension import ExtensionState


@click.command("info")
@click.argument("extension_id")
@click.pass_obj
@cli_error_boundary
def info_cmd(ctx: HubContext, extension_id: str) -> None:
    """Show details of EXTENSION_ID."""

    async def lookup(hub: ExtensionHub) -> tuple[ExtensionState, str | None]:
        state = await hub.get_extension(extension_id)
        if state is None:
            raise ExtensionNotFoundError(extension_id)
        directory = None
        if state.is_installed:
            directory = hub.reconciliation.find_package_directory(extension_id)
        return state, directory

    state, directory = run_with_hub(ctx, lookup)

    user_output(click.style(state.display_name, bold=True) + f" ({state.id})")
    user_output(f"  Description: {state.description}")
    user_output(f"  Author:      {state.author}")
    user_output(f"  Category:    {state.category.value}")
    user_output(f"  Latest:      {state.latest_version}")
    if state.is_installed:
        kind = format_install_kind(state.install_kind)
        user_output(f"  Installed:   {state.installed_version} ({kind})")
    else:
        user_output("  Installed:   no")
    if state.has_update:
        user_output(click.style("  Update available", fg="yellow"))
    if directory is not None:
        user_output(f"  Directory:   Packages/{directory}")
    if state.package_url:
        user_output(f"  Source:      {state.package_url}")
    if state.documentation_url:
        user_output(f"  Docs:        {state.documentation_url}")
    if state.dependencies:
        user_output(f"  Depends on:  {', '.join(state.dependencies)}")
    if state.keywords:
        user_output(f"  Keywords:    {', '.join(sorted(state.keywords))}")
