"""List extensions known to the hub."""

import click
from rich.table import Table

from mcp_hub.cli.error_boundary import cli_error_boundary
from mcp_hub.cli.output import format_install_kind, format_installed, print_table, user_output
from mcp_hub.cli.runtime import run_with_hub
from mcp_hub.core.context import HubContext
from mcp_hub.core.hub import ExtensionHub
from mcp_hub.models.extension import ExtensionState
from mcp_hub.models.registry import ExtensionCategory


@click.command("list")
@click.option("--installed", "installed_only", is_flag=True, help="Only installed extensions.")
@click.option("--updates", "updates_only", is_flag=True, help="Only extensions with updates.")
@click.option(
    "--category",
    type=click.Choice([category.value for category in ExtensionCategory], case_sensitive=False),
    help="Only extensions in this category.",
)
@click.pass_obj
@cli_error_boundary
def list_cmd(
    ctx: HubContext, installed_only: bool, updates_only: bool, category: str | None
) -> None:
    """List available and installed extensions."""
    if sum([installed_only, updates_only, category is not None]) > 1:
        raise click.UsageError("--installed, --updates and --category are mutually exclusive")

    async def collect(hub: ExtensionHub) -> list[ExtensionState]:
        if installed_only:
            return await hub.installed_extensions()
        if updates_only:
            return await hub.extensions_with_updates()
        if category is not None:
            return await hub.extensions_by_category(ExtensionCategory.parse(category))
        return await hub.get_extensions()

    extensions = run_with_hub(ctx, collect)
    if not extensions:
        user_output("No extensions found")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("id", style="cyan", no_wrap=True)
    table.add_column("name", no_wrap=True)
    table.add_column("category", no_wrap=True)
    table.add_column("installed", no_wrap=True)
    table.add_column("latest", no_wrap=True)
    table.add_column("source", no_wrap=True)

    for state in extensions:
        table.add_row(
            state.id,
            state.display_name,
            state.category.value,
            format_installed(state),
            state.latest_version,
            format_install_kind(state.install_kind),
        )
    print_table(table)
