import logging
from pathlib import Path

import click

from mcp_hub.cli.commands.cache import cache_group
from mcp_hub.cli.commands.info import info_cmd
from mcp_hub.cli.commands.list_cmd import list_cmd
from mcp_hub.cli.commands.operations import install_cmd, uninstall_cmd, update_cmd
from mcp_hub.cli.commands.refresh import refresh_cmd
from mcp_hub.cli.commands.settings import settings_group
from mcp_hub.cli.output import user_output
from mcp_hub.core.context import create_context
from mcp_hub.version import __version__

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags

DEBUG_ENV_VAR = "MCP_HUB_DEBUG"


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(version=__version__)
@click.option(
    "--project",
    "project_root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Unity project root containing Packages/.",
)
@click.option("--debug", is_flag=True, envvar=DEBUG_ENV_VAR, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, project_root: Path, debug: bool) -> None:
    """Discover, install, update and remove MCP extensions for a Unity project."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        try:
            ctx.obj = create_context(project_root=project_root, debug=debug)
        except ValueError as e:
            user_output(click.style("Error: ", fg="red") + str(e))
            raise SystemExit(1) from None


cli.add_command(list_cmd)
cli.add_command(info_cmd)
cli.add_command(install_cmd)
cli.add_command(uninstall_cmd)
cli.add_command(update_cmd)
cli.add_command(refresh_cmd)
cli.add_command(cache_group)
cli.add_command(settings_group)


def main() -> None:
    """CLI entry point used by the `mcp-hub` console script."""
    cli()


if __name__ == "__main__":
    main()
