"""Output utilities for CLI commands.

User-facing messages go to stderr; tables are rendered with rich.
"""

from datetime import datetime

import click
from rich.console import Console
from rich.table import Table

from mcp_hub.models.extension import ExtensionState, InstallKind


def user_output(message: str = "") -> None:
    click.echo(message, err=True)


def print_table(table: Table) -> None:
    console = Console(stderr=True, width=200)
    console.print(table)


def format_installed(state: ExtensionState) -> str:
    if not state.is_installed:
        return "[dim]-[/dim]"
    if state.has_update:
        return f"[yellow]{state.installed_version}[/yellow]"
    return f"[green]{state.installed_version}[/green]"


def format_install_kind(kind: InstallKind) -> str:
    labels = {
        InstallKind.NOT_INSTALLED: "-",
        InstallKind.PACKAGE_MANAGER: "package manager",
        InstallKind.LOCAL_CLONE: "local clone",
    }
    return labels[kind]


def format_timestamp(value: datetime | None) -> str:
    if value is None:
        return "never"
    return value.isoformat(timespec="seconds")
