"""Package manager models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class InstalledPackage:
    """A package as reported by the host package manager."""

    name: str
    version: str
    display_name: str | None = None
    description: str | None = None
    author: str | None = None
    source: str | None = None  # "registry", "git", "builtin", ...
