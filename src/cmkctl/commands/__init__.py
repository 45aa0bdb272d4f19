"""Subcommand modules for cmkctl.

Provides register_commands() which uses deferred imports to keep
``cmkctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from cmkctl.commands.build import build
    from cmkctl.commands.dirs import dirs
    from cmkctl.commands.probe import probe

    cli.add_command(build)
    cli.add_command(probe)
    cli.add_command(dirs)
