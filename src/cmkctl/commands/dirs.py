"""Command: show the build/install directories and outputs without building."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from cmkctl.commands._base import CmkCommand
from cmkctl.commands._options import apply_input_options, input_options

if TYPE_CHECKING:
    from cmkctl.commands._context import AppContext


@click.command(
    cls=CmkCommand,
    examples="""\
  cmkctl dirs
  cmkctl dirs --suffix -ci --install
  cmkctl --json dirs --multi-config""",
)
@input_options
@click.pass_obj
def dirs(app: AppContext, **flags: Any) -> None:
    """Show the directory layout a build would use."""
    from cmkctl.services.build import BuildService

    settings = apply_input_options(app.settings, **flags)
    app.emit(BuildService(settings, app.runner).plan())
