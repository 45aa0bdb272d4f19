"""Command: configure, build, test, and optionally package/install."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import click

from cmkctl.commands._base import CmkCommand
from cmkctl.commands._options import apply_input_options, input_options

if TYPE_CHECKING:
    from cmkctl.commands._context import AppContext


@click.command(
    cls=CmkCommand,
    examples="""\
  cmkctl build
  cmkctl build --suffix -ci --package
  cmkctl build --cmake-arguments "-D BUILD_SHARED_LIBS=ON" --install --cleanup
  cmkctl build --multi-config --no-test
  cmkctl --json build""",
)
@input_options
@click.pass_obj
def build(app: AppContext, **flags: Any) -> None:
    """Run the CMake pipeline for every build configuration."""
    from cmkctl.services.build import BuildService

    settings = apply_input_options(app.settings, **flags)
    svc = BuildService(settings, app.runner)
    app.emit(asyncio.run(svc.run()))
