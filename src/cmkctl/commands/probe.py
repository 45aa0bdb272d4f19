"""Command: report the CMake version and the capabilities it grants."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import click

from cmkctl.commands._base import CmkCommand

if TYPE_CHECKING:
    from cmkctl.commands._context import AppContext


@click.command(
    cls=CmkCommand,
    examples="""\
  cmkctl probe
  cmkctl --json probe""",
)
@click.pass_obj
def probe(app: AppContext) -> None:
    """Detect the CMake version and its capabilities."""
    from cmkctl.services.probe import ProbeService

    svc = ProbeService(app.settings, app.runner)
    app.emit(asyncio.run(svc.probe()))
