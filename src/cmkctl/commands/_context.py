"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides the command runner and centralized result
emission (stdout/stderr routing, workflow failure, exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from cmkctl.infrastructure import actions
from cmkctl.infrastructure.runner import CommandRunner
from cmkctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from cmkctl.config.settings import CmkSettings
    from cmkctl.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Subcommands access it via ``@click.pass_obj``.
    """

    def __init__(self, settings: CmkSettings) -> None:
        self.settings = settings
        self._runner: CommandRunner | None = None

        # Configure structured logging
        from cmkctl.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose,
            quiet=settings.quiet,
            log_json=settings.log_json,
        )

        # Enable telemetry context var when verbose
        if settings.verbose:
            from cmkctl.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def runner(self) -> CommandRunner:
        """The subprocess runner shared by every service of this invocation."""
        if self._runner is None:
            self._runner = CommandRunner()
        return self._runner

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, reports the failure to the workflow,
          exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            message = result.error.message if result.error else f"{result.op} failed"
            actions.set_failed(message)
            raise SystemExit(1)
