"""Click classes giving every cmkctl command an ``--examples`` flag.

``--help`` stays short. ``--examples`` prints ready-to-paste invocations;
on the root group it prints a workflow step using the action.
"""

from __future__ import annotations

import textwrap
from typing import Any

import click


class _ExamplesMixin:
    """Adds ``--examples`` to the parameters of commands that define examples."""

    examples: str | None

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = textwrap.dedent(examples).strip("\n") if examples else None

    def get_params(self, ctx: click.Context) -> list[click.Parameter]:
        params: list[click.Parameter] = super().get_params(ctx)  # type: ignore[misc]
        if self.examples:
            return [*params, self._examples_option()]
        return params

    def _examples_option(self) -> click.Option:
        text = self.examples or ""

        def show(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
            if not value or ctx.resilient_parsing:
                return
            click.echo(f"Examples for '{ctx.command_path}':\n")
            click.echo(textwrap.indent(text, "  "))
            ctx.exit(0)

        return click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show,
            help="Show usage examples and exit.",
        )


class CmkCommand(_ExamplesMixin, click.Command):
    """A cmkctl subcommand (``build``, ``probe``, ``dirs``)."""


class CmkGroup(_ExamplesMixin, click.Group):
    """The root ``cmkctl`` group; subcommands default to :class:`CmkCommand`."""

    command_class = CmkCommand
