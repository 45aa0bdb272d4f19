"""Root CLI group for cmkctl with global flags and command registration."""

from __future__ import annotations

import click

from cmkctl import __version__
from cmkctl.commands import register_commands
from cmkctl.commands._base import CmkGroup
from cmkctl.commands._context import AppContext
from cmkctl.config.settings import CmkSettings


@click.group(
    cls=CmkGroup,
    invoke_without_command=True,
    examples="""\
    cmkctl build
    cmkctl -c ci/cmkctl.toml build --package
    cmkctl --json probe

    # .github/workflows/ci.yml
    - uses: ./
      id: cmake
      with:
        cmake-arguments: -D BUILD_SHARED_LIBS=ON
        install: true
    - run: ls ${{ steps.cmake.outputs.install-directory-release }}""",
)
@click.version_option(version=__version__, prog_name="cmkctl")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """cmkctl — CMake build orchestration for GitHub Actions."""
    ctx.ensure_object(dict)
    settings = CmkSettings.from_cli(
        config_path=config_path,
        json_output=json_output or None,
        quiet=quiet or None,
        verbose=verbose or None,
        log_json=log_json or None,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
