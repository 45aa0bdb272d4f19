"""Shared Click options mirroring the action inputs.

Every option defaults to None so an unset flag falls through to the
action inputs, ``CMKCTL_*`` env vars, and ``cmkctl.toml``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import click

if TYPE_CHECKING:
    from cmkctl.config.settings import CmkSettings

_OPTIONS: list[Callable[[Callable[..., Any]], Callable[..., Any]]] = [
    click.option(
        "--cmake-arguments",
        default=None,
        help="Extra arguments for the configure step (whitespace-separated).",
    ),
    click.option(
        "--suffix",
        "output_directories_suffix",
        default=None,
        help="Suffix appended to build/install directory names.",
    ),
    click.option("--test/--no-test", default=None, help="Run ctest after building."),
    click.option("--package/--no-package", default=None, help="Build the package target."),
    click.option("--install/--no-install", default=None, help="Install into install-<Config>."),
    click.option(
        "--cleanup/--no-cleanup",
        "perform_cleanup",
        default=None,
        help="Remove build/install directories after each configuration.",
    ),
    click.option(
        "--multi-config/--single-config",
        default=None,
        help="Use the Ninja Multi-Config generator with one shared build directory.",
    ),
    click.option("--source-dir", default=None, help="CMake source directory."),
]


def input_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Apply every build input option to a command."""
    for option in reversed(_OPTIONS):
        func = option(func)
    return func


def apply_input_options(settings: CmkSettings, **flags: Any) -> CmkSettings:
    """Layer the given CLI flags over *settings*."""
    multi_config = flags.pop("multi_config", None)
    source_dir = flags.pop("source_dir", None)
    section = {
        k: v
        for k, v in {"multi_config": multi_config, "source_dir": source_dir}.items()
        if v is not None
    }
    return settings.with_overrides(build=section or None, **flags)
