"""Unified settings — CLI flags, action inputs, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs    — CLI flags passed by Click
  2. Action inputs  — ``INPUT_*`` variables set by the GitHub Actions runner
  3. Env vars       — ``CMKCTL_*`` prefix
  4. TOML file      — ``cmkctl.toml`` discovered via walk-up
  5. Code defaults  — baked into the section models

Uses Pydantic Settings v2 with custom :class:`ActionInputsSource` and
:class:`TomlSettingsSource` sources.
"""

from __future__ import annotations

import os
import threading
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, ClassVar

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from cmkctl.config.discovery import find_config
from cmkctl.config.models import BuildConfig, RetryConfig, ToolchainConfig
from cmkctl.infrastructure.actions import get_boolean_input, get_input

# Action input name -> (settings field, is boolean)
ACTION_INPUTS: dict[str, tuple[str, bool]] = {
    "cmake-arguments": ("cmake_arguments", False),
    "output-directories-suffix": ("output_directories_suffix", False),
    "test": ("test", True),
    "package": ("package", True),
    "install": ("install", True),
    "perform-cleanup": ("perform_cleanup", True),
}


class ActionInputsSource(PydanticBaseSettingsSource):
    """Read action inputs from ``INPUT_<NAME>`` environment variables.

    Boolean inputs are true iff the literal value is ``"true"``.
    Inputs that are not set at all are left to lower-priority sources.
    """

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        environ: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(settings_cls)
        env = os.environ if environ is None else environ
        self._data: dict[str, Any] = {}
        for input_name, (field_name, is_bool) in ACTION_INPUTS.items():
            value = get_boolean_input(input_name, env) if is_bool else get_input(input_name, env)
            if value is not None:
                self._data[field_name] = value

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, False

    def __call__(self) -> dict[str, Any]:
        return self._data


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``cmkctl.toml`` file discovered via walk-up."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                import click

                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class CmkSettings(BaseSettings):
    """Unified settings for the entire cmkctl CLI.

    Merges CLI flags, action inputs, environment variables, TOML config
    sections, and code-baked defaults into a single frozen object.
    Stored on the :class:`~cmkctl.commands._context.AppContext`.

    Attributes:
        project_root: Directory every stage runs in and that output paths are
            relative to. Always the CWD unless given explicitly; the location
            of ``cmkctl.toml`` never moves it.
        config_path: Resolved config file, or None when none was found.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "CMKCTL_",
        "env_nested_delimiter": "__",
    }

    # --- Resolved path (derived from the config location, not read from TOML) ---
    project_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- Global CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- Action inputs ---
    cmake_arguments: str = ""
    output_directories_suffix: str = ""
    test: bool = True
    package: bool = False
    install: bool = False
    perform_cleanup: bool = False

    # --- TOML sections ---
    toolchain: ToolchainConfig = Field(default_factory=ToolchainConfig)
    build: BuildConfig = Field(default_factory=BuildConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)

    # Retained for type-checker visibility; not used at runtime.
    _toml_path: ClassVar[Path | None] = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert action inputs above env vars and TOML below them."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            ActionInputsSource(settings_cls),
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        project_root: Path | None = None,
        **cli_flags: Any,
    ) -> CmkSettings:
        """Construct settings from CLI invocation.

        Discovers ``cmkctl.toml`` via walk-up (or explicit *config_path*)
        and merges CLI flags as highest-priority overrides. Flags left
        as None are treated as not given.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(project_root)

        # Published output paths are relative to this directory.
        resolved_root = project_root if project_root is not None else Path.cwd()

        overrides = {k: v for k, v in cli_flags.items() if v is not None}

        _tls.toml_path = toml_path
        try:
            return cls(
                project_root=resolved_root,
                config_path=toml_path,
                **overrides,
            )
        finally:
            _tls.toml_path = None

    def with_overrides(self, **flags: Any) -> CmkSettings:
        """Return a copy with the non-None *flags* applied on top.

        Nested sections are given as dicts and merged field by field.
        """
        update: dict[str, Any] = {}
        for key, value in flags.items():
            if value is None:
                continue
            current = getattr(self, key)
            if isinstance(value, dict) and hasattr(current, "model_copy"):
                update[key] = current.model_copy(update=value)
            else:
                update[key] = value
        return self.model_copy(update=update)
