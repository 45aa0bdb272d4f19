"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, cmkctl.toml only contains
overrides. A project needs no config file at all for the default
Ninja Debug/Release build.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from cmkctl.domain.configs import BUILD_CONFIGURATIONS, BuildConfiguration
from cmkctl.domain.errors import ParseError
from cmkctl.domain.version import parse_version

# --- cmkctl.toml sections ---


class ToolchainConfig(BaseModel):
    """[toolchain] section."""

    model_config = {"frozen": True}

    cmake: str = "cmake"
    ctest: str = "ctest"
    generator: str = "Ninja"
    multi_config_generator: str = "Ninja Multi-Config"
    minimum_version: str = "3.16.0"

    @field_validator("minimum_version")
    @classmethod
    def _check_version(cls, value: str) -> str:
        try:
            parse_version(value)
        except ParseError as exc:
            raise ValueError(exc.message) from exc
        return value


class BuildConfig(BaseModel):
    """[build] section."""

    model_config = {"frozen": True}

    configurations: list[BuildConfiguration] = Field(
        default_factory=lambda: list(BUILD_CONFIGURATIONS)
    )
    multi_config: bool = False
    source_dir: str = "."

    @field_validator("configurations")
    @classmethod
    def _canonical_order(cls, value: list[BuildConfiguration]) -> list[BuildConfiguration]:
        if not value:
            msg = "at least one build configuration is required"
            raise ValueError(msg)
        return [c for c in BUILD_CONFIGURATIONS if c in value]


class RetryConfig(BaseModel):
    """[retry] section — packaging retry on flaky hosts."""

    model_config = {"frozen": True}

    package_max_attempts: int = Field(default=2, ge=1)
    platforms: list[str] = Field(default_factory=lambda: ["darwin"])
