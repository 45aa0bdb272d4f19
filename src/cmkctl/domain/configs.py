"""Build configurations, directory layout, and the consolidated feature flags.

Directory names are a pure function of ``(configuration, suffix,
multi_config)``:

- single-config: ``build-<Config><suffix>`` / ``install-<Config><suffix>``
- multi-config:  ``build<suffix>`` (shared) / ``install-<Config><suffix>``
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel

from cmkctl.domain.capabilities import CapabilitySet


class BuildConfiguration(StrEnum):
    """CMake build types, in the fixed order they are built."""

    DEBUG = "Debug"
    RELEASE = "Release"


BUILD_CONFIGURATIONS: tuple[BuildConfiguration, ...] = (
    BuildConfiguration.DEBUG,
    BuildConfiguration.RELEASE,
)


def build_directory(
    config: BuildConfiguration,
    suffix: str = "",
    *,
    multi_config: bool = False,
) -> str:
    if multi_config:
        return f"build{suffix}"
    return f"build-{config.value}{suffix}"


def install_directory(config: BuildConfiguration, suffix: str = "") -> str:
    return f"install-{config.value}{suffix}"


class DirectoryLayout(BaseModel):
    """Resolved build/install directory names for every configuration."""

    model_config = {"frozen": True}

    build: dict[BuildConfiguration, str]
    install: dict[BuildConfiguration, str]
    multi_config: bool = False

    @classmethod
    def create(
        cls,
        configurations: tuple[BuildConfiguration, ...] = BUILD_CONFIGURATIONS,
        suffix: str = "",
        *,
        multi_config: bool = False,
    ) -> DirectoryLayout:
        return cls(
            build={
                c: build_directory(c, suffix, multi_config=multi_config) for c in configurations
            },
            install={c: install_directory(c, suffix) for c in configurations},
            multi_config=multi_config,
        )

    def outputs(self, *, include_install: bool) -> dict[str, str]:
        """Action output names mapped to directory paths."""
        result: dict[str, str] = {}
        if self.multi_config:
            shared = next(iter(self.build.values()), None)
            if shared is not None:
                result["build-directory"] = shared
        else:
            for config, path in self.build.items():
                result[f"build-directory-{config.value.lower()}"] = path
        if include_install:
            for config, path in self.install.items():
                result[f"install-directory-{config.value.lower()}"] = path
        return result


class BuildFeatures(BaseModel):
    """Every switch that used to distinguish one build script variant from another."""

    model_config = {"frozen": True}

    supports_test_dir: bool = False
    supports_native_install: bool = False
    multi_config_generator: bool = False
    has_test_step: bool = True
    has_package_step: bool = False
    has_install_step: bool = False
    has_cleanup_step: bool = False

    @classmethod
    def resolve(
        cls,
        capabilities: CapabilitySet,
        *,
        multi_config: bool,
        test: bool,
        package: bool,
        install: bool,
        cleanup: bool,
    ) -> BuildFeatures:
        return cls(
            supports_test_dir=capabilities.ctest_test_dir,
            supports_native_install=capabilities.native_install,
            multi_config_generator=multi_config,
            has_test_step=test,
            has_package_step=package,
            has_install_step=install,
            has_cleanup_step=cleanup,
        )
