"""BuildService — CMake configure/build/test/package/install per configuration.

Pipeline per configuration, strictly in order:

    CONFIGURE → BUILD → TEST? → PACKAGE? → INSTALL? → CLEANUP?

Every stage is one subprocess invocation whose arguments are picked from
fixed flags, capability-gated flags, and the user's extra CMake arguments.
The pipeline is fail-fast: the first failure aborts the remaining stages
and configurations, and nothing created so far is rolled back. The only
local recovery is the package retry policy.

With the multi-config generator the project is configured once into a
shared build directory before the first configuration runs.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from cmkctl.domain.capabilities import DEFAULT_MINIMUM_VERSION, effective_minimum
from cmkctl.domain.configs import (
    BUILD_CONFIGURATIONS,
    BuildConfiguration,
    BuildFeatures,
    DirectoryLayout,
)
from cmkctl.domain.errors import AbortError, error_as_string
from cmkctl.domain.retry import SINGLE_ATTEMPT, RetryPolicy, flaky_packaging_policy
from cmkctl.domain.version import SemanticVersion, parse_version
from cmkctl.infrastructure import actions
from cmkctl.infrastructure.filesystem import remove_directories
from cmkctl.infrastructure.runner import CommandRunner
from cmkctl.services.base import BaseService
from cmkctl.services.probe import probe_capabilities
from cmkctl.services.result import BuildProgress, ServiceResult
from cmkctl.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from cmkctl.config.settings import CmkSettings

logger = structlog.get_logger(__name__)


def split_arguments(text: str) -> tuple[str, ...]:
    """Split user-supplied arguments on whitespace, dropping empty tokens."""
    return tuple(text.split())


@dataclass(frozen=True)
class BuildOptions:
    """Everything a build run needs, resolved once at process start."""

    root: Path
    source_dir: str = "."
    cmake: str = "cmake"
    ctest: str = "ctest"
    generator: str = "Ninja"
    multi_config_generator: str = "Ninja Multi-Config"
    minimum_version: SemanticVersion = DEFAULT_MINIMUM_VERSION
    configurations: tuple[BuildConfiguration, ...] = BUILD_CONFIGURATIONS
    multi_config: bool = False
    cmake_arguments: tuple[str, ...] = ()
    suffix: str = ""
    test: bool = True
    package: bool = False
    install: bool = False
    cleanup: bool = False
    package_retry: RetryPolicy = SINGLE_ATTEMPT
    platform: str = field(default_factory=actions.host_platform)

    @classmethod
    def from_settings(cls, settings: CmkSettings) -> BuildOptions:
        return cls(
            root=settings.project_root,
            source_dir=settings.build.source_dir,
            cmake=settings.toolchain.cmake,
            ctest=settings.toolchain.ctest,
            generator=settings.toolchain.generator,
            multi_config_generator=settings.toolchain.multi_config_generator,
            minimum_version=parse_version(settings.toolchain.minimum_version),
            configurations=tuple(settings.build.configurations),
            multi_config=settings.build.multi_config,
            cmake_arguments=split_arguments(settings.cmake_arguments),
            suffix=settings.output_directories_suffix,
            test=settings.test,
            package=settings.package,
            install=settings.install,
            cleanup=settings.perform_cleanup,
            package_retry=flaky_packaging_policy(
                tuple(settings.retry.platforms),
                settings.retry.package_max_attempts,
            ),
        )

    @property
    def layout(self) -> DirectoryLayout:
        return DirectoryLayout.create(
            self.configurations,
            self.suffix,
            multi_config=self.multi_config,
        )

    @property
    def effective_minimum(self) -> SemanticVersion:
        return effective_minimum(self.minimum_version, multi_config=self.multi_config)

    def outputs(self) -> dict[str, str]:
        return self.layout.outputs(include_install=self.install)


class BuildService(BaseService):
    """Runs the fail-fast build pipeline for every configuration."""

    def __init__(
        self,
        settings: CmkSettings,
        runner: CommandRunner | None = None,
        *,
        options: BuildOptions | None = None,
    ) -> None:
        super().__init__(settings, runner)
        self._options = options or BuildOptions.from_settings(settings)
        self._progress = BuildProgress()

    @property
    def options(self) -> BuildOptions:
        return self._options

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    @traced
    def plan(self) -> ServiceResult:
        """Describe the directories and outputs a build would use."""
        opts = self._options
        layout = opts.layout
        return ServiceResult(
            ok=True,
            op="dirs",
            data={
                "configurations": [c.value for c in opts.configurations],
                "multi_config": opts.multi_config,
                "build_directories": {c.value: p for c, p in layout.build.items()},
                "install_directories": (
                    {c.value: p for c, p in layout.install.items()} if opts.install else {}
                ),
                "outputs": opts.outputs(),
            },
        )

    @traced
    async def run(self) -> ServiceResult:
        """PROBE → PUBLISH OUTPUTS → per-configuration pipeline."""
        op = "build"
        opts = self._options
        layout = opts.layout
        data: dict[str, Any] = {"outputs": opts.outputs()}

        try:
            self._log_inputs()
            probe = await probe_capabilities(
                self._runner,
                opts.cmake,
                opts.effective_minimum,
                cwd=opts.root,
            )
            data.update(probe.to_data())
            features = BuildFeatures.resolve(
                probe.capabilities,
                multi_config=opts.multi_config,
                test=opts.test,
                package=opts.package,
                install=opts.install,
                cleanup=opts.cleanup,
            )
            logger.info("build.features", **features.model_dump())

            self._publish_outputs()

            if features.multi_config_generator:
                await self._configure_multi(layout)
            for index, config in enumerate(opts.configurations):
                last = index == len(opts.configurations) - 1
                await self._run_configuration(config, layout, features, last=last)
                self._progress.finish(config.value)
        except Exception as exc:
            data.update(self._progress.as_data())
            return self._failure(op, exc, data=data)

        data.update(self._progress.as_data())
        return ServiceResult(ok=True, op=op, data=data)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def _run_configuration(
        self,
        config: BuildConfiguration,
        layout: DirectoryLayout,
        features: BuildFeatures,
        *,
        last: bool,
    ) -> None:
        build_dir = layout.build[config]
        install_dir = layout.install[config]

        if not features.multi_config_generator:
            await self._configure(config, build_dir, install_dir, features)
        await self._build(config, build_dir, features)
        if features.has_test_step:
            await self._test(config, build_dir, features)
        if features.has_package_step:
            await self._package(config, build_dir, features)
        if features.has_install_step:
            await self._install(config, build_dir, install_dir, features)
        if features.has_cleanup_step:
            await self._cleanup(config, build_dir, install_dir, features, last=last)

    async def _configure(
        self,
        config: BuildConfiguration,
        build_dir: str,
        install_dir: str,
        features: BuildFeatures,
    ) -> None:
        opts = self._options
        args = [
            "-G", opts.generator,
            "-S", opts.source_dir,
            "-B", build_dir,
            "-D", f"CMAKE_BUILD_TYPE={config.value}",
        ]  # fmt: skip
        if features.has_install_step and not features.supports_native_install:
            args += ["-D", f"CMAKE_INSTALL_PREFIX={opts.root / install_dir}"]
        args += opts.cmake_arguments
        await self._stage("Configure", config.value, opts.cmake, args)

    async def _configure_multi(self, layout: DirectoryLayout) -> None:
        opts = self._options
        build_dir = next(iter(layout.build.values()))
        config_types = ";".join(c.value for c in opts.configurations)
        args = [
            "-G", opts.multi_config_generator,
            "-S", opts.source_dir,
            "-B", build_dir,
            "-D", f"CMAKE_CONFIGURATION_TYPES={config_types}",
        ]  # fmt: skip
        args += opts.cmake_arguments
        await self._stage("Configure", "Multi-Config", opts.cmake, args)

    async def _build(
        self,
        config: BuildConfiguration,
        build_dir: str,
        features: BuildFeatures,
    ) -> None:
        args = ["--build", build_dir, *self._config_args(config, features, "--config")]
        await self._stage("Build", config.value, self._options.cmake, args)

    async def _test(
        self,
        config: BuildConfiguration,
        build_dir: str,
        features: BuildFeatures,
    ) -> None:
        opts = self._options
        args = ["--output-on-failure", *self._config_args(config, features, "-C")]
        if features.supports_test_dir:
            await self._stage("Test", config.value, opts.ctest, [*args, "--test-dir", build_dir])
        else:
            await self._stage("Test", config.value, opts.ctest, args, cwd=opts.root / build_dir)

    async def _package(
        self,
        config: BuildConfiguration,
        build_dir: str,
        features: BuildFeatures,
    ) -> None:
        opts = self._options
        args = [
            "--build", build_dir,
            *self._config_args(config, features, "--config"),
            "--target", "package",
        ]  # fmt: skip
        await self._stage("Package", config.value, opts.cmake, args, retry=opts.package_retry)

    async def _install(
        self,
        config: BuildConfiguration,
        build_dir: str,
        install_dir: str,
        features: BuildFeatures,
    ) -> None:
        config_args = self._config_args(config, features, "--config")
        if features.supports_native_install:
            args = ["--install", build_dir, *config_args, "--prefix", install_dir]
        else:
            # Prefix was fixed at configure time.
            args = ["--build", build_dir, *config_args, "--target", "install"]
        await self._stage("Install", config.value, self._options.cmake, args)

    async def _cleanup(
        self,
        config: BuildConfiguration,
        build_dir: str,
        install_dir: str,
        features: BuildFeatures,
        *,
        last: bool,
    ) -> None:
        root = self._options.root
        paths: list[Path] = []
        # The multi-config build directory is shared, remove it once at the end.
        if not features.multi_config_generator or last:
            paths.append(root / build_dir)
        if features.has_install_step:
            paths.append(root / install_dir)
        if not paths:
            return
        title = f"Cleanup {config.value}"
        with actions.group(title), trace_span(title):
            logger.info("stage.start", stage="Cleanup", config=config.value)
            self._progress.stages += 1
            await remove_directories(*paths)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _config_args(
        config: BuildConfiguration,
        features: BuildFeatures,
        flag: str,
    ) -> list[str]:
        if features.multi_config_generator:
            return [flag, config.value]
        return []

    async def _stage(
        self,
        stage: str,
        label: str,
        program: str,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        retry: RetryPolicy = SINGLE_ATTEMPT,
    ) -> None:
        title = f"{stage} {label}"
        with actions.group(title), trace_span(title) as span:
            logger.info("stage.start", stage=stage, config=label)
            self._progress.stages += 1
            attempts = 0

            async def attempt() -> None:
                nonlocal attempts
                attempts += 1
                await self._execute(program, args, cwd or self._options.root)

            try:
                await retry.run(self._options.platform, attempt)
            finally:
                if span is not None:
                    span.annotate("attempts", attempts)

    async def _execute(self, program: str, args: Sequence[str], cwd: Path) -> None:
        try:
            await self._runner.run(program, args, cwd=cwd)
        except AbortError as exc:
            msg = f"Command '{program}' failed with error '{error_as_string(exc)}'"
            raise AbortError(msg) from exc

    def _publish_outputs(self) -> None:
        for name, value in self._options.outputs().items():
            actions.set_output(name, value)

    def _log_inputs(self) -> None:
        opts = self._options
        logger.info(
            "build.inputs",
            cmake_arguments=list(opts.cmake_arguments),
            output_directories_suffix=opts.suffix,
            test=opts.test,
            package=opts.package,
            install=opts.install,
            perform_cleanup=opts.cleanup,
            multi_config=opts.multi_config,
            platform=opts.platform,
        )
