"""ProbeService — detect the CMake version and derive its capabilities.

Pipeline: RUN ``cmake --version`` → FIRST NON-EMPTY LINE → PARSE →
CHECK MINIMUM → DERIVE CAPABILITIES

Spawns exactly one subprocess per probe. Any failure to obtain a version
aborts the run; it is never retried.
"""

from __future__ import annotations

from pathlib import Path

import structlog

from cmkctl.domain.capabilities import (
    CapabilityProbeResult,
    derive_capabilities,
    effective_minimum,
)
from cmkctl.domain.errors import AbortError, ParseError, UnsupportedVersionError, error_as_string
from cmkctl.domain.version import SemanticVersion, is_at_least, parse_version
from cmkctl.infrastructure.runner import CommandRunner
from cmkctl.services.base import BaseService
from cmkctl.services.result import ServiceResult
from cmkctl.services.telemetry import traced

logger = structlog.get_logger(__name__)


def first_version_line(output: str) -> str:
    """Return the first non-empty line of ``--version`` output."""
    for line in output.splitlines():
        if line.strip():
            return line
    raise ParseError("Failed to determine CMake version: no output")


async def probe_capabilities(
    runner: CommandRunner,
    cmake: str,
    minimum: SemanticVersion,
    *,
    cwd: Path | None = None,
) -> CapabilityProbeResult:
    """Probe *cmake* and map its version to capabilities.

    Raises:
        AbortError: The version could not be determined (cause attached).
        UnsupportedVersionError: The detected version is below *minimum*.
    """
    try:
        output = await runner.capture(cmake, ["--version"], cwd=cwd)
        version = parse_version(first_version_line(output))
    except AbortError as exc:
        msg = f"Failed to determine CMake capabilities with error '{error_as_string(exc)}'"
        raise AbortError(msg) from exc

    logger.info("cmake.version", version=str(version), minimum=str(minimum))
    if not is_at_least(version, minimum):
        raise UnsupportedVersionError(version, minimum)

    capabilities = derive_capabilities(version)
    logger.info("cmake.capabilities", **capabilities.model_dump())
    return CapabilityProbeResult(version=version, minimum=minimum, capabilities=capabilities)


class ProbeService(BaseService):
    """Standalone toolchain probe for the ``probe`` command."""

    @traced
    async def probe(self) -> ServiceResult:
        op = "probe"
        settings = self._settings
        try:
            minimum = effective_minimum(
                parse_version(settings.toolchain.minimum_version),
                multi_config=settings.build.multi_config,
            )
            result = await probe_capabilities(
                self._runner,
                settings.toolchain.cmake,
                minimum,
                cwd=settings.project_root,
            )
        except Exception as exc:
            return self._failure(op, exc)
        return ServiceResult(ok=True, op=op, data=result.to_data())
