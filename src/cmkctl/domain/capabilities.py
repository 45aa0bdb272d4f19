"""CMake capability flags derived from a detected version.

Capabilities are a pure function of the parsed version: every threshold
is a fixed ``SemanticVersion`` and a capability is granted iff the
detected version is at least that threshold.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, field_serializer

from cmkctl.domain.version import SemanticVersion, is_at_least

CTEST_TEST_DIR_SINCE = SemanticVersion(3, 20, 0)
NATIVE_INSTALL_SINCE = SemanticVersion(3, 15, 0)
NINJA_MULTI_CONFIG_SINCE = SemanticVersion(3, 17, 0)

DEFAULT_MINIMUM_VERSION = SemanticVersion(3, 16, 0)

CAPABILITY_THRESHOLDS: dict[str, SemanticVersion] = {
    "ctest_test_dir": CTEST_TEST_DIR_SINCE,
    "native_install": NATIVE_INSTALL_SINCE,
    "ninja_multi_config": NINJA_MULTI_CONFIG_SINCE,
}


class CapabilitySet(BaseModel):
    """Boolean capability flags for one toolchain version."""

    model_config = {"frozen": True}

    ctest_test_dir: bool = False
    native_install: bool = False
    ninja_multi_config: bool = False


def derive_capabilities(version: SemanticVersion) -> CapabilitySet:
    """Map *version* to its :class:`CapabilitySet`."""
    return CapabilitySet(
        **{name: is_at_least(version, since) for name, since in CAPABILITY_THRESHOLDS.items()}
    )


def effective_minimum(
    minimum: SemanticVersion,
    *,
    multi_config: bool = False,
) -> SemanticVersion:
    """Raise *minimum* to what the requested generator needs."""
    if multi_config:
        return max(minimum, NINJA_MULTI_CONFIG_SINCE)
    return minimum


class CapabilityProbeResult(BaseModel):
    """Outcome of a successful probe: detected version and its capabilities."""

    model_config = {"frozen": True}

    version: SemanticVersion
    minimum: SemanticVersion
    capabilities: CapabilitySet

    @field_serializer("version", "minimum")
    def _serialize_version(self, value: SemanticVersion) -> str:
        return str(value)

    def to_data(self) -> dict[str, Any]:
        return {
            "version": str(self.version),
            "minimum_version": str(self.minimum),
            "capabilities": self.capabilities.model_dump(),
        }
