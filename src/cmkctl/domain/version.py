"""Semantic version parsing and comparison for toolchain version text.

Only ``major.minor.patch`` is modelled. Pre-release and build metadata
are never considered for equality or ordering.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from cmkctl.domain.errors import ParseError

_VERSION_RE = re.compile(r"(?P<major>\d+)\.(?P<minor>\d+)\.(?P<patch>\d+)", re.ASCII)


@dataclass(frozen=True, order=True)
class SemanticVersion:
    """Immutable ``(major, minor, patch)`` triple, ordered lexicographically."""

    major: int
    minor: int
    patch: int

    def __post_init__(self) -> None:
        for name in ("major", "minor", "patch"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                msg = f"Version component {name} must be a non-negative integer, got {value!r}"
                raise ValueError(msg)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    @classmethod
    def from_string(cls, text: str) -> SemanticVersion:
        """Alias for :func:`parse_version`, handy for config values."""
        return parse_version(text)


def parse_version(text: str) -> SemanticVersion:
    """Extract the first ``major.minor.patch`` occurrence from *text*.

    Surrounding text is ignored, so ``"cmake version 3.22.1"`` parses
    to ``3.22.1``.

    Raises:
        ParseError: No triple found, or a component is not an integer.
    """
    match = _VERSION_RE.search(text)
    if match is None:
        raise ParseError(f"No version number found in {text!r}")
    try:
        return SemanticVersion(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
        )
    except ValueError as exc:
        raise ParseError(f"Invalid version number in {text!r}: {exc}") from exc


def is_at_least(version: SemanticVersion, threshold: SemanticVersion) -> bool:
    """True iff *version* is greater than or equal to *threshold*."""
    return version.as_tuple() >= threshold.as_tuple()
