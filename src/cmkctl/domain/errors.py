"""Error taxonomy for a build run.

Every error here is fatal: it aborts the remaining stages and
configurations.  The service layer converts them into a ``ServiceError``
using :attr:`AbortError.code`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cmkctl.domain.version import SemanticVersion


class AbortError(Exception):
    """Stop-the-world failure of a build run."""

    code = "ABORTED"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ParseError(AbortError):
    """Version text did not contain a ``major.minor.patch`` triple."""

    code = "PARSE_ERROR"


class UnsupportedVersionError(AbortError):
    """Detected toolchain is older than the minimum supported version."""

    code = "UNSUPPORTED_VERSION"

    def __init__(self, detected: SemanticVersion, minimum: SemanticVersion) -> None:
        super().__init__(
            f"CMake version {detected} is not supported, minimum supported version is {minimum}"
        )
        self.detected = detected
        self.minimum = minimum


class SpawnError(AbortError):
    """A subprocess could not be started at all."""

    code = "SPAWN_ERROR"


class NonZeroExitError(AbortError):
    """A subprocess ran and reported failure."""

    code = "NON_ZERO_EXIT"

    def __init__(self, exit_code: int) -> None:
        super().__init__(f"Command exited with exit code {exit_code}")
        self.exit_code = exit_code


class FilesystemError(AbortError):
    """Removing an output directory failed during cleanup."""

    code = "FILESYSTEM_ERROR"


def error_as_string(error: BaseException) -> str:
    """Render an error as ``"<Kind>: <message>"`` for failure messages."""
    message = str(error)
    if message:
        return f"{type(error).__name__}: {message}"
    return type(error).__name__
