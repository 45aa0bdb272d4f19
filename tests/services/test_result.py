"""Tests for ServiceResult and ServiceError."""

import json

import pytest

from cmkctl.domain.errors import AbortError, NonZeroExitError, UnsupportedVersionError
from cmkctl.domain.version import SemanticVersion
from cmkctl.services.result import BuildProgress, ServiceError, ServiceResult


class TestServiceResult:
    def test_success_construction(self) -> None:
        result = ServiceResult(ok=True, op="build", data={"completed": ["Debug"]})
        assert result.ok is True
        assert result.op == "build"
        assert result.warnings == []
        assert result.error is None
        assert result.meta is None

    def test_error_construction(self) -> None:
        error = ServiceError(code="NON_ZERO_EXIT", message="Command 'cmake' failed")
        result = ServiceResult(ok=False, op="build", error=error)
        assert result.ok is False
        assert result.error is not None
        assert result.error.code == "NON_ZERO_EXIT"
        assert result.error.detail == {}

    def test_json_serialization(self) -> None:
        result = ServiceResult(ok=True, op="probe", data={"version": "3.25.2"}, meta={"x": 1})
        parsed = json.loads(result.model_dump_json())
        assert parsed["ok"] is True
        assert parsed["data"]["version"] == "3.25.2"
        assert parsed["meta"]["x"] == 1

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="build")
        with pytest.raises(Exception):
            result.ok = False  # type: ignore[misc]


class TestServiceErrorFromException:
    def test_direct_error_names_its_kind(self) -> None:
        exc = UnsupportedVersionError(SemanticVersion(3, 10, 0), SemanticVersion(3, 16, 0))
        error = ServiceError.from_exception(exc)
        assert error.code == "UNSUPPORTED_VERSION"
        assert error.message == (
            "UnsupportedVersionError: CMake version 3.10.0 is not supported, "
            "minimum supported version is 3.16.0"
        )
        assert error.detail == {"kind": "UnsupportedVersionError"}

    def test_wrapped_error_takes_code_of_cause(self) -> None:
        cause = NonZeroExitError(2)
        wrapped = AbortError(
            "Command 'cmake' failed with error 'NonZeroExitError: Command exited with exit code 2'"
        )
        wrapped.__cause__ = cause
        error = ServiceError.from_exception(wrapped)
        assert error.code == "NON_ZERO_EXIT"
        assert error.message == wrapped.message
        assert error.detail == {"kind": "AbortError", "cause": "NON_ZERO_EXIT"}

    def test_plain_abort_message_is_kept(self) -> None:
        error = ServiceError.from_exception(AbortError("Failed to determine CMake capabilities"))
        assert error.code == "ABORTED"
        assert error.message == "Failed to determine CMake capabilities"

    def test_unexpected_exception(self) -> None:
        error = ServiceError.from_exception(KeyError("x"))
        assert error.code == "UNHANDLED"
        assert error.message == "!!! Unhandled exception 'x'"


class TestBuildProgress:
    def test_tracks_configurations_and_stages(self) -> None:
        progress = BuildProgress()
        progress.stages += 3
        progress.finish("Debug")
        assert progress.as_data() == {"completed": ["Debug"], "stages": 3}

    def test_as_data_is_a_copy(self) -> None:
        progress = BuildProgress()
        data = progress.as_data()
        progress.finish("Release")
        assert data["completed"] == []
