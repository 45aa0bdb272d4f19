"""Tests for format_result and the per-operation renderers."""

import json

from cmkctl.output.formatters import OutputSettings, format_result
from cmkctl.output.renderers import render_quiet, render_result
from cmkctl.services.result import ServiceError, ServiceResult


def _ok(op: str = "test", **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=dict(data))


def _err(op: str = "build", msg: str = "fail", **data: object) -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        data=dict(data),
        error=ServiceError(
            code="NON_ZERO_EXIT",
            message=msg,
            detail={"kind": "AbortError", "cause": "NON_ZERO_EXIT"},
        ),
    )


_CAPABILITIES = {"ctest_test_dir": True, "native_install": True, "ninja_multi_config": False}


class TestOutputSettings:
    def test_defaults(self) -> None:
        s = OutputSettings()
        assert s.json_output is False
        assert s.quiet is False
        assert s.verbose is False


class TestFormatResultJSON:
    def test_json_mode_returns_valid_json(self) -> None:
        output = format_result(_ok("probe", version="3.25.2"), settings=OutputSettings(json_output=True))
        data = json.loads(output)
        assert data["ok"] is True
        assert data["op"] == "probe"
        assert data["data"]["version"] == "3.25.2"

    def test_json_wins_over_quiet(self) -> None:
        settings = OutputSettings(json_output=True, quiet=True)
        data = json.loads(format_result(_err(msg="Bad"), settings=settings))
        assert data["error"]["message"] == "Bad"
        assert data["error"]["code"] == "NON_ZERO_EXIT"


class TestFormatResultQuiet:
    def test_quiet_success(self) -> None:
        assert format_result(_ok("build"), settings=OutputSettings(quiet=True)) == "OK: build"

    def test_quiet_error(self) -> None:
        output = render_quiet(_err(msg="Command 'cmake' failed"))
        assert output.startswith("ERROR: build")
        assert "Command 'cmake' failed" in output


class TestRenderers:
    def test_default_settings_use_rich(self) -> None:
        output = format_result(_ok("probe", version="3.25.2", minimum_version="3.16.0"))
        assert output.startswith("OK")
        assert "3.25.2" in output

    def test_build(self) -> None:
        result = _ok(
            "build",
            version="3.25.2",
            completed=["Debug", "Release"],
            stages=6,
            outputs={"build-directory-debug": "build-Debug"},
            capabilities=_CAPABILITIES,
        )
        output = render_result(result)
        assert "OK" in output
        assert "Debug, Release" in output
        assert "build-directory-debug" in output
        assert "build-Debug" in output
        assert "ctest_test_dir" not in output

    def test_build_verbose_shows_capabilities(self) -> None:
        result = _ok("build", version="3.25.2", completed=[], capabilities=_CAPABILITIES)
        output = render_result(result, verbose=True)
        assert "ctest_test_dir" in output
        assert "ninja_multi_config" in output

    def test_probe(self) -> None:
        result = _ok(
            "probe", version="3.18.4", minimum_version="3.16.0", capabilities=_CAPABILITIES
        )
        output = render_result(result)
        assert "3.18.4" in output
        assert "minimum_version:" in output
        assert "native_install" in output
        assert "yes" in output

    def test_dirs(self) -> None:
        result = _ok(
            "dirs",
            configurations=["Debug", "Release"],
            multi_config=False,
            build_directories={"Debug": "build-Debug-ci", "Release": "build-Release-ci"},
            install_directories={"Debug": "install-Debug-ci"},
            outputs={"build-directory-debug": "build-Debug-ci"},
        )
        output = render_result(result)
        assert "Debug, Release" in output
        assert "build-Release-ci" in output
        assert "install-Debug-ci" in output

    def test_unknown_op_falls_back_to_generic(self) -> None:
        output = render_result(_ok("other", answer=42))
        assert "answer:" in output
        assert "42" in output

    def test_error(self) -> None:
        output = render_result(_err(msg="Command 'cmake' failed", completed=["Debug"]))
        assert output.startswith("ERROR")
        assert "Command 'cmake' failed" in output
        assert "code:" not in output

    def test_error_verbose_shows_detail(self) -> None:
        output = render_result(_err(completed=["Debug"]), verbose=True)
        assert "code: NON_ZERO_EXIT" in output
        assert "cause: NON_ZERO_EXIT" in output
        assert "completed: Debug" in output

    def test_telemetry_tree(self) -> None:
        result = ServiceResult(
            ok=True,
            op="build",
            data={"completed": ["Debug"]},
            meta={
                "telemetry": {
                    "name": "BuildService.run",
                    "duration_ms": 12.5,
                    "children": [
                        {
                            "name": "Package Debug",
                            "duration_ms": 3.0,
                            "annotations": {"attempts": 2},
                        }
                    ],
                }
            },
        )
        output = render_result(result, verbose=True)
        assert "BuildService.run" in output
        assert "Package Debug" in output
        assert "attempts=2" in output
