"""Tests for the GitHub Actions host adapter."""

from __future__ import annotations

from pathlib import Path

import pytest

from cmkctl.infrastructure import actions


class TestInputs:
    def test_env_name_keeps_hyphens(self) -> None:
        assert actions.input_env_name("cmake-arguments") == "INPUT_CMAKE-ARGUMENTS"
        assert actions.input_env_name("my input") == "INPUT_MY_INPUT"

    def test_missing_input_is_none(self) -> None:
        assert actions.get_input("package", {}) is None

    def test_value_is_trimmed(self) -> None:
        env = {"INPUT_OUTPUT-DIRECTORIES-SUFFIX": "  -ci \n"}
        assert actions.get_input("output-directories-suffix", env) == "-ci"

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("true", True), ("false", False), ("True", False), ("1", False), ("", False)],
    )
    def test_boolean_is_literal_true(self, raw: str, expected: bool) -> None:
        assert actions.get_boolean_input("package", {"INPUT_PACKAGE": raw}) is expected

    def test_reads_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INPUT_INSTALL", "true")
        assert actions.get_boolean_input("install") is True


class TestOutputs:
    def test_appends_name_value_lines(self, github_output: Path) -> None:
        actions.set_output("build-directory-debug", "build-Debug")
        actions.set_output("build-directory-release", "build-Release")
        assert github_output.read_text(encoding="utf-8") == (
            "build-directory-debug=build-Debug\nbuild-directory-release=build-Release\n"
        )

    def test_multiline_value_uses_delimiter(self, github_output: Path) -> None:
        actions.set_output("notes", "a\nb")
        lines = github_output.read_text(encoding="utf-8").splitlines()
        assert lines[0].startswith("notes<<ghadelimiter_")
        delimiter = lines[0].split("<<", 1)[1]
        assert lines[1:] == ["a", "b", delimiter]

    def test_without_output_file_nothing_is_written(self, tmp_path: Path) -> None:
        actions.set_output("build-directory", "build", environ={})
        assert list(tmp_path.iterdir()) == []


class TestWorkflowCommands:
    def test_group_wraps_block(self, capsys: pytest.CaptureFixture[str]) -> None:
        with actions.group("Build Debug"):
            print("inside")
        assert capsys.readouterr().out.splitlines() == [
            "::group::Build Debug",
            "inside",
            "::endgroup::",
        ]

    def test_group_closes_on_error(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(RuntimeError), actions.group("Test Debug"):
            raise RuntimeError("boom")
        assert capsys.readouterr().out.splitlines()[-1] == "::endgroup::"

    def test_set_failed_escapes_newlines(self, capsys: pytest.CaptureFixture[str]) -> None:
        actions.set_failed("line one\nline two 100%")
        assert capsys.readouterr().out == "::error::line one%0Aline two 100%25\n"
