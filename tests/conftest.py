"""Shared pytest fixtures and test helpers for cmkctl tests."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Generator, Sequence
from dataclasses import dataclass
from pathlib import Path

import pytest
from click.testing import CliRunner

from cmkctl.config.settings import CmkSettings
from cmkctl.domain.errors import AbortError
from cmkctl.infrastructure.runner import CommandRunner
from cmkctl.services.telemetry import disable_telemetry


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop action inputs, cmkctl env vars, and GITHUB_OUTPUT from the test env."""
    for name in list(os.environ):
        if name.startswith(("INPUT_", "CMKCTL_")) or name == "GITHUB_OUTPUT":
            monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _restore_logging_and_telemetry() -> Generator[None]:
    """Undo configure_logging() and enable_telemetry() done by CLI invocations."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    cmk = logging.getLogger("cmkctl")
    cmk_level = cmk.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    cmk.setLevel(cmk_level)
    disable_telemetry()


@pytest.fixture
def project_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Temporary project directory used as CWD, with a minimal CMakeLists.txt."""
    (tmp_path / "CMakeLists.txt").write_text(
        "cmake_minimum_required(VERSION 3.16)\nproject(demo)\n", encoding="utf-8"
    )
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def settings(project_root: Path) -> CmkSettings:
    """Settings rooted at the temporary project with code defaults."""
    return CmkSettings.from_cli(project_root=project_root)


@pytest.fixture
def github_output(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point GITHUB_OUTPUT at a temp file and return its path."""
    path = tmp_path / "github_output"
    path.write_text("", encoding="utf-8")
    monkeypatch.setenv("GITHUB_OUTPUT", str(path))
    return path


# ---------------------------------------------------------------------------
# Shared test helpers (used across service and command test modules)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Call:
    """One recorded ``CommandRunner.run`` invocation."""

    program: str
    args: list[str]
    cwd: Path | None


class FakeRunner(CommandRunner):
    """CommandRunner double that records calls instead of spawning processes.

    ``capture`` returns *version_output* (or raises it when it is an
    exception). ``run`` raises the errors registered with :meth:`fail`.
    """

    def __init__(self, version_output: str | Exception = "cmake version 3.25.2\n") -> None:
        self.version_output = version_output
        self.calls: list[Call] = []
        self.captures: list[Call] = []
        self._failures: list[list[object]] = []

    def fail(
        self,
        predicate: Callable[[str, list[str]], bool],
        error: AbortError,
        *,
        times: int = 1,
    ) -> None:
        self._failures.append([predicate, error, times])

    async def capture(
        self,
        program: str,
        args: Sequence[str],
        cwd: Path | None = None,
    ) -> str:
        self.captures.append(Call(program, list(args), cwd))
        if isinstance(self.version_output, Exception):
            raise self.version_output
        return self.version_output

    async def run(
        self,
        program: str,
        args: Sequence[str],
        cwd: Path | None = None,
    ) -> None:
        call = Call(program, list(args), cwd)
        self.calls.append(call)
        for entry in self._failures:
            predicate, error, remaining = entry
            if remaining and predicate(call.program, call.args):  # type: ignore[operator]
                entry[2] = remaining - 1  # type: ignore[operator]
                raise error  # type: ignore[misc]

    def stages(self) -> list[str]:
        """Summarize calls as ``"<program> <first arg>"`` strings."""
        return [f"{c.program} {c.args[0]}" for c in self.calls]


def is_configure(program: str, args: list[str]) -> bool:
    return program == "cmake" and "-S" in args


def is_package(program: str, args: list[str]) -> bool:
    return program == "cmake" and "package" in args


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()
