"""Subprocess runner for toolchain commands.

``run`` inherits stdio so build output streams live to the job log;
``capture`` pipes stdout back to the caller (used for ``--version``).
Exactly one child process is live per call, and calls are awaited one
at a time by the orchestrator. No timeouts are enforced.
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from collections.abc import Sequence
from pathlib import Path

from cmkctl.domain.errors import NonZeroExitError, SpawnError

logger = logging.getLogger(__name__)


class CommandRunner:
    """Spawns toolchain commands and converts failures into typed errors."""

    async def run(
        self,
        program: str,
        args: Sequence[str],
        cwd: Path | None = None,
    ) -> None:
        """Run *program* with inherited stdio.

        Raises:
            SpawnError: The process could not be started.
            NonZeroExitError: The process exited with a non-zero code.
        """
        workdir = cwd or Path.cwd()
        logger.info(
            "Executing command %s with arguments %s in working directory %s",
            program,
            list(args),
            workdir,
        )
        # Our own buffered output must land before the child's.
        sys.stdout.flush()
        sys.stderr.flush()
        process = await self._spawn(program, args, workdir)
        exit_code = await process.wait()
        if exit_code != 0:
            raise NonZeroExitError(exit_code)

    async def capture(
        self,
        program: str,
        args: Sequence[str],
        cwd: Path | None = None,
    ) -> str:
        """Run *program* and return its standard output as text."""
        workdir = cwd or Path.cwd()
        logger.debug("Capturing output of %s %s", program, " ".join(args))
        process = await self._spawn(program, args, workdir, stdout=asyncio.subprocess.PIPE)
        stdout, _ = await process.communicate()
        if process.returncode != 0:
            raise NonZeroExitError(process.returncode or 0)
        return stdout.decode("utf-8", errors="replace")

    async def _spawn(
        self,
        program: str,
        args: Sequence[str],
        cwd: Path,
        *,
        stdout: int | None = None,
    ) -> asyncio.subprocess.Process:
        try:
            return await asyncio.create_subprocess_exec(
                program,
                *args,
                cwd=os.fspath(cwd),
                stdout=stdout,
            )
        except OSError as exc:
            raise SpawnError(f"Failed to start '{program}': {exc}") from exc
