"""GitHub Actions host adapter: inputs, outputs, log groups, and failure.

Inputs arrive as ``INPUT_<NAME>`` environment variables, outputs are
appended to the file named by ``GITHUB_OUTPUT``, and log groups and
failures are workflow commands written to stdout.
"""

from __future__ import annotations

import logging
import os
import sys
import uuid
from collections.abc import Generator, Mapping
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)

OUTPUT_ENV_VAR = "GITHUB_OUTPUT"


def input_env_name(name: str) -> str:
    """Environment variable holding action input *name*.

    Spaces become underscores and the name is upper-cased; hyphens are kept.
    """
    return f"INPUT_{name.replace(' ', '_').upper()}"


def get_input(name: str, environ: Mapping[str, str] | None = None) -> str | None:
    """Return the trimmed value of input *name*, or None when it is not set."""
    env = os.environ if environ is None else environ
    raw = env.get(input_env_name(name))
    if raw is None:
        return None
    return raw.strip()


def get_boolean_input(name: str, environ: Mapping[str, str] | None = None) -> bool | None:
    """True iff the input is literally ``"true"``; None when it is not set."""
    value = get_input(name, environ)
    if value is None:
        return None
    return value == "true"


def _format_output(name: str, value: str) -> str:
    if "\n" not in value:
        return f"{name}={value}\n"
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    return f"{name}<<{delimiter}\n{value}\n{delimiter}\n"


def set_output(name: str, value: str, environ: Mapping[str, str] | None = None) -> None:
    """Publish step output *name* for downstream steps."""
    env = os.environ if environ is None else environ
    logger.info("Setting output %s to %s", name, value)
    file_path = env.get(OUTPUT_ENV_VAR)
    if not file_path:
        logger.debug("%s is not set, output %s only logged", OUTPUT_ENV_VAR, name)
        return
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "a", encoding="utf-8") as handle:
        handle.write(_format_output(name, value))


def _escape_data(message: str) -> str:
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


@contextmanager
def group(title: str) -> Generator[None]:
    """Fold everything logged inside the block under *title* in the job log."""
    print(f"::group::{title}", flush=True)
    try:
        yield
    finally:
        print("::endgroup::", flush=True)


def set_failed(message: str) -> None:
    """Report the run as failed with a single human-readable message."""
    print(f"::error::{_escape_data(message)}", flush=True)


def host_platform() -> str:
    """``sys.platform`` of the runner (``linux``, ``darwin``, ``win32``)."""
    return sys.platform
