"""Filesystem operations for output directory cleanup.

Removals for one configuration are issued together and jointly awaited.
The first failure surfaces; the outcome of the other removal is not
inspected further.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from pathlib import Path

from cmkctl.domain.errors import FilesystemError

logger = logging.getLogger(__name__)


def _remove_tree(path: Path) -> None:
    if not path.exists():
        logger.debug("Nothing to remove at %s", path)
        return
    logger.info("Removing directory %s", path)
    try:
        shutil.rmtree(path)
    except OSError as exc:
        raise FilesystemError(f"Failed to remove directory '{path}': {exc}") from exc


async def remove_directories(*paths: Path) -> None:
    """Remove every directory in *paths* concurrently.

    Missing directories are skipped.

    Raises:
        FilesystemError: A removal failed.
    """
    await asyncio.gather(*(asyncio.to_thread(_remove_tree, path) for path in paths))
