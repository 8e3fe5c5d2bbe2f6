"""Asynchronous file-system primitives used by the pipeline.

Blocking calls run in worker threads through ``asyncio.to_thread`` so
that concurrent compiles within one combine never stall the event loop.

``put_file`` replaces its target atomically (write to a temporary sibling,
then ``os.replace``) so a reader racing a writer on the same cache file
sees either the old or the new artifact, never a torn one.
"""

from __future__ import annotations

import asyncio
import os
import tempfile
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)

# Returned by mtime() for paths that do not exist; orders below any real mtime
MISSING_MTIME = float("-inf")


def exists(path: Path | str) -> bool:
    return Path(path).exists()


def _stat_mtime(path: Path) -> float:
    try:
        return path.stat().st_mtime
    except FileNotFoundError:
        return MISSING_MTIME


async def mtime(path: Path | str) -> float:
    """Return the modification time of ``path``, or MISSING_MTIME."""
    return await asyncio.to_thread(_stat_mtime, Path(path))


async def read_file(path: Path | str) -> str:
    """Read ``path`` as UTF-8 text."""
    return await asyncio.to_thread(Path(path).read_text, encoding="utf-8")


def _replace_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        # mkstemp creates 0600 files; outputs are served to other users
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


async def put_file(path: Path | str, content: str) -> None:
    """Create or atomically replace ``path``, creating parent directories."""
    path = Path(path)
    await asyncio.to_thread(_replace_file, path, content)
    logger.debug("file_written", path=str(path), size=len(content))
