"""Compiled-artifact cache keyed by input path and modification time.

The cache:
- Stores one JSON file per (absolute input path, minified flag)
- Mirrors the input's absolute path below ``<tmpdir>/assetter/transpiled``
- Is valid only while its mtime is strictly newer than the input's mtime
- Is written atomically, so concurrent requests never read a torn file

A corrupt cache file is treated as a miss and logged; the next successful
compile replaces it.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError as PydanticValidationError

from assetter_core import fs
from assetter_core.errors import CacheError
from assetter_core.models import CompiledUnit

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

logger = structlog.get_logger(__name__)

# Subdirectories of tmpdir holding compiled artifacts
CACHE_NAMESPACE = ("assetter", "transpiled")


class CacheStore:
    """File-based cache of CompiledUnits.

    Usage:
        cache = CacheStore(tmpdir)

        unit = await cache.load(altfile, minified=False)
        if unit is None:
            unit = await compile(altfile)
            await cache.store(altfile, False, unit)

    Attributes:
        root: Directory holding every cache file.
    """

    def __init__(self, tmpdir: Path | str, *, log: BoundLogger | None = None) -> None:
        self.root = Path(tmpdir).joinpath(*CACHE_NAMESPACE)
        self._log = log or logger

    def path_for(self, input_path: Path | str, minified: bool) -> Path:
        """Return the cache file path for an input and minification mode.

        The drive separator of Windows paths is escaped (``C:`` -> ``C;``)
        since it cannot appear inside a path component.

        Example:
            >>> CacheStore("/tmp").path_for("/srv/www/site.scss", minified=True)
            PosixPath('/tmp/assetter/transpiled/srv/www/site.scss.min-true.json')
        """
        absolute = Path(os.path.abspath(input_path))
        parts = list(absolute.parts[1:])
        if absolute.drive:
            parts.insert(0, absolute.drive.replace(":", ";"))
        name = f"{absolute.name}.min-{str(minified).lower()}.json"
        return self.root.joinpath(*parts[:-1], name)

    async def is_fresh(self, input_path: Path | str, minified: bool) -> bool:
        """Check whether the cache file is strictly newer than the input."""
        cache_mtime = await fs.mtime(self.path_for(input_path, minified))
        return cache_mtime > await fs.mtime(input_path)

    async def load(
        self,
        input_path: Path | str,
        minified: bool,
        *,
        strict: bool = False,
    ) -> CompiledUnit | None:
        """Return the cached unit for ``input_path`` if it is still valid.

        Args:
            input_path: Alt file the unit was compiled from.
            minified: Minification mode of the cached unit.
            strict: Raise CacheError on a corrupt cache file instead of
                treating it as a miss.

        Returns:
            The deserialized CompiledUnit, or None on a miss.

        Raises:
            CacheError: If ``strict`` and the cache file cannot be parsed.
        """
        if not await self.is_fresh(input_path, minified):
            return None

        cache_path = self.path_for(input_path, minified)
        try:
            return CompiledUnit.model_validate_json(await fs.read_file(cache_path))
        except (PydanticValidationError, UnicodeDecodeError) as e:
            if strict:
                raise CacheError(cache_path, internal_details=str(e)) from e
            self._log.warning("cache_corrupt", cache=str(cache_path), error=str(e))
            return None

    async def store(self, input_path: Path | str, minified: bool, unit: CompiledUnit) -> Path:
        """Persist ``unit`` as the cache entry for ``input_path``."""
        cache_path = self.path_for(input_path, minified)
        await fs.put_file(cache_path, unit.model_dump_json())
        return cache_path

    def invalidate(self, input_path: Path | str) -> None:
        """Remove the cache entries of ``input_path`` for both modes."""
        for minified in (False, True):
            self.path_for(input_path, minified).unlink(missing_ok=True)

    def clear(self) -> None:
        """Remove every cache entry."""
        if self.root.exists():
            shutil.rmtree(self.root)
        self._log.info("cache_cleared", root=str(self.root))
