"""Source map placement and output persistence.

The OutputWriter applies the configured MapPolicy to a combined result:

    InlineMaps   -> base64 data URI comment, main file only
    NoMaps       -> main file only, no comment
    RelativeMaps -> map file beside the output (optionally in a subdirectory)
    AliasedMaps  -> one map copy per aliased directory, one comment per alias

With ``nowrite`` the same result is returned but nothing touches the disk.
"""

from __future__ import annotations

import asyncio
import base64
import json
import os
import posixpath
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from assetter_core import fs
from assetter_core.errors import RegistryError
from assetter_core.models import TranspileResult
from assetter_core.options import (
    AliasedMaps,
    InlineMaps,
    NoMaps,
    RelativeMaps,
    TranspileOptions,
)
from assetter_core.paths import mount_path
from assetter_core.registry import CompilerDescriptor, CompilerRegistry

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

logger = structlog.get_logger(__name__)

DATA_URI_PREFIX = "data:application/json;charset=utf-8;base64,"

MAP_SUFFIX = ".map"


def serialize_map(mapping: dict[str, Any], compact: bool) -> str:
    """Serialize a source map, tab-indented unless ``compact``."""
    if compact:
        return json.dumps(mapping, separators=(",", ":"), ensure_ascii=False)
    return json.dumps(mapping, indent="\t", ensure_ascii=False)


def inline_map_uri(mapping: dict[str, Any]) -> str:
    """Encode a source map as a base64 JSON data URI."""
    encoded = base64.b64encode(serialize_map(mapping, compact=True).encode("utf-8"))
    return DATA_URI_PREFIX + encoded.decode("ascii")


class OutputWriter:
    """Write a TranspileResult according to the configured map policy.

    Attributes:
        registry: Registry providing the map comment builder.
        options: Options of the current transpile call.
    """

    def __init__(
        self,
        registry: CompilerRegistry,
        options: TranspileOptions,
        *,
        log: BoundLogger | None = None,
    ) -> None:
        self.registry = registry
        self.options = options
        self._log = log or logger

    def descriptor_for(self, result: TranspileResult) -> CompilerDescriptor:
        """Return the descriptor whose comment builder applies to ``result``.

        The output extension is tried first, then the first input's.
        """
        descriptor = self.registry.get(result.filename.suffix)
        if descriptor is None and result.inputs:
            descriptor = self.registry.get(result.inputs[0].suffix)
        if descriptor is None:
            raise RegistryError(f"No compiler registered for {result.filename.name}")
        return descriptor

    async def write(self, result: TranspileResult) -> TranspileResult:
        """Apply the map policy and persist the output files.

        Returns:
            A copy of ``result`` with the final content and ``mappath``.
        """
        policy = self.options.maps
        filename = result.filename
        content = result.content
        mappath: str | None = None
        files: dict[Path, str] = {}

        if isinstance(policy, NoMaps):
            pass
        elif isinstance(policy, InlineMaps):
            mappath = inline_map_uri(result.mapping)
            content += self.descriptor_for(result).map_comment(mappath)
        elif isinstance(policy, RelativeMaps):
            map_text = serialize_map(result.mapping, compact=self.options.minify)
            url = posixpath.join(policy.path, filename.name + MAP_SUFFIX)
            target = Path(os.path.normpath(filename.parent / url))
            content += self.descriptor_for(result).map_comment(url)
            files[target] = map_text
            mappath = str(target)
        elif isinstance(policy, AliasedMaps):
            map_text = serialize_map(result.mapping, compact=self.options.minify)
            logical = mount_path(filename, self.options.rootdir, self.options.localdir)
            logical = logical.lstrip("/") + MAP_SUFFIX
            comment = self.descriptor_for(result).map_comment
            for prefix, directory in policy.aliases.items():
                target = Path(os.path.abspath(Path(directory) / logical))
                content += comment(posixpath.join(prefix, logical))
                files[target] = map_text
                mappath = str(target)

        files = {filename: content, **files}

        if self.options.nowrite:
            self._log.info("asset_not_written", output=str(filename), policy=policy.kind)
        else:
            await asyncio.gather(*(fs.put_file(path, text) for path, text in files.items()))
            self._log.info(
                "asset_written",
                output=str(filename),
                files=[str(p) for p in files],
                policy=policy.kind,
            )

        return result.model_copy(update={"content": content, "mappath": mappath})
