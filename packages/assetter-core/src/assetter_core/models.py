"""Pipeline data models for assetter-core.

This module defines the units that flow through the pipeline:
- CompiledUnit: Output of one compiler run, also the cache file format
- TranspileResult: Combined output returned to the caller

Source maps are kept as plain JSON dictionaries (source map revision 3),
either a regular map or a sectioned map when several units are combined.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

SOURCE_MAP_VERSION = 3


class CompiledUnit(BaseModel):
    """Result of compiling a single alt file.

    Produced by a compiler's ``compile`` capability as ``{content, mapping}``
    and then enriched by the pipeline with ``filename`` and normalized
    ``mapping["file"]`` / ``mapping["sources"]`` fields. The model stays
    mutable so a descriptor's ``post_process`` callback can rewrite it in
    place.

    Attributes:
        content: Compiled text.
        mapping: Source map (revision 3) for ``content``.
        filename: Resolved output path, set once the unit is stamped.

    Example:
        >>> unit = CompiledUnit(
        ...     content="a{color:red}",
        ...     mapping={"version": 3, "sources": ["a.scss"], "mappings": "AAAA"},
        ... )
    """

    model_config = ConfigDict(extra="forbid")

    content: str = Field(
        ...,
        description="Compiled text",
    )
    mapping: dict[str, Any] = Field(
        default_factory=lambda: {"version": SOURCE_MAP_VERSION},
        description="Source map for content",
    )
    filename: Path | None = Field(
        default=None,
        description="Resolved output path",
    )


class TranspileResult(BaseModel):
    """Immutable result of a transpile call.

    Attributes:
        filename: Output path of the main artifact.
        content: Final content, including any appended map reference comment.
        mapping: Single unit map, or a sectioned map for combined outputs.
        mappath: None when maps are suppressed, a data URI when inlined,
            otherwise the absolute path of the (last) written map file.
        inputs: Alt files that contributed to the output, in order.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    filename: Path = Field(
        ...,
        description="Output path of the main artifact",
    )
    content: str = Field(
        ...,
        description="Final content of the main artifact",
    )
    mapping: dict[str, Any] = Field(
        ...,
        description="Source map, sectioned when inputs were combined",
    )
    mappath: str | None = Field(
        default=None,
        description="Data URI, map file path, or None when maps are suppressed",
    )
    inputs: tuple[Path, ...] = Field(
        default=(),
        description="Alt files that contributed to the output",
    )
