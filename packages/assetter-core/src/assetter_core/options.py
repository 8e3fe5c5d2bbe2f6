"""Transpile options and source map placement policies.

This module defines the configuration accepted by the pipeline:
- MapPolicy: Discriminated union of InlineMaps, NoMaps, RelativeMaps, AliasedMaps
- TranspileOptions: Per-call options, loadable from assetter.yaml

Map policies may be given in their short form and are coerced once, at
validation time:

    maps: true                  -> InlineMaps (data URI)
    maps: false                 -> NoMaps
    maps: "maps"                -> RelativeMaps(path="maps")
    maps: {"/map": "/srv/map"}  -> AliasedMaps(aliases=...)
"""

from __future__ import annotations

import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Annotated, Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Discriminator, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from assetter_core.errors import ConfigurationError
from assetter_core.paths import is_minified

# Default local mount for rootdir
DEFAULT_LOCALDIR = "/"

# Config file searched by the CLI
CONFIG_FILE_NAME = "assetter.yaml"


class InlineMaps(BaseModel):
    """Embed the map as a base64 data URI in the reference comment."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["inline"] = Field(
        default="inline",
        description="Map policy discriminator",
    )


class NoMaps(BaseModel):
    """Write the main file only, without any map reference."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["none"] = Field(
        default="none",
        description="Map policy discriminator",
    )


class RelativeMaps(BaseModel):
    """Write the map next to the output, under a relative directory.

    Attributes:
        path: Directory relative to the output file; empty means the same
            directory as the output.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["relative"] = Field(
        default="relative",
        description="Map policy discriminator",
    )
    path: str = Field(
        default="",
        description="Map directory relative to the output file",
    )


class AliasedMaps(BaseModel):
    """Write a copy of the map under each aliased physical directory.

    Each alias maps a URL prefix to the directory served under it. The map
    path mirrors the output's logical location below ``localdir``.

    Attributes:
        aliases: URL prefix to physical directory.

    Example:
        >>> AliasedMaps(aliases={"/map": Path("/srv/maps")})
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["alias"] = Field(
        default="alias",
        description="Map policy discriminator",
    )
    aliases: dict[str, Path] = Field(
        ...,
        min_length=1,
        description="URL prefix to physical map directory",
    )


MapPolicy = Annotated[
    InlineMaps | NoMaps | RelativeMaps | AliasedMaps,
    Discriminator("kind"),
]
"""Source map placement policy with discriminated union on "kind"."""


def coerce_map_policy(value: Any) -> Any:
    """Convert the short form of a map policy into its tagged form.

    Values that are already tagged (models or mappings carrying ``kind``)
    are returned unchanged for regular validation.
    """
    if isinstance(value, BaseModel):
        return value
    if value is True:
        return InlineMaps()
    if value is False:
        return NoMaps()
    if value is None:
        return RelativeMaps()
    if isinstance(value, str):
        return RelativeMaps(path=value)
    if isinstance(value, Mapping):
        if "kind" in value:
            return value
        return AliasedMaps(aliases=dict(value))
    return value


class TranspileOptions(BaseModel):
    """Options for a transpile call.

    Attributes:
        maps: Map placement policy (default: map file next to the output).
        outfile: Explicit output path; derived from the inputs when None.
        minified: True, False, or "auto" to infer from the outfile name.
        nocache: Bypass the cache validity check.
        nowrite: Compute the result without writing any file.
        rootdir: Root directory of the served tree.
        localdir: URL prefix under which rootdir is served.
        tmpdir: Base directory for cache files.
        patterns: Allow-list of glob patterns; empty allows everything.

    Example:
        >>> options = TranspileOptions(
        ...     rootdir=Path("public"),
        ...     localdir="/static",
        ...     maps="maps",
        ...     minified="auto",
        ...     outfile=Path("public/js/app.min.js"),
        ... )
        >>> options.minify
        True
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    maps: MapPolicy = Field(
        default_factory=RelativeMaps,
        description="Source map placement policy",
    )
    outfile: Path | None = Field(
        default=None,
        description="Explicit output path",
    )
    minified: bool | Literal["auto"] = Field(
        default=False,
        description="Minify output; 'auto' infers from the outfile name",
    )
    nocache: bool = Field(
        default=False,
        description="Bypass the compiled-artifact cache",
    )
    nowrite: bool = Field(
        default=False,
        description="Do not write output files",
    )
    rootdir: Path = Field(
        default_factory=Path.cwd,
        description="Root directory of the served tree",
    )
    localdir: str = Field(
        default=DEFAULT_LOCALDIR,
        description="URL prefix under which rootdir is served",
    )
    tmpdir: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()),
        description="Base directory for cache files",
    )
    patterns: tuple[str, ...] = Field(
        default=(),
        description="Allow-list of glob patterns",
    )

    @field_validator("maps", mode="before")
    @classmethod
    def validate_maps(cls, v: Any) -> Any:
        """Accept the short boolean/string/mapping forms of a map policy."""
        return coerce_map_policy(v)

    @field_validator("minified", mode="before")
    @classmethod
    def validate_minified(cls, v: Any) -> Any:
        """Treat None as "auto"."""
        return "auto" if v is None else v

    @property
    def minify(self) -> bool:
        """Effective minification flag with "auto" resolved against outfile."""
        if self.minified == "auto":
            return self.outfile is not None and is_minified(self.outfile)
        return bool(self.minified)

    def with_overrides(self, **overrides: Any) -> TranspileOptions:
        """Return a validated copy with ``overrides`` applied.

        Unlike ``model_copy(update=...)`` the overrides go through validation,
        so short map policy forms are accepted.
        """
        data = {name: getattr(self, name) for name in type(self).model_fields}
        data.update(overrides)
        return type(self).model_validate(data)

    @classmethod
    def from_yaml(cls, path: Path, **overrides: Any) -> TranspileOptions:
        """Load options from an assetter.yaml file.

        Relative ``rootdir``, ``tmpdir`` and alias directories are resolved
        against the directory containing the file.

        Args:
            path: Path to the YAML file.
            **overrides: Values taking precedence over the file.

        Returns:
            Validated TranspileOptions.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ConfigurationError: If the YAML or any value is invalid.

        Example:
            >>> options = TranspileOptions.from_yaml(Path("assetter.yaml"), nocache=True)
        """
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                "Invalid YAML",
                file_path=str(path),
                internal_details=str(e),
            ) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError("Expected a mapping at top level", file_path=str(path))

        base = path.parent
        for key in ("rootdir", "tmpdir"):
            if key in data and data[key] is not None:
                data[key] = base / Path(data[key]).expanduser()
        maps = data.get("maps")
        if isinstance(maps, dict) and "kind" not in maps:
            data["maps"] = {prefix: base / Path(d).expanduser() for prefix, d in maps.items()}

        data.update(overrides)

        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            first = e.errors()[0]
            raise ConfigurationError(
                f"Invalid configuration: {first['msg']}",
                file_path=str(path),
                field_path=".".join(str(x) for x in first["loc"]),
                internal_details=str(e),
            ) from e
