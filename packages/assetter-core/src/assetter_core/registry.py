"""Compiler registry for assetter-core.

This module maps alt extensions (the extension of a source variant such as
``.scss`` or ``.es``) to compiler descriptors:
- CompilerDescriptor: Canonical output extension, map comment builder,
  async compile capability and optional post-process callback
- CompilerRegistry: Ordered alt extension -> descriptor mapping

Registrations inherit from an existing entry, so an extension can be added
or adjusted without restating the whole descriptor:

    >>> registry.register(".txt", ".scss")                     # copy of .scss
    >>> registry.register(".scss", post_process=autoprefix)    # override one field

Registries are mutated at configuration time only. A Transpiler keeps a
frozen copy, so later registrations never leak into a running pipeline.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator, Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from assetter_core.errors import RegistryError
from assetter_core.paths import normalize_ext

if TYPE_CHECKING:
    from assetter_core.models import CompiledUnit
    from assetter_core.options import TranspileOptions

logger = structlog.get_logger(__name__)

MapCommentBuilder = Callable[[str], str]
CompileFunc = Callable[
    [Path, "TranspileOptions"],
    Awaitable["CompiledUnit | Mapping[str, Any]"],
]
PostProcess = Callable[["CompiledUnit"], None]


@dataclass(frozen=True)
class CompilerDescriptor:
    """Capabilities of one compiler backend.

    Attributes:
        extension: Canonical output extension (e.g. ".css").
        map_comment: Builds the source map reference comment for a URL.
        compile: Async ``(input_path, options)`` returning a CompiledUnit or a
            ``{"content": ..., "mapping": ...}`` mapping. Must not have side
            effects beyond reading ``input_path``.
        post_process: Optional callback mutating the stamped unit in place.
    """

    extension: str
    map_comment: MapCommentBuilder
    compile: CompileFunc
    post_process: PostProcess | None = None


DESCRIPTOR_FIELDS = frozenset(f.name for f in fields(CompilerDescriptor))

REQUIRED_FIELDS = frozenset({"extension", "map_comment", "compile"})


class CompilerRegistry:
    """Ordered mapping of alt extensions to compiler descriptors.

    Iteration follows registration order; re-registering an extension keeps
    its original position.

    Example:
        >>> registry = CompilerRegistry()
        >>> registry.register(".scss", CompilerDescriptor(
        ...     extension=".css", map_comment=css_map_comment, compile=compile_sass,
        ... ))
        >>> registry.register(".sass", ".scss")
        >>> registry.get(".sass").extension
        '.css'
    """

    def __init__(self, compilers: Mapping[str, CompilerDescriptor] | None = None) -> None:
        self._compilers: dict[str, CompilerDescriptor] = {}
        self._frozen = False
        for alt_ext, descriptor in (compilers or {}).items():
            self.register(alt_ext, descriptor)

    def register(
        self,
        alt_ext: str,
        compiler: CompilerDescriptor | Mapping[str, Any] | str | None = None,
        similar: str | None = None,
        **overrides: Any,
    ) -> CompilerDescriptor:
        """Register or override the compiler for an alt extension.

        Args:
            alt_ext: Source variant extension, with or without leading dot.
            compiler: A full descriptor, a mapping of descriptor fields, or the
                extension to copy from (shorthand for ``similar``).
            similar: Extension whose entry provides defaults. Defaults to
                ``alt_ext`` itself.
            **overrides: Descriptor fields taking precedence over ``compiler``.

        Returns:
            The descriptor now registered under ``alt_ext``.

        Raises:
            RegistryError: If the registry is frozen, a field is unknown,
                ``similar`` is not registered, or required fields are missing
                with no entry to inherit from.
        """
        alt_ext = normalize_ext(alt_ext)
        if self._frozen:
            raise RegistryError(
                f"Cannot register {alt_ext}: compiler registry is frozen",
            )

        if isinstance(compiler, str):
            similar = compiler
            compiler = None

        if isinstance(compiler, CompilerDescriptor):
            values = {name: getattr(compiler, name) for name in DESCRIPTOR_FIELDS}
        else:
            values = dict(compiler or {})
        values.update(overrides)

        unknown = set(values) - DESCRIPTOR_FIELDS
        if unknown:
            raise RegistryError(
                f"Unknown compiler field(s) for {alt_ext}: {', '.join(sorted(unknown))}",
            )

        base_ext = normalize_ext(similar) if similar else alt_ext
        base = self._compilers.get(base_ext)
        if similar and base is None:
            raise RegistryError(
                f"Cannot copy compiler for {alt_ext}: {base_ext} is not registered",
            )

        if base is not None:
            descriptor = replace(base, **values)
        else:
            missing = REQUIRED_FIELDS - set(values)
            if missing:
                raise RegistryError(
                    f"Incomplete compiler for {alt_ext}: missing {', '.join(sorted(missing))}",
                )
            descriptor = CompilerDescriptor(**values)

        descriptor = replace(descriptor, extension=normalize_ext(descriptor.extension))
        self._compilers[alt_ext] = descriptor
        logger.debug(
            "compiler_registered",
            alt_ext=alt_ext,
            extension=descriptor.extension,
            copied_from=base_ext if base is not None else None,
        )
        return descriptor

    def get(self, alt_ext: str) -> CompilerDescriptor | None:
        """Return the descriptor for ``alt_ext``, or None if unsupported."""
        if not alt_ext:
            return None
        return self._compilers.get(normalize_ext(alt_ext))

    def items(self) -> Iterator[tuple[str, CompilerDescriptor]]:
        return iter(list(self._compilers.items()))

    def alt_extensions_for(self, extension: str) -> list[str]:
        """Return alt extensions whose canonical output is ``extension``."""
        return [alt for alt, d in self._compilers.items() if d.extension == extension]

    def copy(self) -> CompilerRegistry:
        """Return an unfrozen copy sharing the same descriptors."""
        clone = CompilerRegistry()
        clone._compilers = dict(self._compilers)
        return clone

    def freeze(self) -> CompilerRegistry:
        """Reject further registrations. Returns self for chaining."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __contains__(self, alt_ext: object) -> bool:
        return isinstance(alt_ext, str) and self.get(alt_ext) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._compilers))

    def __len__(self) -> int:
        return len(self._compilers)
