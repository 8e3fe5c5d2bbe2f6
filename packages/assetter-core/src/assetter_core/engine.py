"""Transpile pipeline for assetter-core.

This module implements the Transpiler, which turns one or more alt files
into a single output artifact:

    inputs -> compile_one per file (skip / cache / compile)
           -> combine (join contents, section source maps)
           -> OutputWriter (map placement policy, persistence)
           -> TranspileResult

Compiles within one call run concurrently in a task group. The first
compiler failure cancels the remaining compiles and fails the whole call;
no partial output is produced.
"""

from __future__ import annotations

import asyncio
import os
import time
from collections.abc import Coroutine, Iterable, Sequence
from fnmatch import fnmatchcase
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

import structlog

from assetter_core.cache import CacheStore
from assetter_core.compilers import default_registry
from assetter_core.errors import CompilationError
from assetter_core.models import SOURCE_MAP_VERSION, CompiledUnit, TranspileResult
from assetter_core.options import TranspileOptions
from assetter_core.paths import (
    MINIFIED_MARKER,
    change_ext,
    combine_name,
    is_minified,
    mount_path,
    relative_to_root,
    to_posix,
)
from assetter_core.registry import CompilerDescriptor, CompilerRegistry
from assetter_core.resolver import AltfileResolver
from assetter_core.writer import OutputWriter

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Name used for combined outputs whose inputs share no directory/extension
COMBINED_FALLBACK_NAME = "combined"

AltFiles = Path | str | Iterable[Path | str]


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def _as_paths(altfiles: AltFiles) -> list[Path]:
    if isinstance(altfiles, (str, os.PathLike)):
        return [Path(altfiles)]
    return [Path(p) for p in altfiles]


def matches_patterns(path: Path, patterns: Sequence[str]) -> bool:
    """Check ``path`` against an allow-list of glob patterns.

    An empty allow-list accepts everything. Patterns are matched against the
    absolute POSIX form of the path; ``*`` also matches ``/``.
    """
    if not patterns:
        return True
    posix = to_posix(path)
    return any(fnmatchcase(posix, pattern) for pattern in patterns)


def build_sectioned_map(units: Sequence[CompiledUnit]) -> dict[str, Any]:
    """Merge the maps of units joined with newlines into a sectioned map.

    Section ``i`` starts at the line where unit ``i`` begins in the joined
    content: the newlines inside every earlier unit plus one joining newline
    per earlier unit.

    Example:
        >>> build_sectioned_map([CompiledUnit(content="a\\nb"), CompiledUnit(content="c")])
        {'version': 3, 'sections': [{'offset': {'line': 0, 'column': 0}, ...},
                                    {'offset': {'line': 2, 'column': 0}, ...}]}
    """
    sections: list[dict[str, Any]] = []
    line = 0
    for unit in units:
        sections.append({"offset": {"line": line, "column": 0}, "map": unit.mapping})
        line += unit.content.count("\n") + 1
    return {"version": SOURCE_MAP_VERSION, "sections": sections}


class Transpiler:
    """Compile, combine and write assets from alt files.

    The Transpiler holds a frozen copy of its compiler registry; it can be
    shared between concurrent requests.

    Attributes:
        registry: Frozen compiler registry.
        resolver: AltfileResolver over the same registry.

    Example:
        >>> transpiler = Transpiler()
        >>> result = await transpiler.transpile(
        ...     ["js/t1.es", "js/t2.es"],
        ...     TranspileOptions(rootdir=Path("."), localdir="/static"),
        ... )
        >>> result.filename.name
        't1,t2.js'
    """

    def __init__(
        self,
        registry: CompilerRegistry | None = None,
        *,
        logger: BoundLogger | None = None,
    ) -> None:
        """Initialize the Transpiler.

        Args:
            registry: Compiler registry to snapshot. Defaults to the builtin
                compilers.
            logger: Sink for pipeline events. Defaults to the module logger.
        """
        base = registry if registry is not None else default_registry()
        self.registry = base.copy().freeze()
        self.resolver = AltfileResolver(self.registry)
        self._log = logger if logger is not None else structlog.get_logger(__name__)

    def get_altfile(self, filename: Path | str, forced: bool = False) -> Path | None:
        return self.resolver.get_altfile(filename, forced)

    def can_transpile(self, filename: Path | str) -> bool:
        return self.resolver.can_transpile(filename)

    def output_path(
        self,
        altfile: Path,
        descriptor: CompilerDescriptor,
        options: TranspileOptions,
    ) -> Path:
        """Return the output path for ``altfile`` under ``options``."""
        if options.outfile is not None:
            return Path(os.path.abspath(options.outfile))
        marker = MINIFIED_MARKER if options.minify else ""
        return change_ext(altfile, marker + descriptor.extension)

    def _stamp(
        self,
        unit: CompiledUnit,
        altfile: Path,
        outfile: Path,
        options: TranspileOptions,
    ) -> None:
        unit.filename = outfile
        unit.mapping["file"] = mount_path(outfile, options.rootdir, options.localdir)
        if relative_to_root(altfile, options.rootdir) is None:
            unit.mapping["sources"] = [altfile.name]
        else:
            unit.mapping["sources"] = [mount_path(altfile, options.rootdir, options.localdir)]

    async def compile_one(
        self,
        altfile: Path | str,
        options: TranspileOptions,
    ) -> CompiledUnit | None:
        """Compile one alt file, serving it from the cache when valid.

        Args:
            altfile: Source variant to compile.
            options: Transpile options.

        Returns:
            The stamped CompiledUnit, or None if the input was skipped.

        Raises:
            CompilationError: If the compiler backend fails.
        """
        start = time.monotonic()
        altfile = Path(os.path.abspath(altfile))
        log = self._log.bind(input=str(altfile))

        def skip(reason: str) -> None:
            log.info("transpile_skipped", reason=reason, duration_ms=_elapsed_ms(start))

        if not matches_patterns(altfile, options.patterns):
            return skip("no match")

        descriptor = self.registry.get(altfile.suffix)
        if descriptor is None:
            return skip("not supported")

        minified = options.minify
        if minified and is_minified(altfile):
            return skip("already minified")

        outfile = self.output_path(altfile, descriptor, options)
        if outfile == altfile:
            return skip("same file")

        cache = CacheStore(options.tmpdir, log=log)

        if not options.nocache:
            cached = await cache.load(altfile, minified)
            if cached is not None:
                self._stamp(cached, altfile, outfile, options)
                log.info("transpile_cached", duration_ms=_elapsed_ms(start))
                return cached

        try:
            raw = await descriptor.compile(altfile, options)
        except Exception as e:
            duration_ms = _elapsed_ms(start)
            log.error("transpile_failed", duration_ms=duration_ms, error=str(e))
            raise CompilationError(
                altfile,
                duration_ms=duration_ms,
                internal_details=f"{type(e).__name__}: {e}",
            ) from e

        unit = CompiledUnit.model_validate(raw)
        self._stamp(unit, altfile, outfile, options)
        if descriptor.post_process is not None:
            descriptor.post_process(unit)

        await cache.store(altfile, minified, unit)
        log.info("transpile_completed", output=str(outfile), duration_ms=_elapsed_ms(start))
        return unit

    async def _run_all(self, coros: Sequence[Coroutine[Any, Any, T]]) -> list[T]:
        try:
            async with asyncio.TaskGroup() as group:
                tasks = [group.create_task(coro) for coro in coros]
        except ExceptionGroup as eg:
            # Surface the first failure on its own; siblings were cancelled
            raise eg.exceptions[0]
        return [task.result() for task in tasks]

    def combined_filename(
        self,
        units: Sequence[CompiledUnit],
        options: TranspileOptions,
    ) -> Path:
        """Return the output path of a combined result."""
        if options.outfile is not None:
            return Path(os.path.abspath(options.outfile))
        filenames = [u.filename for u in units if u.filename is not None]
        combined = combine_name(filenames)
        if combined is not None:
            return combined
        first = filenames[0]
        return first.parent / f"{COMBINED_FALLBACK_NAME}{first.suffix}"

    async def combine(
        self,
        altfiles: AltFiles,
        options: TranspileOptions,
    ) -> TranspileResult | None:
        """Compile every input concurrently and merge the results.

        Skipped inputs contribute nothing. A single surviving unit is returned
        as is; several are joined with newlines under a sectioned map.

        Returns:
            The combined result (not yet written), or None when every input
            was skipped.

        Raises:
            CompilationError: If any input fails to compile.
        """
        paths = _as_paths(altfiles)
        units = await self._run_all([self.compile_one(path, options) for path in paths])

        survivors = [
            (Path(os.path.abspath(path)), unit)
            for path, unit in zip(paths, units)
            if unit is not None
        ]
        if not survivors:
            return None

        inputs = tuple(path for path, _ in survivors)
        compiled = [unit for _, unit in survivors]
        filename = self.combined_filename(compiled, options)

        if len(compiled) == 1:
            return TranspileResult(
                filename=filename,
                content=compiled[0].content,
                mapping=compiled[0].mapping,
                inputs=inputs,
            )

        return TranspileResult(
            filename=filename,
            content="\n".join(unit.content for unit in compiled),
            mapping=build_sectioned_map(compiled),
            inputs=inputs,
        )

    async def transpile(
        self,
        altfiles: AltFiles,
        options: TranspileOptions | None = None,
        **overrides: Any,
    ) -> TranspileResult | None:
        """Transpile one or many alt files into one written artifact.

        Args:
            altfiles: A path or an ordered collection of paths.
            options: Transpile options (defaults apply when None).
            **overrides: Option values applied on top of ``options``.

        Returns:
            The written TranspileResult, or None if there was nothing to do.

        Raises:
            CompilationError: If any input fails to compile.
        """
        options = options or TranspileOptions()
        if overrides:
            options = options.with_overrides(**overrides)

        paths = _as_paths(altfiles)
        result = await self.combine(paths, options)
        if result is None:
            self._log.info("transpile_nothing", inputs=[str(p) for p in paths])
            return None

        writer = OutputWriter(self.registry, options, log=self._log)
        return await writer.write(result)


async def transpile(
    altfiles: AltFiles,
    options: TranspileOptions | None = None,
    *,
    registry: CompilerRegistry | None = None,
    **overrides: Any,
) -> TranspileResult | None:
    """Transpile with a one-off Transpiler.

    Example:
        >>> result = await transpile("css/site.scss", maps=False, nocache=True)
    """
    return await Transpiler(registry).transpile(altfiles, options, **overrides)
