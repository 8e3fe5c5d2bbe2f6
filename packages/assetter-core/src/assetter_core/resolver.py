"""Alt file resolution for requested asset paths.

Given the path of an asset a client asked for (``css/site.css``), find the
source variant that produces it (``css/site.scss``), using the canonical
output extensions in the compiler registry.
"""

from __future__ import annotations

from pathlib import Path

import structlog

from assetter_core import fs
from assetter_core.paths import is_minified, separate_name, strip_minified
from assetter_core.registry import CompilerRegistry

logger = structlog.get_logger(__name__)


class AltfileResolver:
    """Resolve requested output paths to alt files.

    Attributes:
        registry: Compiler registry consulted for canonical extensions.

    Example:
        >>> resolver = AltfileResolver(default_registry())
        >>> resolver.get_altfile("public/css/site.css")
        PosixPath('public/css/site.scss')
        >>> resolver.get_altfile("public/css/site.min.css")   # plain .css may be minified
        PosixPath('public/css/site.css')
    """

    def __init__(self, registry: CompilerRegistry) -> None:
        self.registry = registry

    def candidates(self, filename: Path | str, forced: bool = False) -> list[Path]:
        """Return every path that could produce ``filename``, in preference order.

        Alt extensions follow registration order, with the requested
        extension itself last. The requested extension is only a candidate
        when minification is forced or the requested name is minified.
        """
        path = Path(filename)
        ext = path.suffix
        if not ext:
            return []

        stem = strip_minified(path.stem)
        minified = forced or is_minified(path)

        alts = sorted(self.registry.alt_extensions_for(ext), key=lambda alt: alt == ext)
        if not minified:
            alts = [alt for alt in alts if alt != ext]
        return [path.parent / f"{stem}{alt}" for alt in alts]

    def get_altfile(self, filename: Path | str, forced: bool = False) -> Path | None:
        """Return the first existing alt file for ``filename``, or None.

        Args:
            filename: Requested output path.
            forced: Treat the request as minified even without ``.min``.
        """
        for candidate in self.candidates(filename, forced):
            if fs.exists(candidate):
                logger.debug("altfile_resolved", request=str(filename), altfile=str(candidate))
                return candidate
        return None

    def can_transpile(self, filename: Path | str) -> bool:
        """Check whether ``filename`` is itself a compiled-from variant.

        True for extensions registered with a different canonical output
        (``.scss``, ``.es``), false for plain ``.css``/``.js`` and unknown
        extensions.
        """
        ext = Path(filename).suffix
        descriptor = self.registry.get(ext) if ext else None
        return descriptor is not None and descriptor.extension != ext

    def resolve_request(self, filename: Path | str) -> list[Path]:
        """Resolve a possibly comma-combined request to its alt files.

        ``js/a,b.js`` resolves ``js/a.js`` and ``js/b.js`` independently.
        Parts of a combined request may be served from their own extension
        (a plain ``.js`` is a valid constituent), so resolution is forced for
        them. Parts without any alt file are dropped.

        Returns:
            Existing alt files in request order.
        """
        parts = separate_name(filename)
        combined = len(parts) > 1
        altfiles: list[Path] = []
        for part in parts:
            altfile = self.get_altfile(part, forced=combined)
            if altfile is not None:
                altfiles.append(altfile)
        return altfiles
