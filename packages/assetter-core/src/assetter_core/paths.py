"""Path helpers for alt files, minified names and logical mounts.

Request paths may combine several assets into one by joining their base
names with a comma (``dir/a,b.js`` stands for ``dir/a.js`` and
``dir/b.js``). Minified variants carry a ``.min`` marker before the
extension (``app.min.js``).
"""

from __future__ import annotations

import os
import posixpath
from collections.abc import Iterable
from pathlib import Path

MINIFIED_MARKER = ".min"

NAME_SEPARATOR = ","


def normalize_ext(ext: str) -> str:
    """Return ``ext`` with exactly one leading dot (``"scss"`` -> ``".scss"``)."""
    if not ext:
        raise ValueError("Extension must not be empty")
    return ext if ext.startswith(".") else f".{ext}"


def is_minified(path: Path | str) -> bool:
    """Check whether the base name carries the minified marker."""
    return Path(path).stem.endswith(MINIFIED_MARKER)


def strip_minified(name: str) -> str:
    return name.removesuffix(MINIFIED_MARKER)


def change_ext(path: Path | str, ext: str) -> Path:
    """Replace the last extension of ``path`` with ``ext``.

    ``ext`` may itself contain the minified marker:

        >>> change_ext("css/site.scss", ".min.css")
        PosixPath('css/site.min.css')
    """
    path = Path(path)
    return path.with_name(path.stem + ext)


def combine_name(paths: Iterable[Path | str], sep: str = NAME_SEPARATOR) -> Path | None:
    """Combine files sharing a directory and extension into one name.

    Returns None when the files live in different directories or carry
    different extensions, since no single name can represent them.

        >>> combine_name(["js/t1.js", "js/t2.js"])
        PosixPath('js/t1,t2.js')
    """
    items = [Path(p) for p in paths]
    if not items:
        return None

    parents = {p.parent for p in items}
    suffixes = {p.suffix for p in items}
    if len(parents) != 1 or len(suffixes) != 1:
        return None

    stem = sep.join(p.stem for p in items)
    if not stem:
        return None
    return items[0].parent / f"{stem}{items[0].suffix}"


def separate_name(path: Path | str, sep: str = NAME_SEPARATOR) -> list[Path]:
    """Split a combined name back into its constituent paths.

    A name without the separator yields itself.
    """
    path = Path(path)
    if sep not in path.stem:
        return [path]
    return [path.parent / f"{part}{path.suffix}" for part in path.stem.split(sep) if part]


def relative_to_root(path: Path | str, rootdir: Path | str) -> str | None:
    """Return ``path`` relative to ``rootdir`` in POSIX form.

    Returns None when ``path`` lies outside ``rootdir`` (the relative path
    climbs with ``..``) or on another drive.
    """
    try:
        relative = os.path.relpath(path, rootdir)
    except ValueError:
        return None
    if relative == os.pardir or relative.startswith(os.pardir + os.sep):
        return None
    return relative.replace(os.sep, "/")


def mount_path(path: Path | str, rootdir: Path | str, localdir: str) -> str:
    """Express ``path`` as a URL path under the logical mount ``localdir``.

        >>> mount_path("/srv/www/js/app.js", "/srv/www", "/static")
        '/static/js/app.js'
    """
    try:
        relative = os.path.relpath(path, rootdir).replace(os.sep, "/")
    except ValueError:
        relative = Path(path).name
    if not localdir:
        return relative
    return posixpath.normpath(posixpath.join(localdir, relative))


def to_posix(path: Path | str) -> str:
    return str(path).replace("\\", "/")
