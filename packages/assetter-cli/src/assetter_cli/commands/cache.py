"""assetter cache command - Manage compiled artifacts."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from assetter_cli.config import load_options
from assetter_cli.errors import (
    handle_assetter_error,
    handle_file_not_found,
    handle_permission_error,
)
from assetter_cli.output import info, success

if TYPE_CHECKING:
    from assetter_core.cache import CacheStore


def _cache_store(config_path: str | None, tmpdir: Path | None) -> CacheStore:
    if config_path is not None and not Path(config_path).exists():
        handle_file_not_found(config_path)

    # Import here to avoid heavy imports at CLI startup
    from assetter_core import AssetterError
    from assetter_core.cache import CacheStore

    try:
        options = load_options(config_path, tmpdir=tmpdir)
    except AssetterError as e:
        handle_assetter_error(e)
    return CacheStore(options.tmpdir)


@click.group()
def cache() -> None:
    """Manage the compiled-artifact cache.

    Compiled files are cached below `<tmpdir>/assetter/transpiled` and
    reused until their source changes.

    **Commands:**

    - `assetter cache clear` - Remove every cached artifact
    - `assetter cache invalidate FILES...` - Forget the artifacts of some sources
    """
    pass


tmpdir_option = click.option(
    "--tmpdir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Base directory of the cache [default: system temp dir]",
)

config_option = click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to assetter.yaml [default: ./assetter.yaml if present]",
)


@cache.command("clear")
@tmpdir_option
@config_option
def clear(tmpdir: Path | None, config_path: str | None) -> None:
    """Remove every cached artifact.

    Examples:

        assetter cache clear

        assetter cache clear --tmpdir /var/tmp
    """
    store = _cache_store(config_path, tmpdir)
    try:
        store.clear()
    except PermissionError:
        handle_permission_error(str(store.root), "remove")
    success(f"Cleared {store.root}")


@cache.command("invalidate")
@click.argument("files", nargs=-1, required=True, type=click.Path(path_type=Path))
@tmpdir_option
@config_option
def invalidate(files: tuple[Path, ...], tmpdir: Path | None, config_path: str | None) -> None:
    """Forget the cached artifacts of FILES.

    The next transpile of each file recompiles it, even if it has not
    changed.

    Examples:

        assetter cache invalidate css/site.scss js/app.es
    """
    store = _cache_store(config_path, tmpdir)
    for path in files:
        try:
            store.invalidate(path)
        except PermissionError:
            handle_permission_error(str(store.path_for(path, False)), "remove")
        info(f"Invalidated {path}")
    success(f"Invalidated {len(files)} file(s)")
