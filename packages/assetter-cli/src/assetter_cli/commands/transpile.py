"""assetter transpile command - Compile and combine assets."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError as PydanticValidationError

from assetter_cli.config import load_options
from assetter_cli.errors import (
    EXIT_USER_ERROR,
    CLIError,
    handle_assetter_error,
    handle_file_not_found,
    handle_permission_error,
    handle_validation_error,
)
from assetter_cli.output import info, success, warning

MAPS_KEYWORDS = {"inline": True, "none": False}


def parse_maps(maps: str | None, map_aliases: tuple[str, ...]) -> Any:
    """Turn ``--maps``/``--map-alias`` values into a short-form map policy.

    Returns None when neither option was given.

    Raises:
        click.BadParameter: If both are given or an alias is malformed.
    """
    if map_aliases:
        if maps is not None:
            raise click.BadParameter("cannot be combined with --maps", param_hint="--map-alias")
        aliases: dict[str, str] = {}
        for alias in map_aliases:
            prefix, sep, directory = alias.partition("=")
            if not sep or not prefix or not directory:
                raise click.BadParameter(
                    f"expected PREFIX=DIR, got {alias!r}", param_hint="--map-alias"
                )
            aliases[prefix] = directory
        return aliases
    if maps is None:
        return None
    return MAPS_KEYWORDS.get(maps.lower(), maps)


@click.command("transpile")
@click.argument("files", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.option(
    "-o",
    "--outfile",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output file [default: derived from the inputs]",
)
@click.option(
    "--maps",
    default=None,
    metavar="inline|none|PATH",
    help="Source map placement: inline data URI, none, or a directory "
    "relative to the output [default: beside the output]",
)
@click.option(
    "--map-alias",
    "map_aliases",
    multiple=True,
    metavar="PREFIX=DIR",
    help="Write maps under DIR and reference them below URL PREFIX (repeatable)",
)
@click.option(
    "--minified/--no-minified",
    default=None,
    help="Minify the output [default: no]",
)
@click.option(
    "--auto-minified",
    is_flag=True,
    default=False,
    help="Minify when the output file name ends with .min",
)
@click.option("--nocache", is_flag=True, default=False, help="Ignore cached artifacts")
@click.option("--nowrite", is_flag=True, default=False, help="Do not write any file")
@click.option(
    "--rootdir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Root of the served tree [default: current directory]",
)
@click.option(
    "--localdir",
    default=None,
    help="URL prefix under which rootdir is served [default: /]",
)
@click.option(
    "--tmpdir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Base directory of the cache [default: system temp dir]",
)
@click.option(
    "--pattern",
    "patterns",
    multiple=True,
    help="Only transpile inputs matching this glob (repeatable)",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to assetter.yaml [default: ./assetter.yaml if present]",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Output as JSON")
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Exit with an error when every input is skipped",
)
def transpile(
    files: tuple[Path, ...],
    outfile: Path | None,
    maps: str | None,
    map_aliases: tuple[str, ...],
    minified: bool | None,
    auto_minified: bool,
    nocache: bool,
    nowrite: bool,
    rootdir: Path | None,
    localdir: str | None,
    tmpdir: Path | None,
    patterns: tuple[str, ...],
    config_path: str | None,
    as_json: bool,
    strict: bool,
) -> None:
    """Transpile FILES into one output file.

    Several inputs are combined into one output, named after all of them
    (`js/a.es js/b.es` -> `js/a,b.js`) unless `--outfile` is given.

    Examples:

        assetter transpile css/site.scss

        assetter transpile js/a.es js/b.es --minified

        assetter transpile js/app.es -o dist/app.min.js --auto-minified --maps maps

        assetter transpile css/site.scss --map-alias /map=build/maps
    """
    for path in files:
        if not path.exists():
            handle_file_not_found(str(path))
    if config_path is not None and not Path(config_path).exists():
        handle_file_not_found(config_path)

    overrides: dict[str, Any] = {
        "outfile": outfile,
        "maps": parse_maps(maps, map_aliases),
        "minified": "auto" if auto_minified else minified,
        "nocache": nocache or None,
        "nowrite": nowrite or None,
        "rootdir": rootdir,
        "localdir": localdir,
        "tmpdir": tmpdir,
        "patterns": patterns or None,
    }

    # Import here to avoid heavy imports at CLI startup
    from assetter_core import AssetterError, Transpiler

    try:
        options = load_options(config_path, **overrides)
        result = asyncio.run(Transpiler().transpile(files, options))
    except FileNotFoundError as e:
        handle_file_not_found(e.filename or str(e))
    except PermissionError as e:
        handle_permission_error(e.filename or str(e), "write")
    except PydanticValidationError as e:
        handle_validation_error(e)
    except AssetterError as e:
        handle_assetter_error(e)

    if result is None:
        if strict:
            raise CLIError("Nothing to transpile", exit_code=EXIT_USER_ERROR)
        warning("Nothing to transpile")
        return

    if as_json:
        summary = {
            "filename": str(result.filename),
            "mappath": result.mappath,
            "inputs": [str(p) for p in result.inputs],
            "written": not options.nowrite,
        }
        click.echo(json.dumps(summary, indent=2))
        return

    verb = "Would write" if options.nowrite else "Wrote"
    success(f"{verb} {result.filename}")
    if result.mappath is not None and not result.mappath.startswith("data:"):
        info(f"  map: {result.mappath}")
