"""assetter resolve command - Show which sources serve a requested path."""

from __future__ import annotations

import json
from pathlib import Path

import click

from assetter_cli.config import load_options
from assetter_cli.errors import (
    EXIT_USER_ERROR,
    CLIError,
    handle_assetter_error,
    handle_file_not_found,
)
from assetter_cli.output import info


@click.command("resolve")
@click.argument("request")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to assetter.yaml; relative requests start at its rootdir",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Output as JSON")
def resolve(request: str, config_path: str | None, as_json: bool) -> None:
    """Print the source files that would produce REQUEST.

    REQUEST is the path of a compiled asset, possibly combining several
    assets with commas (`js/a,b.js`). Minified requests (`app.min.js`) may
    be served from a plain source of the same extension.

    Examples:

        assetter resolve public/css/site.css

        assetter resolve js/a,b.min.js --config assetter.yaml --json
    """
    if config_path is not None and not Path(config_path).exists():
        handle_file_not_found(config_path)

    # Import here to avoid heavy imports at CLI startup
    from assetter_core import AltfileResolver, AssetterError, default_registry

    try:
        options = load_options(config_path)
    except AssetterError as e:
        handle_assetter_error(e)

    path = Path(request)
    if not path.is_absolute():
        path = options.rootdir / path

    altfiles = AltfileResolver(default_registry()).resolve_request(path)

    if as_json:
        summary = {"request": str(path), "altfiles": [str(p) for p in altfiles]}
        click.echo(json.dumps(summary, indent=2))
        if not altfiles:
            raise SystemExit(EXIT_USER_ERROR)
        return

    if not altfiles:
        raise CLIError(f"No source found for {request}", exit_code=EXIT_USER_ERROR)

    for altfile in altfiles:
        info(str(altfile), soft_wrap=True)
