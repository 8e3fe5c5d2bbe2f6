"""assetter compilers command - List supported alt extensions."""

from __future__ import annotations

import json

import click

from assetter_cli.output import print_table


@click.command("compilers")
@click.option("--json", "as_json", is_flag=True, default=False, help="Output as JSON")
def compilers(as_json: bool) -> None:
    """List the alt extensions assetter can transpile.

    Each source extension is shown with the extension of the file it
    compiles to and the backend doing the work.

    Examples:

        assetter compilers

        assetter compilers --json
    """
    # Import here to avoid heavy imports at CLI startup
    from assetter_core import default_registry

    rows = [
        (alt_ext, descriptor.extension, descriptor.compile.__name__)
        for alt_ext, descriptor in default_registry().items()
    ]

    if as_json:
        entries = [
            {"alt_extension": alt, "extension": ext, "compiler": name} for alt, ext, name in rows
        ]
        click.echo(json.dumps(entries, indent=2))
        return

    print_table(["Source", "Output", "Compiler"], rows, title="Registered compilers")
