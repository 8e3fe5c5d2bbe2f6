"""CLI entry point for assetter.

Subcommands are registered by dotted path and imported on first use, so
``assetter --help`` never pays for loading the pipeline or its compiler
backends.
"""

from __future__ import annotations

import importlib
from typing import Any

import click
import rich_click as rclick

from assetter_cli import __version__
from assetter_cli.output import set_no_color

# Configure rich-click for better help formatting
rclick.rich_click.TEXT_MARKUP = "markdown"
rclick.rich_click.SHOW_ARGUMENTS = True
rclick.rich_click.GROUP_ARGUMENTS_OPTIONS = True

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class LazyGroup(rclick.RichGroup):
    """Click group resolving subcommands from dotted paths on demand.

    Attributes:
        lazy_subcommands: Mapping of command names to ``module.attribute``.
    """

    def __init__(
        self,
        *args: Any,
        lazy_subcommands: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize LazyGroup.

        Args:
            *args: Positional arguments for parent class.
            lazy_subcommands: Mapping of command name to dotted path.
                Format: {"transpile": "assetter_cli.commands.transpile.transpile"}
            **kwargs: Keyword arguments for parent class.
        """
        super().__init__(*args, **kwargs)
        self.lazy_subcommands: dict[str, str] = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        """Return eagerly and lazily registered command names, sorted."""
        commands = set(super().list_commands(ctx))
        commands.update(self.lazy_subcommands)
        return sorted(commands)

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        """Return the named command, importing its module if needed."""
        cmd = super().get_command(ctx, cmd_name)  # type: ignore[arg-type]
        if cmd is not None:
            return cmd

        target = self.lazy_subcommands.get(cmd_name)
        if target is None:
            return None

        module_name, attr_name = target.rsplit(".", 1)
        return getattr(importlib.import_module(module_name), attr_name)  # type: ignore[no-any-return]


LAZY_COMMANDS = {
    "transpile": "assetter_cli.commands.transpile.transpile",
    "resolve": "assetter_cli.commands.resolve.resolve",
    "compilers": "assetter_cli.commands.compilers.compilers",
    "cache": "assetter_cli.commands.cache.cache",
}


@click.command(cls=LazyGroup, lazy_subcommands=LAZY_COMMANDS)
@click.version_option(version=__version__, prog_name="assetter")
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output.",
    is_eager=True,
    expose_value=False,
    callback=lambda ctx, param, value: set_no_color(value) if value else None,
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Minimum level of pipeline log events written to stderr.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Write log events as JSON lines.",
)
def cli(log_level: str, log_json: bool) -> None:
    """Assetter - On-demand asset transpilation.

    Compile Sass and ES2015+ sources into CSS and JavaScript with source
    maps, combining several inputs into one file when asked.

    **Getting Started:**

    - `assetter transpile css/site.scss` - Write css/site.css and its map
    - `assetter transpile js/a.es js/b.es` - Write js/a,b.js
    - `assetter resolve public/css/site.css` - Show which source serves a path
    - `assetter compilers` - List supported extensions
    """
    from assetter_core.observability import configure_logging

    configure_logging(log_level=log_level, json_format=log_json)


if __name__ == "__main__":
    cli()
