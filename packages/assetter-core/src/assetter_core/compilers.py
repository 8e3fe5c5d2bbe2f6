"""Builtin compiler descriptors.

Stylesheets (.css, .sass, .scss -> .css) compile through libsass and
scripts (.js, .es, .es6 -> .js) through Babel running inside dukpy. Both
backends are optional and imported on first use:

    pip install "assetter[compilers]"

Compiled scripts start with a ``"use transpile";`` directive on a line of
their own so served files can be told apart from hand-written ones.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

from assetter_core.fs import read_file
from assetter_core.models import CompiledUnit
from assetter_core.paths import to_posix
from assetter_core.registry import CompilerDescriptor, CompilerRegistry

if TYPE_CHECKING:
    from assetter_core.options import TranspileOptions

STYLESHEET_EXTENSIONS = (".css", ".sass", ".scss")

SCRIPT_EXTENSIONS = (".js", ".es", ".es6")

USE_TRANSPILE_DIRECTIVE = '"use transpile";'

DEFAULT_BABEL_PRESETS = ["es2015"]

# Evaluated after the Babel bundle; the last expression is the result
BABEL_TRANSFORM_JS = (
    "var bres, res;"
    "bres = Babel.transform(dukpy.es6code, dukpy.babel_options);"
    "res = {code: bres.code, map: bres.map};"
)


def bundled_babel(dukpy_dir: Path) -> Path:
    """Return the standalone Babel build shipped in dukpy's ``jsmodules``.

    Raises:
        FileNotFoundError: If the dukpy installation bundles no Babel.
    """
    bundles = sorted((dukpy_dir / "jsmodules").glob("babel-*.min.js"))
    if not bundles:
        raise FileNotFoundError(f"No Babel bundle in {dukpy_dir / 'jsmodules'}")
    return bundles[-1]


def css_map_comment(url: str) -> str:
    return f"\n/*# sourceMappingURL={to_posix(url)} */"


def js_map_comment(url: str) -> str:
    return f"\n//# sourceMappingURL={to_posix(url)}"


async def compile_sass(input_path: Path, options: TranspileOptions) -> CompiledUnit:
    """Compile a Sass/SCSS/CSS file with libsass.

    The indented syntax is selected from the ``.sass`` extension by libsass
    itself. Sources are embedded in the map.
    """
    try:
        import sass
    except ImportError as e:
        raise ImportError(
            "libsass not installed. Install with: pip install 'assetter[compilers]'"
        ) from e

    def _render() -> tuple[str, str]:
        return sass.compile(
            filename=str(input_path),
            output_style="compressed" if options.minify else "expanded",
            source_map_filename=f"{input_path}.map",
            source_map_contents=True,
            omit_source_map_url=True,
        )

    css, source_map = await asyncio.to_thread(_render)
    return CompiledUnit(content=css, mapping=json.loads(source_map))


async def compile_babel(input_path: Path, options: TranspileOptions) -> CompiledUnit:
    """Compile an ES2015+ script down to ES5 with Babel (via dukpy).

    Babel is the standalone build bundled with dukpy, evaluated in dukpy's
    interpreter so the generated source map is kept. The
    ``"use transpile";`` directive is prepended on its own line and the
    map's ``mappings`` are shifted down by one generated line to match.
    """
    try:
        import dukpy
    except ImportError as e:
        raise ImportError(
            "dukpy not installed. Install with: pip install 'assetter[compilers]'"
        ) from e

    source = await read_file(input_path)
    babel_options: dict[str, Any] = {
        "filename": input_path.name,
        "presets": DEFAULT_BABEL_PRESETS,
        "sourceMaps": True,
        "comments": False,
        "compact": options.minify,
        "retainLines": not options.minify,
    }

    def _transform() -> dict[str, Any]:
        babel_js = bundled_babel(Path(dukpy.__file__).parent).read_text(encoding="utf-8")
        return dukpy.evaljs(
            (babel_js, BABEL_TRANSFORM_JS),
            es6code=source,
            babel_options=babel_options,
        )

    result = await asyncio.to_thread(_transform)

    mapping = dict(result.get("map") or {"version": 3, "names": [], "mappings": ""})
    mapping["mappings"] = ";" + mapping.get("mappings", "")
    mapping.setdefault("sourcesContent", [source])
    return CompiledUnit(
        content=f"{USE_TRANSPILE_DIRECTIVE}\n{result['code']}",
        mapping=mapping,
    )


STYLESHEET_COMPILER = CompilerDescriptor(
    extension=".css",
    map_comment=css_map_comment,
    compile=compile_sass,
)

SCRIPT_COMPILER = CompilerDescriptor(
    extension=".js",
    map_comment=js_map_comment,
    compile=compile_babel,
)


def default_registry() -> CompilerRegistry:
    """Return a new registry holding the builtin compilers.

    Each call returns an independent registry, so customizing one never
    affects another pipeline.

    Example:
        >>> registry = default_registry()
        >>> registry.register(".txt", ".scss")
        >>> transpiler = Transpiler(registry)
    """
    registry = CompilerRegistry()
    for alt_ext in STYLESHEET_EXTENSIONS:
        registry.register(alt_ext, STYLESHEET_COMPILER)
    for alt_ext in SCRIPT_EXTENSIONS:
        registry.register(alt_ext, SCRIPT_COMPILER)
    return registry
