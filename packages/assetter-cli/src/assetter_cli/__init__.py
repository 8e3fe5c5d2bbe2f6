"""assetter-cli: Command line interface for assetter.

Transpile Sass and ES2015+ sources into browser-ready CSS and JavaScript
with source maps, from the shell or from build scripts.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
