"""CLI command modules.

Commands are loaded lazily by assetter_cli.main.LazyGroup, so importing
this package stays cheap.
"""

from __future__ import annotations

__all__: list[str] = []
