"""assetter-core: On-demand asset transpilation.

This package provides:
- CompilerRegistry: Alt extension -> compiler descriptor mapping
- AltfileResolver: Requested output path -> source variant
- CacheStore: mtime-validated cache of compiled units
- Transpiler: Compile, combine and write assets with source maps
- TranspileOptions: Per-call options and map placement policies
"""

from __future__ import annotations

__version__ = "0.1.0"

# Cache
from assetter_core.cache import CacheStore

# Builtin compilers
from assetter_core.compilers import (
    SCRIPT_COMPILER,
    STYLESHEET_COMPILER,
    css_map_comment,
    default_registry,
    js_map_comment,
)

# Pipeline
from assetter_core.engine import Transpiler, build_sectioned_map, transpile

# Error types
from assetter_core.errors import (
    AssetterError,
    CacheError,
    CompilationError,
    ConfigurationError,
    RegistryError,
)

# Logging
from assetter_core.observability import configure_logging

# Data models
from assetter_core.models import CompiledUnit, TranspileResult

# Options
from assetter_core.options import (
    AliasedMaps,
    InlineMaps,
    MapPolicy,
    NoMaps,
    RelativeMaps,
    TranspileOptions,
)

# Registry and resolution
from assetter_core.registry import CompilerDescriptor, CompilerRegistry
from assetter_core.resolver import AltfileResolver
from assetter_core.writer import OutputWriter

__all__ = [
    "__version__",
    # Pipeline
    "Transpiler",
    "transpile",
    "build_sectioned_map",
    "OutputWriter",
    # Registry
    "CompilerDescriptor",
    "CompilerRegistry",
    "AltfileResolver",
    "default_registry",
    "STYLESHEET_COMPILER",
    "SCRIPT_COMPILER",
    "css_map_comment",
    "js_map_comment",
    # Cache
    "CacheStore",
    # Logging
    "configure_logging",
    # Errors
    "AssetterError",
    "ConfigurationError",
    "RegistryError",
    "CompilationError",
    "CacheError",
    # Models
    "CompiledUnit",
    "TranspileResult",
    # Options
    "TranspileOptions",
    "MapPolicy",
    "InlineMaps",
    "NoMaps",
    "RelativeMaps",
    "AliasedMaps",
]
