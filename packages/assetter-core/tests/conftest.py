"""Shared pytest fixtures for assetter-core tests.

This module provides a served tree in a temporary directory, options
pointing at it, and a compiler registry backed by fake in-process
compilers, so pipeline tests never need libsass or dukpy.
"""

from __future__ import annotations

import os
import sys
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import structlog

from assetter_core.compilers import USE_TRANSPILE_DIRECTIVE, css_map_comment, js_map_comment
from assetter_core.options import TranspileOptions
from assetter_core.registry import CompilerRegistry

# Logical mount used by every test tree
TEST_LOCALDIR = "/.assetter-test"


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture.

    This fixture ensures structlog outputs to stdout so that capsys
    can capture the output in tests. Without this, structlog may use
    different processors depending on test execution order.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


class FakeCompiler:
    """Async compiler stand-in recording every input it compiles.

    The output is the source text, optionally prefixed, with a one-segment
    map pointing at the input.
    """

    def __init__(self, prefix: str = "") -> None:
        self.prefix = prefix
        self.calls: list[Path] = []

    async def __call__(self, input_path: Path, options: TranspileOptions) -> dict[str, Any]:
        self.calls.append(input_path)
        source = input_path.read_text(encoding="utf-8")
        return {
            "content": self.prefix + source,
            "mapping": {
                "version": 3,
                "sources": [input_path.name],
                "names": [],
                "mappings": "AAAA",
            },
        }


class FailingCompiler:
    """Async compiler stand-in that always raises."""

    def __init__(self, message: str = "unexpected token") -> None:
        self.message = message
        self.calls: list[Path] = []

    async def __call__(self, input_path: Path, options: TranspileOptions) -> dict[str, Any]:
        self.calls.append(input_path)
        raise SyntaxError(self.message)


@pytest.fixture
def script_compiler() -> FakeCompiler:
    """Return the fake compiler registered for scripts."""
    return FakeCompiler(prefix=f"{USE_TRANSPILE_DIRECTIVE}\n")


@pytest.fixture
def style_compiler() -> FakeCompiler:
    """Return the fake compiler registered for stylesheets."""
    return FakeCompiler()


@pytest.fixture
def registry(script_compiler: FakeCompiler, style_compiler: FakeCompiler) -> CompilerRegistry:
    """Return a registry mirroring the builtin layout with fake compilers.

    .css/.scss compile to .css and .js/.es compile to .js.
    """
    registry = CompilerRegistry()
    registry.register(
        ".css",
        extension=".css",
        map_comment=css_map_comment,
        compile=style_compiler,
    )
    registry.register(".scss", ".css")
    registry.register(
        ".js",
        extension=".js",
        map_comment=js_map_comment,
        compile=script_compiler,
    )
    registry.register(".es", ".js")
    return registry


@pytest.fixture
def rootdir(tmp_path: Path) -> Path:
    """Return the root of the served test tree."""
    root = tmp_path / "www"
    root.mkdir()
    return root


@pytest.fixture
def options(rootdir: Path, tmp_path: Path) -> TranspileOptions:
    """Return options serving rootdir under TEST_LOCALDIR with a private cache."""
    return TranspileOptions(
        rootdir=rootdir,
        localdir=TEST_LOCALDIR,
        tmpdir=tmp_path / "tmp",
    )


@pytest.fixture
def write_source(rootdir: Path) -> Callable[..., Path]:
    """Return a helper creating a source file below rootdir.

    The file's mtime is moved into the past so a cache entry written during
    the test is always strictly newer.
    """

    def _write(relative: str, content: str, *, base: Path | None = None) -> Path:
        path = (base or rootdir) / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        past = time.time() - 60
        os.utime(path, (past, past))
        return path

    return _write


@pytest.fixture
def touch() -> Callable[[Path], None]:
    """Return a helper moving the mtime of a file into the future."""

    def _touch(path: Path) -> None:
        future = time.time() + 60
        os.utime(path, (future, future))

    return _touch


@pytest.fixture
def failing_compiler() -> FailingCompiler:
    return FailingCompiler()
