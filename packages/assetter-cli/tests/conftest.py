"""Shared test fixtures for assetter-cli tests.

Provides CliRunner fixtures, a served tree in a temporary directory and
fake compilers standing in for libsass and dukpy.
"""

from __future__ import annotations

import os
import time
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
import structlog
from click.testing import CliRunner

from assetter_core.compilers import USE_TRANSPILE_DIRECTIVE, css_map_comment, js_map_comment
from assetter_core.registry import CompilerRegistry

# File name constants
CONFIG_FILENAME = "assetter.yaml"


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Drop the logging setup of the previous invocation.

    The CLI points structlog at the stderr of the running invocation, which
    CliRunner closes afterwards.
    """
    yield
    structlog.reset_defaults()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner.

    Returns:
        CliRunner instance for testing CLI commands.
    """
    return CliRunner()


@pytest.fixture
def isolated_runner(cli_runner: CliRunner) -> Generator[CliRunner, None, None]:
    """Create a Click test runner with an isolated filesystem.

    Yields:
        CliRunner instance with isolated filesystem.
    """
    with cli_runner.isolated_filesystem():
        yield cli_runner


async def _fake_compile(input_path: Path, options: Any) -> dict[str, Any]:
    source = input_path.read_text(encoding="utf-8")
    if input_path.suffix in (".es", ".js"):
        source = f"{USE_TRANSPILE_DIRECTIVE}\n{source}"
    if "SYNTAX ERROR" in source:
        raise SyntaxError(f"invalid source in {input_path.name}")
    return {"content": source, "mapping": {"version": 3, "names": [], "mappings": "AAAA"}}


@pytest.fixture(autouse=True)
def fake_compilers(monkeypatch: pytest.MonkeyPatch) -> CompilerRegistry:
    """Replace the builtin compiler backends with in-process fakes.

    Commands build their Transpiler from the default registry, so the fake
    registry is patched in where the engine looks it up.
    """
    registry = CompilerRegistry()
    registry.register(".css", extension=".css", map_comment=css_map_comment, compile=_fake_compile)
    registry.register(".sass", ".css")
    registry.register(".scss", ".css")
    registry.register(".js", extension=".js", map_comment=js_map_comment, compile=_fake_compile)
    registry.register(".es", ".js")
    registry.register(".es6", ".js")
    monkeypatch.setattr("assetter_core.engine.default_registry", lambda: registry)
    return registry


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Return the root of a served tree holding a few sources."""
    root = tmp_path / "www"
    sources = {
        "css/site.scss": "a { color: red; }",
        "js/t1.es": "let a = 1;",
        "js/t2.es": "let b = 2;",
        "js/plain.js": "var c = 3;",
    }
    past = time.time() - 60
    for relative, content in sources.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        os.utime(path, (past, past))
    return root


@pytest.fixture
def base_args(project: Path, tmp_path: Path) -> list[str]:
    """Return transpile arguments isolating rootdir and cache."""
    return ["--rootdir", str(project), "--tmpdir", str(tmp_path / "tmp")]


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[[str], Path]:
    """Return a helper writing an assetter.yaml next to the tree."""

    def _write(content: str) -> Path:
        path = tmp_path / CONFIG_FILENAME
        path.write_text(content, encoding="utf-8")
        return path

    return _write
