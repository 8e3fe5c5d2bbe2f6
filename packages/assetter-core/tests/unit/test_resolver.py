"""Unit tests for AltfileResolver."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from assetter_core.compilers import default_registry
from assetter_core.resolver import AltfileResolver


@pytest.fixture
def resolver() -> AltfileResolver:
    return AltfileResolver(default_registry())


class TestCandidates:
    """Tests for AltfileResolver.candidates()."""

    def test_plain_request_excludes_own_extension(self, resolver: AltfileResolver) -> None:
        assert resolver.candidates("css/site.css") == [
            Path("css/site.sass"),
            Path("css/site.scss"),
        ]

    def test_minified_request_includes_own_extension_last(
        self, resolver: AltfileResolver
    ) -> None:
        assert resolver.candidates("js/app.min.js") == [
            Path("js/app.es"),
            Path("js/app.es6"),
            Path("js/app.js"),
        ]

    def test_forced_request_includes_own_extension(self, resolver: AltfileResolver) -> None:
        assert resolver.candidates("js/app.js", forced=True)[-1] == Path("js/app.js")

    def test_unknown_extension_has_no_candidates(self, resolver: AltfileResolver) -> None:
        assert resolver.candidates("index.html") == []

    def test_no_extension_has_no_candidates(self, resolver: AltfileResolver) -> None:
        assert resolver.candidates("README") == []


class TestGetAltfile:
    """Tests for AltfileResolver.get_altfile()."""

    def test_finds_scss_for_css(
        self,
        resolver: AltfileResolver,
        rootdir: Path,
        write_source: Callable[..., Path],
    ) -> None:
        scss = write_source("css/site.scss", "a{}")
        assert resolver.get_altfile(rootdir / "css" / "site.css") == scss

    def test_prefers_registration_order(
        self,
        resolver: AltfileResolver,
        rootdir: Path,
        write_source: Callable[..., Path],
    ) -> None:
        sass = write_source("css/site.sass", "a\n  b: c")
        write_source("css/site.scss", "a{}")
        assert resolver.get_altfile(rootdir / "css" / "site.css") == sass

    def test_plain_css_not_served_for_itself(
        self,
        resolver: AltfileResolver,
        rootdir: Path,
        write_source: Callable[..., Path],
    ) -> None:
        write_source("css/site.css", "a{}")
        assert resolver.get_altfile(rootdir / "css" / "site.css") is None

    def test_plain_js_serves_minified_request(
        self,
        resolver: AltfileResolver,
        rootdir: Path,
        write_source: Callable[..., Path],
    ) -> None:
        js = write_source("js/app.js", "var a = 1;")
        assert resolver.get_altfile(rootdir / "js" / "app.min.js") == js

    def test_missing_altfile(self, resolver: AltfileResolver, rootdir: Path) -> None:
        assert resolver.get_altfile(rootdir / "js" / "none.js") is None


class TestCanTranspile:
    """Tests for AltfileResolver.can_transpile()."""

    @pytest.mark.parametrize(
        ("filename", "expected"),
        [
            ("site.scss", True),
            ("site.sass", True),
            ("app.es", True),
            ("app.es6", True),
            ("site.css", False),
            ("app.js", False),
            ("index.html", False),
            ("Makefile", False),
        ],
    )
    def test_can_transpile(
        self, resolver: AltfileResolver, filename: str, expected: bool
    ) -> None:
        assert resolver.can_transpile(filename) is expected


class TestResolveRequest:
    """Tests for AltfileResolver.resolve_request()."""

    def test_combined_request(
        self,
        resolver: AltfileResolver,
        rootdir: Path,
        write_source: Callable[..., Path],
    ) -> None:
        t1 = write_source("js/t1.es", "let a = 1;")
        t2 = write_source("js/t2.js", "var b = 2;")
        assert resolver.resolve_request(rootdir / "js" / "t1,t2.js") == [t1, t2]

    def test_combined_request_drops_missing_parts(
        self,
        resolver: AltfileResolver,
        rootdir: Path,
        write_source: Callable[..., Path],
    ) -> None:
        t2 = write_source("js/t2.es", "let b = 2;")
        assert resolver.resolve_request(rootdir / "js" / "t1,t2.js") == [t2]

    def test_single_request(
        self,
        resolver: AltfileResolver,
        rootdir: Path,
        write_source: Callable[..., Path],
    ) -> None:
        scss = write_source("css/site.scss", "a{}")
        assert resolver.resolve_request(rootdir / "css" / "site.css") == [scss]
