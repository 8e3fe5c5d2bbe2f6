"""Unit tests for TranspileOptions and map policies."""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from assetter_core.errors import ConfigurationError
from assetter_core.options import (
    AliasedMaps,
    InlineMaps,
    NoMaps,
    RelativeMaps,
    TranspileOptions,
)


class TestDefaults:
    """Tests for default option values."""

    def test_defaults(self) -> None:
        options = TranspileOptions()
        assert options.maps == RelativeMaps(path="")
        assert options.outfile is None
        assert options.minified is False
        assert options.nocache is False
        assert options.nowrite is False
        assert options.rootdir == Path.cwd()
        assert options.localdir == "/"
        assert options.tmpdir == Path(tempfile.gettempdir())
        assert options.patterns == ()

    def test_frozen(self) -> None:
        options = TranspileOptions()
        with pytest.raises(ValidationError):
            options.nocache = True  # type: ignore[misc]

    def test_unknown_option_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TranspileOptions(compress=True)  # type: ignore[call-arg]

    def test_browser_targets_not_accepted(self) -> None:
        with pytest.raises(ValidationError):
            TranspileOptions(browserslist=["defaults"])  # type: ignore[call-arg]


class TestMapPolicyCoercion:
    """Tests for the short forms of the maps option."""

    def test_true_is_inline(self) -> None:
        assert isinstance(TranspileOptions(maps=True).maps, InlineMaps)

    def test_false_is_none(self) -> None:
        assert isinstance(TranspileOptions(maps=False).maps, NoMaps)

    def test_none_is_beside_output(self) -> None:
        assert TranspileOptions(maps=None).maps == RelativeMaps(path="")

    def test_string_is_relative(self) -> None:
        assert TranspileOptions(maps="maps").maps == RelativeMaps(path="maps")

    def test_mapping_is_aliased(self) -> None:
        maps = TranspileOptions(maps={"/map": "/srv/maps"}).maps
        assert isinstance(maps, AliasedMaps)
        assert maps.aliases == {"/map": Path("/srv/maps")}

    def test_tagged_mapping(self) -> None:
        maps = TranspileOptions(maps={"kind": "relative", "path": "m"}).maps
        assert maps == RelativeMaps(path="m")

    def test_empty_aliases_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TranspileOptions(maps={"kind": "alias", "aliases": {}})

    def test_unknown_kind_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TranspileOptions(maps={"kind": "external"})

    def test_invalid_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TranspileOptions(maps=42)


class TestMinify:
    """Tests for the effective minification flag."""

    def test_explicit(self) -> None:
        assert TranspileOptions(minified=True).minify
        assert not TranspileOptions(minified=False).minify

    def test_none_means_auto(self) -> None:
        assert TranspileOptions(minified=None).minified == "auto"

    def test_auto_from_outfile(self) -> None:
        assert TranspileOptions(minified="auto", outfile=Path("a.min.js")).minify
        assert not TranspileOptions(minified="auto", outfile=Path("a.js")).minify

    def test_auto_without_outfile(self) -> None:
        assert not TranspileOptions(minified="auto").minify


class TestWithOverrides:
    """Tests for TranspileOptions.with_overrides()."""

    def test_overrides_are_validated(self) -> None:
        options = TranspileOptions().with_overrides(maps=True, patterns=["*.scss"])
        assert isinstance(options.maps, InlineMaps)
        assert options.patterns == ("*.scss",)

    def test_original_untouched(self) -> None:
        options = TranspileOptions()
        options.with_overrides(nocache=True)
        assert options.nocache is False

    def test_invalid_override(self) -> None:
        with pytest.raises(ValidationError):
            TranspileOptions().with_overrides(nowrite="sometimes")


class TestFromYaml:
    """Tests for TranspileOptions.from_yaml()."""

    def test_load(self, tmp_path: Path) -> None:
        config = tmp_path / "assetter.yaml"
        config.write_text(
            yaml.dump(
                {
                    "rootdir": "public",
                    "localdir": "/static",
                    "maps": "maps",
                    "minified": "auto",
                    "patterns": ["*.scss"],
                }
            )
        )

        options = TranspileOptions.from_yaml(config)

        assert options.rootdir == tmp_path / "public"
        assert options.localdir == "/static"
        assert options.maps == RelativeMaps(path="maps")
        assert options.minified == "auto"
        assert options.patterns == ("*.scss",)

    def test_alias_directories_relative_to_file(self, tmp_path: Path) -> None:
        config = tmp_path / "assetter.yaml"
        config.write_text(yaml.dump({"maps": {"/map": "build/maps"}}))

        options = TranspileOptions.from_yaml(config)

        assert options.maps == AliasedMaps(aliases={"/map": tmp_path / "build" / "maps"})

    def test_overrides_take_precedence(self, tmp_path: Path) -> None:
        config = tmp_path / "assetter.yaml"
        config.write_text(yaml.dump({"nocache": False, "maps": True}))

        options = TranspileOptions.from_yaml(config, nocache=True)

        assert options.nocache is True
        assert isinstance(options.maps, InlineMaps)

    def test_empty_file(self, tmp_path: Path) -> None:
        config = tmp_path / "assetter.yaml"
        config.write_text("")
        assert TranspileOptions.from_yaml(config).maps == RelativeMaps()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            TranspileOptions.from_yaml(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        config = tmp_path / "assetter.yaml"
        config.write_text("maps: [unclosed")

        with pytest.raises(ConfigurationError) as exc_info:
            TranspileOptions.from_yaml(config)

        assert exc_info.value.file_path == str(config)
        assert "Invalid YAML" in str(exc_info.value)

    def test_non_mapping(self, tmp_path: Path) -> None:
        config = tmp_path / "assetter.yaml"
        config.write_text("- a\n- b\n")

        with pytest.raises(ConfigurationError, match="mapping at top level"):
            TranspileOptions.from_yaml(config)

    def test_unknown_key(self, tmp_path: Path) -> None:
        config = tmp_path / "assetter.yaml"
        config.write_text(yaml.dump({"compress": True}))

        with pytest.raises(ConfigurationError) as exc_info:
            TranspileOptions.from_yaml(config)

        assert exc_info.value.field_path == "compress"
        assert str(config) in str(exc_info.value)
