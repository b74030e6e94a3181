"""Tests for pva.loader module."""

from __future__ import annotations

from pathlib import Path

import pytest

from pva.errors import DescriptorMissingError, LintError, ParseError, UnsupportedFormatError
from pva.loader import (
    declared_version,
    load_document,
    parse_contents,
    preprocess,
    strip_bom,
)


class TestParseContents:
    """Tests for parse_contents."""

    def test_json(self) -> None:
        assert parse_contents('{"openapi": "3.0.0"}', "api.json") == {"openapi": "3.0.0"}

    @pytest.mark.parametrize("name", ["api.yaml", "api.yml"])
    def test_yaml(self, name: str) -> None:
        assert parse_contents("openapi: 3.0.0\n", name) == {"openapi": "3.0.0"}

    def test_unsupported_extension(self) -> None:
        """Test other extensions fail with an unsupported format error."""
        with pytest.raises(UnsupportedFormatError, match="Unable to parse file"):
            parse_contents("openapi: 3.0.0", "api.txt")

    def test_invalid_json(self) -> None:
        with pytest.raises(ParseError, match="api.json"):
            parse_contents('{"openapi": ', "api.json")

    def test_invalid_yaml(self) -> None:
        with pytest.raises(ParseError):
            parse_contents("openapi: [3.0.0\n", "api.yaml")


class TestPreprocess:
    """Tests for text normalization."""

    def test_strip_bom(self) -> None:
        assert strip_bom("\ufeffopenapi: 3.0.0") == "openapi: 3.0.0"
        assert strip_bom("openapi: 3.0.0") == "openapi: 3.0.0"

    def test_tabs_expanded(self) -> None:
        assert preprocess("info:\n\ttitle: x\n") == "info:\n  title: x\n"

    def test_line_count_preserved(self) -> None:
        """Test preprocessing never changes line numbers."""
        text = "a:\n\tb: 1\n\n\tc: 2\n"
        assert preprocess(text).count("\n") == text.count("\n")


class TestDeclaredVersion:
    """Tests for descriptor detection."""

    def test_openapi(self) -> None:
        assert declared_version({"openapi": "3.1.0"}) == "3.1.0"

    def test_swagger(self) -> None:
        assert declared_version({"swagger": "2.0"}) == "2.0"

    def test_swagger_wrong_version(self) -> None:
        assert declared_version({"swagger": "1.2"}) is None

    def test_not_a_mapping(self) -> None:
        assert declared_version(["openapi"]) is None


class TestLoadDocument:
    """Tests for load_document."""

    def test_load_yaml(self, fixtures_dir: Path) -> None:
        document = load_document(fixtures_dir / "basic.yaml")
        assert document.version == "3.0.3"
        assert document.data["info"]["title"] == "Pets"
        assert not document.is_swagger2

    def test_load_json(self, fixtures_dir: Path) -> None:
        document = load_document(fixtures_dir / "swagger.json")
        assert document.version == "2.0"
        assert document.is_swagger2

    def test_bom_stripped(self, tmp_path: Path) -> None:
        path = tmp_path / "api.json"
        path.write_text('\ufeff{"openapi": "3.0.0"}', encoding="utf-8")
        document = load_document(path)
        assert not document.contents.startswith("\ufeff")
        assert document.version == "3.0.0"

    def test_tab_indented_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "api.yaml"
        path.write_text("openapi: 3.0.0\ninfo:\n\ttitle: Tabs\n", encoding="utf-8")
        assert load_document(path).data["info"]["title"] == "Tabs"

    def test_descriptor_missing(self, fixtures_dir: Path) -> None:
        """Test documents without openapi/swagger fail distinctly from parse errors."""
        with pytest.raises(DescriptorMissingError) as exc_info:
            load_document(fixtures_dir / "not_openapi.yaml")
        assert not isinstance(exc_info.value, ParseError)
        assert isinstance(exc_info.value, LintError)
        assert "swagger" in str(exc_info.value)
