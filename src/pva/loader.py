"""Document loading for pva.

Reads an API description file, strips the byte order mark, normalizes the
text and parses it as JSON or YAML depending on the file extension.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from pva.errors import DescriptorMissingError, ParseError, UnsupportedFormatError

logger = logging.getLogger(__name__)

BOM = "﻿"
TAB_WIDTH = 2

JSON_EXTENSIONS = frozenset({"json"})
YAML_EXTENSIONS = frozenset({"yaml", "yml"})
SUPPORTED_EXTENSIONS = JSON_EXTENSIONS | YAML_EXTENSIONS


@dataclass
class LoadedDocument:
    """A parsed API description document.

    Attributes:
        path: File the document was read from.
        contents: Preprocessed text. Line numbers match the original file.
        data: Parsed document tree.
        version: Declared ``openapi`` or ``swagger`` version string.
    """

    path: Path
    contents: str
    data: dict[str, Any]
    version: str

    @property
    def is_swagger2(self) -> bool:
        return not self.data.get("openapi")


def strip_bom(text: str) -> str:
    return text[1:] if text.startswith(BOM) else text


def preprocess(text: str) -> str:
    """Normalize raw text before parsing.

    Tabs are expanded to spaces since YAML forbids them in indentation. No
    newline is added or removed, so line numbers still match the file.
    """
    return text.replace("\t", " " * TAB_WIDTH)


def parse_contents(contents: str, filepath: Path | str) -> Any:
    """Parse file contents according to the file extension.

    Args:
        contents: Text to parse.
        filepath: Path used to pick the parser and for error messages.

    Returns:
        The parsed tree.

    Raises:
        UnsupportedFormatError: If the extension is not json, yaml or yml.
        ParseError: If the contents are not valid for the format.
    """
    path = Path(filepath)
    extension = path.suffix[1:]

    if extension in JSON_EXTENSIONS:
        try:
            return json.loads(contents)
        except json.JSONDecodeError as e:
            raise ParseError(f"{e.msg} in {path} (line {e.lineno} column {e.colno})", path) from e

    if extension in YAML_EXTENSIONS:
        try:
            return yaml.safe_load(contents)
        except yaml.YAMLError as e:
            raise ParseError(f"Invalid YAML in {path}: {e}", path) from e

    raise UnsupportedFormatError(path)


def declared_version(data: Any) -> str | None:
    """Return the declared version, or None if the document is not an API description.

    A document qualifies with a truthy ``openapi`` field or ``swagger: "2.0"``.
    """
    if not isinstance(data, dict):
        return None
    if data.get("openapi"):
        return str(data["openapi"])
    if data.get("swagger") == "2.0":
        return "2.0"
    return None


def load_document(filepath: Path | str) -> LoadedDocument:
    """Read and parse an API description document.

    Args:
        filepath: Path to a .json, .yaml or .yml file.

    Returns:
        The loaded document.

    Raises:
        OSError: If the file cannot be read.
        ParseError: If the file cannot be parsed.
        DescriptorMissingError: If the document declares neither ``openapi``
            nor ``swagger: "2.0"``.
    """
    path = Path(filepath)
    contents = preprocess(strip_bom(path.read_text(encoding="utf-8")))
    data = parse_contents(contents, path)

    version = declared_version(data)
    if version is None:
        raise DescriptorMissingError(path)

    logger.debug("Loaded %s (version %s)", path, version)
    return LoadedDocument(path=path, contents=contents, data=data, version=version)
