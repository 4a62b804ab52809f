"""YAML style sheets: named style properties evaluated against one environment."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from calcstyle.binding import StyleBinding
from calcstyle.environment import EnvironmentSource, StaticEnvironment
from calcstyle.errors import ParseError
from calcstyle.evaluators import SphericalStyle


class SheetEnvironment(BaseModel):
    model_config = ConfigDict(extra="forbid")

    scroll_offset: float = 0.0
    document_heights: list[float] = []
    viewport_height: float = Field(default=0.0, ge=0.0)

    def to_environment(self) -> StaticEnvironment:
        return StaticEnvironment(
            scroll_offset=self.scroll_offset,
            document_heights=tuple(self.document_heights),
            viewport_height=self.viewport_height,
        )


class StyleProperty(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["number", "spherical"] = "number"
    value: str


class StyleSheet(BaseModel):
    model_config = ConfigDict(extra="forbid")

    environment: SheetEnvironment = SheetEnvironment()
    properties: dict[str, StyleProperty] = {}


def _make_yaml() -> YAML:
    """Create a ruamel.yaml safe loader that errors on duplicate keys."""
    yml = YAML(typ="safe")
    yml.allow_duplicate_keys = False
    return yml


def _read_source_text(source: str | Path) -> str:
    """Read YAML content from a path or treat the input as raw YAML text."""
    if isinstance(source, Path):
        try:
            return source.read_text(encoding="utf-8")
        except OSError as e:
            raise ParseError(f"Cannot read file: {e}") from e
    return source


def load_sheet(source: str | Path) -> StyleSheet:
    """Load and schema-validate a style sheet.

    Args:
        source: YAML string or path to a style sheet file.

    Returns:
        The validated StyleSheet. An empty document is an empty sheet.

    Raises:
        ParseError: On YAML syntax errors or schema violations.
    """
    text = _read_source_text(source)
    try:
        data = _make_yaml().load(text)
    except YAMLError as e:
        raise ParseError(f"Invalid YAML: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ParseError("Top-level YAML value must be a mapping")

    try:
        return StyleSheet(**data)
    except PydanticValidationError as e:
        raise ParseError(f"Style sheet validation failed:\n{e}") from e


def _serialize(value: Any) -> dict[str, Any]:
    if isinstance(value, SphericalStyle):
        return {"spherical": list(value)}
    return {"number": value.number, "unit": value.unit}


def evaluate_sheet(
    sheet: StyleSheet, environment: EnvironmentSource | None = None
) -> dict[str, dict[str, Any]]:
    """Evaluate every property of a sheet.

    ``environment`` overrides the sheet's own environment block. The result
    maps property names to JSON-ready dicts, in sheet order.
    """
    if environment is None:
        environment = sheet.environment.to_environment()

    results: dict[str, dict[str, Any]] = {}
    for name, prop in sheet.properties.items():
        binding = StyleBinding(prop.kind, environment)
        binding.assign(prop.value)
        entry = _serialize(binding.value())
        entry["constant"] = binding.is_constant
        results[name] = entry
    return results
