"""
Checklist definitions for the plugin package pre-flight validator.

A checklist bundles everything a validation run needs:
- the manifest (fixed, ordered list of files that must exist and be clean)
- the primary file the API feature markers are checked against
- the feature expectations (marker, label)
- the structural rules used by the syntax heuristics

The built-in checklist describes the StatForge package. Alternative
checklists can be loaded from YAML and are validated against a JSON Schema.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError, UnknownType
from referencing.exceptions import Unresolvable


class ChecklistError(Exception):
    """Raised when a checklist is malformed.

    Carries every problem found so they can be reported together.
    """

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


@dataclass(frozen=True)
class FeatureExpectation:
    """A literal marker that must appear in the primary file."""

    marker: str
    label: str


@dataclass(frozen=True)
class StructureRules:
    """Tokens used by the structural heuristics."""

    type_keyword: str = "class"
    sentinel_symbol: str = "UnityEngine"
    required_directive: str = "using UnityEngine;"


DEFAULT_RULES = StructureRules()


@dataclass(frozen=True)
class Checklist:
    name: str
    manifest: tuple[str, ...]
    primary_file: str
    features: tuple[FeatureExpectation, ...]
    rules: StructureRules = DEFAULT_RULES

    def __post_init__(self) -> None:
        errors: list[str] = []

        if not self.manifest:
            errors.append(f"{self.name}: manifest must list at least one file")

        seen: set[str] = set()
        for entry in self.manifest:
            if entry in seen:
                errors.append(f"{self.name}: duplicate manifest entry: {entry}")
            seen.add(entry)

        if self.primary_file not in self.manifest:
            errors.append(
                f"{self.name}: primary file '{self.primary_file}' is not in the manifest"
            )

        if errors:
            raise ChecklistError(errors)


DEFAULT_CHECKLIST = Checklist(
    name="StatForge",
    manifest=(
        "Runtime/Core/Stat.cs",
        "Runtime/Core/IndividualStatFormulaEvaluator.cs",
        "Runtime/Core/StatExtensions.cs",
        "Runtime/Core/StatAttribute.cs",
        "Tests/Runtime/StatForgeNewAPITests.cs",
        "Editor/StatPropertyDrawer.cs",
        "Samples~/Basic/NewAPIPlayerExample.cs",
    ),
    primary_file="Runtime/Core/Stat.cs",
    features=(
        FeatureExpectation("class Stat", "Stat class definition"),
        FeatureExpectation("public float Value", "Value property"),
        FeatureExpectation("public string Formula", "Formula property"),
        FeatureExpectation("AddModifier", "Modifier support"),
        FeatureExpectation("OnValueChanged", "Event system"),
        FeatureExpectation("implicit operator float", "Implicit conversion"),
    ),
)

# Checklist file schema (YAML, validated as JSON data)
CHECKLIST_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["name", "manifest", "primary_file", "features"],
    "additionalProperties": False,
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "manifest": {
            "type": "array",
            "minItems": 1,
            "items": {"type": "string", "minLength": 1},
        },
        "primary_file": {"type": "string", "minLength": 1},
        "features": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["marker", "label"],
                "additionalProperties": False,
                "properties": {
                    "marker": {"type": "string", "minLength": 1},
                    "label": {"type": "string", "minLength": 1},
                },
            },
        },
        "rules": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "type_keyword": {"type": "string", "minLength": 1},
                "sentinel_symbol": {"type": "string", "minLength": 1},
                "required_directive": {"type": "string", "minLength": 1},
            },
        },
    },
}


def validate_json_schema(data: Any, schema: dict[str, Any], context: str) -> list[str]:
    """Validate data against a JSON Schema Draft 7 specification.

    Args:
        data: Parsed document to validate
        schema: JSON Schema dict (Draft 7 format)
        context: Human-readable context for error messages

    Returns:
        List of formatted error messages with context and field paths
    """
    errors: list[str] = []

    try:
        validator = Draft7Validator(schema)
    except SchemaError as e:
        errors.append(f"{context}: INTERNAL ERROR - Invalid schema definition: {e}")
        return errors

    try:
        found = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])
    except RecursionError:
        errors.append(f"{context}: Data structure too deeply nested (recursion limit)")
        return errors
    except Unresolvable as e:
        errors.append(f"{context}: Schema reference resolution failed: {e}")
        return errors
    except UnknownType as e:
        errors.append(f"{context}: Unknown type in schema: {e}")
        return errors
    except (ValueError, TypeError) as e:
        errors.append(f"{context}: Invalid data structure: {e}")
        return errors

    for error in found:
        path = " -> ".join(str(p) for p in error.path) if error.path else "root"
        errors.append(f"{context}: {path}: {error.message}")

    return errors


def checklist_from_dict(data: dict[str, Any]) -> Checklist:
    """Build a Checklist from schema-valid data."""
    rules = StructureRules(**data.get("rules", {}))
    return Checklist(
        name=data["name"],
        manifest=tuple(data["manifest"]),
        primary_file=data["primary_file"],
        features=tuple(
            FeatureExpectation(item["marker"], item["label"]) for item in data["features"]
        ),
        rules=rules,
    )


def load_checklist(path: Path) -> Checklist:
    """Load a checklist from a YAML file.

    Raises:
        ChecklistError: If the file cannot be read, is not valid YAML,
            violates the schema, or breaks a checklist invariant.
    """
    context = path.name

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ChecklistError([f"{context}: Checklist file not found: {path}"]) from None
    except UnicodeDecodeError:
        raise ChecklistError(
            [f"{context}: File is not valid UTF-8\n  Ensure file is text, not binary"]
        ) from None
    except OSError as e:
        raise ChecklistError([f"{context}: Cannot read file: {e}"]) from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ChecklistError([f"{context}: Invalid YAML\n  {e}"]) from e
    except RecursionError:
        raise ChecklistError(
            [f"{context}: Data structure too deeply nested (recursion limit)"]
        ) from None

    errors = validate_json_schema(data, CHECKLIST_SCHEMA, context)
    if errors:
        raise ChecklistError(errors)

    return checklist_from_dict(data)
