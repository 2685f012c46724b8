"""Assembly and schema validation of the analysis record."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Sequence

from jsonschema import Draft202012Validator

from .errors import ResultValidationError
from .models import ArtifactRef
from .platforms import KNOWN_PLATFORMS

_PUBLIC_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["name"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "type": {"type": "string"},
        "doc": {"type": ["string", "null"]},
        "arglists": {
            "type": ["array", "null"],
            "items": {"type": "array"},
        },
        "file": {"type": ["string", "null"]},
        "line": {"type": ["integer", "null"]},
        "deprecated": {"type": ["string", "boolean", "null"]},
        "added": {"type": ["string", "null"]},
        "dynamic": {"type": "boolean"},
        "members": {"type": "array", "items": {"$ref": "#/$defs/public"}},
    },
}

_NAMESPACE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["name", "publics"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "doc": {"type": ["string", "null"]},
        "author": {"type": ["string", "null"]},
        "deprecated": {"type": ["string", "boolean", "null"]},
        "publics": {"type": "array", "items": {"$ref": "#/$defs/public"}},
    },
}

CLJDOC_RESULT_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "$id": "cljdoc/cljdoc-result",
    "type": "object",
    "required": ["group-id", "artifact-id", "version", "codox", "pom-str"],
    "additionalProperties": False,
    "properties": {
        "group-id": {"type": "string", "minLength": 1},
        "artifact-id": {"type": "string", "minLength": 1},
        "version": {"type": "string", "minLength": 1},
        "pom-str": {"type": "string"},
        "codox": {
            "type": "object",
            "propertyNames": {"enum": list(KNOWN_PLATFORMS)},
            "additionalProperties": {
                "type": "array",
                "items": {"$ref": "#/$defs/namespace"},
            },
        },
    },
    "$defs": {"namespace": _NAMESPACE_SCHEMA, "public": _PUBLIC_SCHEMA},
}

_VALIDATOR = Draft202012Validator(CLJDOC_RESULT_SCHEMA)


def assemble_result(
    ref: ArtifactRef,
    codox: Mapping[str, Any],
    pom_str: str,
    platforms: Sequence[str],
) -> Dict[str, Any]:
    """Combine identity, per-platform doc trees and the raw descriptor text."""
    unexpected = [platform for platform in codox if platform not in platforms]
    if unexpected:
        raise ResultValidationError(
            "analysis produced trees for unresolved platforms",
            issues=sorted(unexpected),
            project=ref.project,
        )
    return {
        "group-id": ref.group_id,
        "artifact-id": ref.artifact_id,
        "version": ref.version,
        "codox": {platform: codox[platform] for platform in platforms if platform in codox},
        "pom-str": pom_str,
    }


def schema_issues(record: Any) -> list[str]:
    """Return human readable schema violations, empty when ``record`` conforms."""
    issues = []
    for error in sorted(_VALIDATOR.iter_errors(record), key=lambda e: [str(p) for p in e.absolute_path]):
        location = "/".join(str(part) for part in error.absolute_path) or "<root>"
        issues.append(f"{location}: {error.message}")
    return issues


def validate_result(record: Any) -> None:
    """Raise :class:`ResultValidationError` unless ``record`` matches the schema."""
    issues = schema_issues(record)
    if issues:
        raise ResultValidationError("analysis record failed schema validation", issues=issues)


__all__ = [
    "CLJDOC_RESULT_SCHEMA",
    "assemble_result",
    "schema_issues",
    "validate_result",
]
