"""Schema validation utilities.

Schemas are JSON Schema documents stored as YAML under
``droplet/data/schemas/`` and validated with jsonschema.
"""
from __future__ import annotations

from typing import Any, Dict, List

import jsonschema
from jsonschema import Draft202012Validator

from droplet.data import get_data_path, read_yaml

from ..exceptions import ConfigError


def load_schema(schema_name: str) -> Dict[str, Any]:
    """Load a bundled schema.

    Args:
        schema_name: File name under the schemas directory; ``.yaml`` is
            appended when no extension is given (e.g. "config.schema").

    Raises:
        FileNotFoundError: If the schema file doesn't exist.
        ValueError: If the schema is not a YAML mapping.
    """
    lowered = schema_name.lower()
    if not (lowered.endswith(".yaml") or lowered.endswith(".yml")):
        schema_name = f"{schema_name}.yaml"

    path = get_data_path("schemas", schema_name)
    if not path.exists():
        raise FileNotFoundError(f"Schema not found: {schema_name}")

    schema = read_yaml("schemas", schema_name)
    if not isinstance(schema, dict):
        raise ValueError(f"Schema must be a YAML mapping, got {type(schema).__name__}")
    return schema


def schema_errors(payload: Dict[str, Any], schema_name: str) -> List[str]:
    """Return readable validation errors (empty when the payload is valid)."""
    validator = Draft202012Validator(load_schema(schema_name))
    errors: List[str] = []
    for error in sorted(validator.iter_errors(payload), key=lambda e: list(e.path)):
        location = ".".join(str(p) for p in error.path) or "<root>"
        errors.append(f"{location}: {error.message}")
    return errors


def validate_payload(payload: Dict[str, Any], schema_name: str) -> None:
    """Validate a payload against a bundled schema.

    Raises:
        ConfigError: If validation fails.
    """
    try:
        jsonschema.validate(instance=payload, schema=load_schema(schema_name))
    except jsonschema.ValidationError as exc:
        raise ConfigError(
            f"Validation failed against schema '{schema_name}': {exc.message}",
            context={"schema": schema_name, "errors": schema_errors(payload, schema_name)},
        ) from exc


__all__ = ["load_schema", "schema_errors", "validate_payload"]
