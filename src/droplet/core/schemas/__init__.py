"""JSON Schema validation for configuration payloads."""
from __future__ import annotations

from .validation import load_schema, validate_payload

__all__ = ["load_schema", "validate_payload"]
