"""Literal and variable-path parsing for operand expressions.

Operand expressions arrive from the parser as raw markup such as ``'bob'``,
``5.00``, ``(1..3)``, ``empty`` or ``products[0].title``.
"""
from __future__ import annotations

import re
from collections.abc import Mapping, Sized
from typing import Any, List, Tuple


class Symbol:
    """A literal that compares by predicate rather than by value."""

    def __init__(self, name: str, predicate) -> None:
        self.name = name
        self._predicate = predicate

    def matches(self, value: Any) -> bool:
        return bool(self._predicate(value))

    def __repr__(self) -> str:
        return self.name


def _is_empty(value: Any) -> bool:
    if isinstance(value, (str, Mapping, list, tuple)):
        return len(value) == 0
    return False


def _is_blank(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, Sized):
        return len(value) == 0
    return False


EMPTY = Symbol("empty", _is_empty)
BLANK = Symbol("blank", _is_blank)

_UNDEFINED = object()

LITERALS = {
    "nil": None,
    "null": None,
    "": None,
    "true": True,
    "false": False,
    "empty": EMPTY,
    "blank": BLANK,
}

SINGLE_QUOTED = re.compile(r"^'(.*)'$", re.DOTALL)
DOUBLE_QUOTED = re.compile(r"^\"(.*)\"$", re.DOTALL)
INTEGER = re.compile(r"^[+-]?\d+$")
DECIMAL = re.compile(r"^[+-]?\d+\.\d+$")
RANGE = re.compile(r"^\((\S+)\.\.(\S+)\)$")
# Path segments: [bracketed] lookups or dotted names (with optional '?')
SEGMENT = re.compile(r"\[[^\]]+\]|[\w\-]+\??")
BRACKETED = re.compile(r"^\[(.*)\]$", re.DOTALL)


def parse_literal(markup: str) -> Any:
    """Return the literal value of ``markup`` or the ``UNDEFINED`` marker."""
    text = markup.strip()
    if text in LITERALS:
        return LITERALS[text]
    match = SINGLE_QUOTED.match(text) or DOUBLE_QUOTED.match(text)
    if match:
        return match.group(1)
    if INTEGER.match(text):
        return int(text)
    if DECIMAL.match(text):
        return float(text)
    return _UNDEFINED


def is_undefined(value: Any) -> bool:
    return value is _UNDEFINED


def parse_range(markup: str) -> Tuple[str, str] | None:
    match = RANGE.match(markup.strip())
    if not match:
        return None
    return match.group(1), match.group(2)


def split_path(markup: str) -> List[Tuple[str, bool]]:
    """Split a variable path into ``(segment, bracketed)`` pairs.

    ``products[0].title`` -> ``[("products", False), ("0", True), ("title", False)]``
    """
    parts: List[Tuple[str, bool]] = []
    for part in SEGMENT.findall(markup):
        match = BRACKETED.match(part)
        if match:
            parts.append((match.group(1), True))
        else:
            parts.append((part, False))
    return parts


__all__ = [
    "Symbol",
    "EMPTY",
    "BLANK",
    "parse_literal",
    "is_undefined",
    "parse_range",
    "split_path",
]
