"""Syntax compatibility levels carried by a render Context."""
from __future__ import annotations

import logging
from enum import IntEnum

logger = logging.getLogger(__name__)


class SyntaxCompatibility(IntEnum):
    """Ordered compatibility levels; later levels drop legacy behaviours.

    Below ``DOTLIQUID22`` map entries iterate as ``LegacyKeyValueDrop``.
    """

    DOTLIQUID20 = 20
    DOTLIQUID21 = 21
    DOTLIQUID22 = 22
    DOTLIQUID22A = 23

    @classmethod
    def parse(cls, value: "str | int | SyntaxCompatibility") -> "SyntaxCompatibility":
        if isinstance(value, SyntaxCompatibility):
            return value
        if isinstance(value, int):
            return cls(value)
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            available = [level.name.lower() for level in cls]
            raise ValueError(
                f"Unknown syntax compatibility level: {value}. Available levels: {available}"
            ) from None


_default_level = SyntaxCompatibility.DOTLIQUID20


def get_default_syntax_compatibility() -> SyntaxCompatibility:
    return _default_level


def set_default_syntax_compatibility(level: "str | int | SyntaxCompatibility") -> SyntaxCompatibility:
    """Set the level used by new Contexts and return the previous one."""
    global _default_level
    previous = _default_level
    _default_level = SyntaxCompatibility.parse(level)
    logger.debug("Default syntax compatibility: %s -> %s", previous.name, _default_level.name)
    return previous


__all__ = [
    "SyntaxCompatibility",
    "get_default_syntax_compatibility",
    "set_default_syntax_compatibility",
]
