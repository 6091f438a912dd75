"""Naming conventions for style-insensitive member lookup.

A naming convention maps a declared identifier (a filter function, a drop
member, a registered operator) to the canonical key that template source is
matched against.

- ``RubyNamingConvention`` (default): ``IsMultipleOf`` -> ``is_multiple_of``
- ``CSharpNamingConvention``: identifiers keep their declared casing

The process-wide default is read when a Context is created; evaluation then
uses the convention carried by the Context.
"""
from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class NamingConvention(ABC):
    """Strategy mapping declared names to lookup keys."""

    name: str = ""

    @abstractmethod
    def get_member_name(self, name: str) -> str:
        """Return the canonical form of a declared identifier."""
        ...

    @abstractmethod
    def operator_equals(self, registered: str, token: str) -> bool:
        """Return True if ``token`` spells the operator registered as ``registered``."""
        ...

    def lookup_key(self, canonical: str) -> str:
        """Return the dictionary key used to store a canonical name."""
        return canonical

    def same_key(self, a: str, b: str) -> bool:
        """Return True if two declared names map to the same lookup key.

        Args:
            a: First identifier, in any casing.
            b: Second identifier, in any casing.
        """
        return self.lookup_key(self.get_member_name(a)) == self.lookup_key(self.get_member_name(b))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class RubyNamingConvention(NamingConvention):
    """snake_case canonical names, the way Ruby Liquid exposes methods."""

    name = "ruby"

    # Split acronym runs from the next word: HTMLParser -> HTML_Parser
    _ACRONYM = re.compile(r"([A-Z]+)([A-Z][a-z])")
    # Split a lower-case letter or digit from a following capital
    _WORD = re.compile(r"([a-z\d])([A-Z])")

    def get_member_name(self, name: str) -> str:
        name = self._ACRONYM.sub(r"\1_\2", name)
        name = self._WORD.sub(r"\1_\2", name)
        return name.lower()

    def operator_equals(self, registered: str, token: str) -> bool:
        return self.get_member_name(registered) == token


class CSharpNamingConvention(NamingConvention):
    """PascalCase/camelCase names; snake_case spellings are never matched."""

    name = "csharp"

    def get_member_name(self, name: str) -> str:
        return name

    def operator_equals(self, registered: str, token: str) -> bool:
        if not registered:
            return False
        return registered[0].upper() + registered[1:] == token

    def lookup_key(self, canonical: str) -> str:
        return canonical.lower()


CONVENTIONS = {
    RubyNamingConvention.name: RubyNamingConvention,
    CSharpNamingConvention.name: CSharpNamingConvention,
}

_active: NamingConvention = RubyNamingConvention()


def get_naming_convention() -> NamingConvention:
    """Return the process-wide default naming convention."""
    return _active


def set_naming_convention(convention: NamingConvention | str) -> NamingConvention:
    """Install a new process-wide default and return the previous one.

    Not synchronized: callers swapping conventions while other threads render
    must serialize externally.
    """
    global _active
    if isinstance(convention, str):
        convention = convention_from_name(convention)
    previous = _active
    _active = convention
    logger.debug("Naming convention changed: %r -> %r", previous, convention)
    return previous


def convention_from_name(name: str) -> NamingConvention:
    """Instantiate a naming convention by its configured name.

    Args:
        name: "ruby" or "csharp" (case-insensitive).

    Returns:
        A new NamingConvention instance.

    Raises:
        ValueError: If no convention is registered under ``name``.
    """
    try:
        return CONVENTIONS[name.strip().lower()]()
    except KeyError:
        available = sorted(CONVENTIONS)
        raise ValueError(
            f"Unknown naming convention: {name}. Available conventions: {available}"
        ) from None


__all__ = [
    "NamingConvention",
    "RubyNamingConvention",
    "CSharpNamingConvention",
    "CONVENTIONS",
    "get_naming_convention",
    "set_naming_convention",
    "convention_from_name",
]
