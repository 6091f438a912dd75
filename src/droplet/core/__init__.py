"""Core droplet modules: naming, syntax levels, errors, runtime and config."""
from __future__ import annotations

from .exceptions import (
    ArgumentConversionError,
    ConfigError,
    ContextError,
    DropletError,
    InvalidComparisonError,
    MissingDefaultValueError,
    UnknownFilterError,
    UnknownOperatorError,
)
from .naming import (
    CSharpNamingConvention,
    NamingConvention,
    RubyNamingConvention,
    get_naming_convention,
    set_naming_convention,
)
from .syntax import (
    SyntaxCompatibility,
    get_default_syntax_compatibility,
    set_default_syntax_compatibility,
)

__all__ = [
    "DropletError",
    "UnknownOperatorError",
    "UnknownFilterError",
    "MissingDefaultValueError",
    "ArgumentConversionError",
    "InvalidComparisonError",
    "ContextError",
    "ConfigError",
    "NamingConvention",
    "RubyNamingConvention",
    "CSharpNamingConvention",
    "get_naming_convention",
    "set_naming_convention",
    "SyntaxCompatibility",
    "get_default_syntax_compatibility",
    "set_default_syntax_compatibility",
]
