"""droplet: a sandboxed Liquid template runtime.

Host objects are exposed through drops, conditions are evaluated through a
pluggable operator registry, and filters are dispatched through a Strainer
with overload resolution.
"""
from __future__ import annotations

__version__ = "0.1.0"

from .core.config import ConfigManager, RuntimeSettings, apply_settings, configure
from .core.exceptions import (
    ArgumentConversionError,
    ConfigError,
    ContextError,
    DropletError,
    InvalidComparisonError,
    MissingDefaultValueError,
    UnknownFilterError,
    UnknownOperatorError,
)
from .core.naming import (
    CSharpNamingConvention,
    NamingConvention,
    RubyNamingConvention,
    get_naming_convention,
    set_naming_convention,
)
from .core.runtime import (
    BLANK,
    EMPTY,
    REGISTRY_LOCK,
    Combinator,
    Condition,
    Context,
    Drop,
    DropProxy,
    ElseCondition,
    FilterInfo,
    LegacyKeyValueDrop,
    Strainer,
    SupportsDrop,
    create_filter_registry,
    evaluate_condition,
    find_operator,
    is_drop,
    isolated_registries,
    load_filter_modules,
    register_filter_function,
    register_filter_provider,
    register_operator,
    registered_operators,
    restore_registries,
    snapshot_registries,
    unregister_filter_function,
    unregister_filter_provider,
    unregister_operator,
)
from .core.syntax import (
    SyntaxCompatibility,
    get_default_syntax_compatibility,
    set_default_syntax_compatibility,
)

__all__ = [
    "__version__",
    # Errors
    "DropletError",
    "UnknownOperatorError",
    "UnknownFilterError",
    "MissingDefaultValueError",
    "ArgumentConversionError",
    "InvalidComparisonError",
    "ContextError",
    "ConfigError",
    # Naming & syntax
    "NamingConvention",
    "RubyNamingConvention",
    "CSharpNamingConvention",
    "get_naming_convention",
    "set_naming_convention",
    "SyntaxCompatibility",
    "get_default_syntax_compatibility",
    "set_default_syntax_compatibility",
    # Context & drops
    "Context",
    "Drop",
    "DropProxy",
    "LegacyKeyValueDrop",
    "SupportsDrop",
    "is_drop",
    "EMPTY",
    "BLANK",
    # Conditions
    "Combinator",
    "Condition",
    "ElseCondition",
    "evaluate_condition",
    "find_operator",
    "register_operator",
    "unregister_operator",
    "registered_operators",
    # Filters
    "FilterInfo",
    "Strainer",
    "create_filter_registry",
    "register_filter_provider",
    "register_filter_function",
    "unregister_filter_provider",
    "unregister_filter_function",
    "load_filter_modules",
    # Registries
    "REGISTRY_LOCK",
    "isolated_registries",
    "snapshot_registries",
    "restore_registries",
    # Configuration
    "ConfigManager",
    "RuntimeSettings",
    "apply_settings",
    "configure",
]
