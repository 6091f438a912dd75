"""Runtime evaluation layer: drops, contexts, conditions and filters.

- context: variable scopes and expression resolution
- drops: duck-typed member resolution for host objects
- operators: operator registry and comparison semantics
- conditions: condition chains
- filter_info / strainer: filter registry, overload resolution, invocation
- registries: snapshot/restore of the global tables
"""
from __future__ import annotations

from .context import Context
from .drops import Drop, DropProxy, LegacyKeyValueDrop, SupportsDrop, is_drop
from .expressions import BLANK, EMPTY
from .operators import (
    find_operator,
    register_operator,
    registered_operators,
    unregister_operator,
)
from .conditions import Combinator, Condition, ElseCondition, evaluate_condition
from .filter_info import FilterInfo
from .strainer import (
    Strainer,
    create_filter_registry,
    register_filter_function,
    register_filter_provider,
    unregister_filter_function,
    unregister_filter_provider,
)
from .filters_loader import load_filter_modules
from .registries import (
    REGISTRY_LOCK,
    isolated_registries,
    restore_registries,
    snapshot_registries,
)

__all__ = [
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
]
