"""Snapshot and restore of the process-wide runtime tables.

The operator table, filter tables, default naming convention and default
syntax compatibility level are shared by every render and carry no locking.
Code that mutates them while other threads may render (typically tests)
serializes through ``REGISTRY_LOCK`` and restores what it changed:

    with REGISTRY_LOCK:
        saved = snapshot_registries()
        try:
            register_operator("IsMultipleOf", lambda a, b: a % b == 0)
            ...
        finally:
            restore_registries(saved)
"""
from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, Tuple

from ..naming import NamingConvention, get_naming_convention, set_naming_convention
from ..syntax import (
    SyntaxCompatibility,
    get_default_syntax_compatibility,
    set_default_syntax_compatibility,
)
from .operators import Predicate, registered_operators, restore_operators
from .strainer import registered_filters, restore_filters

REGISTRY_LOCK = threading.RLock()


@dataclass(frozen=True)
class RegistrySnapshot:
    operators: Dict[str, Predicate]
    filters: Tuple[Dict[str, Any], Dict[str, Tuple[Any, Callable[..., Any]]]]
    naming_convention: NamingConvention
    syntax_compatibility: SyntaxCompatibility


def snapshot_registries() -> RegistrySnapshot:
    return RegistrySnapshot(
        operators=registered_operators(),
        filters=registered_filters(),
        naming_convention=get_naming_convention(),
        syntax_compatibility=get_default_syntax_compatibility(),
    )


def restore_registries(snapshot: RegistrySnapshot) -> None:
    restore_operators(snapshot.operators)
    restore_filters(snapshot.filters)
    set_naming_convention(snapshot.naming_convention)
    set_default_syntax_compatibility(snapshot.syntax_compatibility)


@contextmanager
def isolated_registries() -> Iterator[RegistrySnapshot]:
    """Hold ``REGISTRY_LOCK`` and undo every registry change on exit."""
    with REGISTRY_LOCK:
        saved = snapshot_registries()
        try:
            yield saved
        finally:
            restore_registries(saved)


__all__ = [
    "REGISTRY_LOCK",
    "RegistrySnapshot",
    "snapshot_registries",
    "restore_registries",
    "isolated_registries",
]
