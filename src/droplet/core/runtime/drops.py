"""Drops: host objects exposing computed, name-addressable members.

Anything with ``contains_key(name)`` and ``resolve(name)`` is a drop
(``SupportsDrop``). ``Drop`` is the base class for host objects; its public
properties, attributes and zero-argument methods become template members:

    class ProductDrop(Drop):
        def __init__(self, product):
            self._product = product

        @property
        def title(self) -> str:
            return self._product.title

        def price_with_tax(self) -> float:
            return self._product.price * 1.2

Members are discovered once per concrete type and naming convention.
"""
from __future__ import annotations

import inspect
import logging
from collections.abc import Mapping
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    Iterable,
    Optional,
    Protocol,
    Tuple,
    runtime_checkable,
)

from ..naming import NamingConvention, get_naming_convention

if TYPE_CHECKING:
    from .context import Context

logger = logging.getLogger(__name__)


@runtime_checkable
class SupportsDrop(Protocol):
    """Capability interface for duck-typed member resolution."""

    def contains_key(self, name: Any) -> bool: ...

    def resolve(self, name: Any) -> Any: ...


def is_drop(value: Any) -> bool:
    return not isinstance(value, type) and isinstance(value, SupportsDrop)


# (drop type, convention name) -> {lookup key: attribute name}
_MEMBER_CACHE: Dict[Tuple[type, str], Dict[str, str]] = {}


def _is_zero_arg_method(func: Any) -> bool:
    try:
        params = list(inspect.signature(func).parameters.values())[1:]
    except (TypeError, ValueError):
        return False
    return all(
        p.default is not inspect.Parameter.empty
        or p.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        for p in params
    )


def drop_members(drop_type: type, convention: NamingConvention) -> Dict[str, str]:
    """Return the member table of a drop type, computing it on first use."""
    cache_key = (drop_type, convention.name)
    members = _MEMBER_CACHE.get(cache_key)
    if members is not None:
        return members

    reserved = set(dir(Drop))
    members = {}
    for attr in dir(drop_type):
        if attr.startswith("_") or attr in reserved:
            continue
        raw = inspect.getattr_static(drop_type, attr)
        if isinstance(raw, (staticmethod, classmethod, type)):
            continue
        if inspect.isfunction(raw) and not _is_zero_arg_method(raw):
            continue
        key = convention.lookup_key(convention.get_member_name(attr))
        members.setdefault(key, attr)

    _MEMBER_CACHE[cache_key] = members
    logger.debug("Cached %d drop members for %s", len(members), drop_type.__qualname__)
    return members


def clear_member_cache() -> None:
    _MEMBER_CACHE.clear()


class Drop:
    """Base class for objects exposed to templates through computed members."""

    context: Optional["Context"] = None

    def _convention(self) -> NamingConvention:
        if self.context is not None:
            return self.context.naming_convention
        return get_naming_convention()

    def _member_attribute(self, name: Any) -> Optional[str]:
        convention = self._convention()
        key = convention.lookup_key(str(name))
        attr = drop_members(type(self), convention).get(key)
        if attr is not None:
            return attr
        # Public instance attributes assigned in __init__
        for instance_attr in vars(self):
            if instance_attr.startswith("_") or instance_attr == "context":
                continue
            if convention.lookup_key(convention.get_member_name(instance_attr)) == key:
                return instance_attr
        return None

    def contains_key(self, name: Any) -> bool:
        return self._member_attribute(name) is not None

    def resolve(self, name: Any) -> Any:
        attr = self._member_attribute(name)
        if attr is None:
            return self.before_method(str(name))
        value = getattr(self, attr)
        if inspect.ismethod(value):
            return value()
        return value

    def before_method(self, method: str) -> Any:
        """Catch-all for members the drop does not declare."""
        return None

    def to_liquid(self) -> "Drop":
        return self


class DropProxy(Drop):
    """Expose selected attributes of an arbitrary host object as a drop."""

    def __init__(self, obj: Any, allowed_members: Iterable[str]) -> None:
        self._obj = obj
        self._allowed = tuple(allowed_members)

    def _lookup(self, name: Any) -> Optional[str]:
        convention = self._convention()
        key = convention.lookup_key(str(name))
        for member in self._allowed:
            if convention.lookup_key(convention.get_member_name(member)) == key:
                return member
        return None

    def contains_key(self, name: Any) -> bool:
        return self._lookup(name) is not None

    def resolve(self, name: Any) -> Any:
        member = self._lookup(name)
        if member is None:
            return self.before_method(str(name))
        value = getattr(self._obj, member, None)
        if inspect.ismethod(value) and _is_zero_arg_method(value.__func__):
            return value()
        return value


def _is_position(name: Any, position: int) -> bool:
    if isinstance(name, bool):
        return False
    if isinstance(name, int):
        return name == position
    return str(name).strip() == str(position)


class LegacyKeyValueDrop(Drop):
    """A map entry seen as a drop.

    ``Key``/``itemName``/``0`` give the key, ``Value``/``1`` the value, and
    when the value is itself a mapping its keys are reachable directly.
    """

    def __init__(self, key: Any, value: Any) -> None:
        self._key = key
        self._value = value

    def _is_key_member(self, name: Any) -> bool:
        return _is_position(name, 0) or name == "Key" or name == "itemName"

    def _is_value_member(self, name: Any) -> bool:
        return _is_position(name, 1) or name == "Value"

    def contains_key(self, name: Any) -> bool:
        return (
            self._is_key_member(name)
            or self._is_value_member(name)
            or (isinstance(self._value, Mapping) and name in self._value)
        )

    def resolve(self, name: Any) -> Any:
        return self.before_method(name)

    def before_method(self, method: Any) -> Any:
        if self._is_key_member(method):
            return self._key
        if self._is_value_member(method):
            return self._value
        if isinstance(self._value, Mapping) and method in self._value:
            return self._value[method]
        return None

    def __repr__(self) -> str:
        return f"LegacyKeyValueDrop({self._key!r}, {self._value!r})"


__all__ = [
    "SupportsDrop",
    "Drop",
    "DropProxy",
    "LegacyKeyValueDrop",
    "is_drop",
    "drop_members",
    "clear_member_cache",
]
