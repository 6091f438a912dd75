"""Render context: variable scopes and expression resolution.

A Context is created per render. It carries the naming convention and syntax
compatibility level in effect for that render, so evaluation never reads the
process-wide defaults once the render has started.
"""
from __future__ import annotations

from collections.abc import Hashable, Mapping, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional

from ..exceptions import ContextError
from ..naming import NamingConvention, get_naming_convention
from ..syntax import SyntaxCompatibility, get_default_syntax_compatibility
from .drops import Drop, LegacyKeyValueDrop, is_drop
from .expressions import is_undefined, parse_literal, parse_range, split_path

if TYPE_CHECKING:
    from .strainer import Strainer


PSEUDO_MEMBERS = ("size", "first", "last")


class Context:
    """Variable scope chain plus drop resolution for one render."""

    def __init__(
        self,
        environments: Optional[List[Dict[str, Any]]] = None,
        outer_scope: Optional[Dict[str, Any]] = None,
        registers: Optional[Dict[str, Any]] = None,
        *,
        naming_convention: Optional[NamingConvention] = None,
        syntax_compatibility: Optional[SyntaxCompatibility] = None,
    ) -> None:
        self.environments: List[Dict[str, Any]] = list(environments or [])
        self.scopes: List[Dict[str, Any]] = [dict(outer_scope or {})]
        self.registers: Dict[str, Any] = registers if registers is not None else {}
        self.naming_convention = naming_convention or get_naming_convention()
        self.syntax_compatibility = (
            syntax_compatibility
            if syntax_compatibility is not None
            else get_default_syntax_compatibility()
        )
        self._strainer: Optional["Strainer"] = None

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------
    @property
    def strainer(self) -> "Strainer":
        """Filter registry for this render, built on first use."""
        if self._strainer is None:
            from .strainer import Strainer

            self._strainer = Strainer.create(self)
        return self._strainer

    def invoke(
        self,
        method: str,
        args: Optional[List[Any]] = None,
        named_args: Optional[Dict[str, Any]] = None,
    ) -> Any:
        return self.strainer.invoke(method, list(args or []), named_args)

    # ------------------------------------------------------------------
    # Scopes
    # ------------------------------------------------------------------
    def push(self, scope: Optional[Dict[str, Any]] = None) -> None:
        self.scopes.insert(0, scope if scope is not None else {})

    def pop(self) -> Dict[str, Any]:
        if len(self.scopes) == 1:
            raise ContextError("Cannot pop the outermost context scope")
        return self.scopes.pop(0)

    @contextmanager
    def stack(self, scope: Optional[Dict[str, Any]] = None) -> Iterator["Context"]:
        self.push(scope)
        try:
            yield self
        finally:
            self.pop()

    def merge(self, values: Mapping[str, Any]) -> None:
        self.scopes[0].update(values)

    def __setitem__(self, key: str, value: Any) -> None:
        self.scopes[0][key] = value

    def __getitem__(self, expression: str) -> Any:
        return self.resolve(expression)

    def has_key(self, key: str) -> bool:
        return self.resolve(key) is not None

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------
    def resolve(self, expression: Any) -> Any:
        """Resolve a literal or variable path; undefined paths give None."""
        if not isinstance(expression, str):
            return expression

        literal = parse_literal(expression)
        if not is_undefined(literal):
            return literal

        bounds = parse_range(expression)
        if bounds is not None:
            start, stop = (_to_int(self.resolve(bound)) for bound in bounds)
            return range(start, stop + 1)

        return self.variable(expression)

    def variable(self, markup: str) -> Any:
        parts = split_path(markup)
        if not parts:
            return None

        first, bracketed = parts[0]
        name = self.resolve(first) if bracketed else first
        obj = self.find_variable(name)

        for part, bracketed in parts[1:]:
            key = self.resolve(part) if bracketed else part
            obj = self.lookup(obj, key, allow_pseudo=not bracketed)
            if obj is None:
                return None
        return obj

    def find_variable(self, key: Any) -> Any:
        if not isinstance(key, Hashable):
            return None
        for scope in self.scopes:
            if key in scope:
                return self._liquidize(scope[key])
        for environment in self.environments:
            if key in environment:
                return self._liquidize(environment[key])
        return None

    def lookup(self, obj: Any, key: Any, *, allow_pseudo: bool = True) -> Any:
        """Resolve one path segment against ``obj``.

        Order: container access, drop capability (declared members, then
        ``before_method``), size/first/last.
        """
        if obj is None or not isinstance(key, Hashable):
            return None

        if isinstance(obj, Mapping) and key in obj:
            return self._liquidize(obj[key])

        if _is_sequence(obj) and isinstance(key, int) and not isinstance(key, bool):
            if -len(obj) <= key < len(obj):
                return self._liquidize(obj[key])
            return None

        if is_drop(obj):
            self._bind(obj)
            if obj.contains_key(key):
                return self._liquidize(obj.resolve(key))
            if isinstance(obj, Drop):
                value = obj.before_method(str(key))
                if value is not None:
                    return self._liquidize(value)

        if allow_pseudo and key in PSEUDO_MEMBERS:
            return self._pseudo_member(obj, key)

        return None

    def _pseudo_member(self, obj: Any, key: str) -> Any:
        if key == "size":
            if isinstance(obj, (str, Mapping)) or _is_sequence(obj):
                return len(obj)
            return None
        if _is_sequence(obj) and len(obj) > 0:
            return self._liquidize(obj[0] if key == "first" else obj[-1])
        return None

    def _bind(self, value: Any) -> None:
        if isinstance(value, Drop):
            value.context = self

    def _liquidize(self, value: Any) -> Any:
        self._bind(value)
        return value

    def iterate_entries(self, mapping: Mapping[Any, Any]) -> Iterator[Any]:
        """Yield map entries in the form the compatibility level expects."""
        legacy = self.syntax_compatibility < SyntaxCompatibility.DOTLIQUID22
        for key, value in mapping.items():
            if legacy:
                drop = LegacyKeyValueDrop(key, value)
                drop.context = self
                yield drop
            else:
                yield (key, value)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (Sequence, range)) and not isinstance(value, (str, bytes, bytearray))


def _to_int(value: Any) -> int:
    """Range bound as an integer; undefined or non-numeric values count as 0."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        pass
    if isinstance(value, str):
        try:
            return int(float(value))
        except (ValueError, OverflowError):
            pass
    return 0


__all__ = ["Context", "PSEUDO_MEMBERS"]
