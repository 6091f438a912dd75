"""Descriptors for Python callables exposed as template filters.

Parameter roles are read from the signature:

- a leading parameter annotated ``Context`` receives the live render context
  and is never supplied from the template;
- positional parameters are the filter's ordered parameters;
- keyword-only parameters are named parameters, bound from ``name: value``
  arguments in template source.

    def truncate(input: str, length: int = 50, *, ellipsis: str = "...") -> str:
        ...

has two ordered parameters and the named parameter ``ellipsis``.
"""
from __future__ import annotations

import inspect
import types
import typing
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional

from ..naming import NamingConvention

_KEYWORD_ONLY = inspect.Parameter.KEYWORD_ONLY
_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


def _is_context_annotation(annotation: Any) -> bool:
    from .context import Context

    if annotation is Context:
        return True
    return isinstance(annotation, str) and annotation.rsplit(".", 1)[-1] == "Context"


class FilterInfo:
    """A callable plus the signature facts overload resolution needs."""

    def __init__(self, function: Callable[..., Any], name: Optional[str] = None) -> None:
        self.function = function
        self.name = name or getattr(function, "__name__", repr(function))
        try:
            signature = inspect.signature(function)
        except (TypeError, ValueError) as exc:
            raise TypeError(f"Cannot use {function!r} as a filter: {exc}") from exc

        self.parameters: List[inspect.Parameter] = [
            p for p in signature.parameters.values() if p.kind not in _VARIADIC
        ]
        self.hints = self._resolve_hints(function)
        self.takes_context = bool(self.parameters) and _is_context_annotation(
            self.hints.get(self.parameters[0].name, self.parameters[0].annotation)
        )
        self.named_parameters: FrozenSet[str] = frozenset(
            p.name for p in self.parameters if p.kind is _KEYWORD_ONLY
        )
        offset = 1 if self.takes_context else 0
        self.ordered_parameter_count = len(self.parameters) - offset - len(self.named_parameters)

    @staticmethod
    def _resolve_hints(function: Callable[..., Any]) -> Dict[str, Any]:
        try:
            return typing.get_type_hints(function)
        except Exception:
            # Unresolvable forward references: fall back to raw annotations
            return dict(getattr(function, "__annotations__", {}) or {})

    @property
    def parameter_count(self) -> int:
        return len(self.parameters)

    def canonical_name(self, convention: NamingConvention) -> str:
        return convention.get_member_name(self.name)

    def named_keys(self, convention: NamingConvention) -> FrozenSet[str]:
        return frozenset(
            convention.lookup_key(convention.get_member_name(name)) for name in self.named_parameters
        )

    def is_count_and_named_match(
        self,
        ordered_count: int,
        named_keys: Iterable[str],
        convention: NamingConvention,
    ) -> bool:
        """True when the call's positional count and named set fit exactly."""
        if ordered_count != self.ordered_parameter_count:
            return False
        expected = frozenset(named_keys)
        own = self.named_keys(convention)
        if not expected:
            return not own
        return len(expected) == len(own) and len(own & expected) == len(own)

    def same_signature(self, other: "FilterInfo", convention: NamingConvention) -> bool:
        return self.is_count_and_named_match(
            other.ordered_parameter_count, other.named_keys(convention), convention
        )

    def __repr__(self) -> str:
        return (
            f"FilterInfo({self.name!r}, ordered={self.ordered_parameter_count}, "
            f"named={sorted(self.named_parameters)}, context={self.takes_context})"
        )


def bind_target(function: Callable[..., Any], target: Any = None) -> Callable[..., Any]:
    """Bind ``function`` to ``target`` unless there is no target or it is bound."""
    if target is None or inspect.ismethod(function):
        return function
    return types.MethodType(function, target)


__all__ = ["FilterInfo", "bind_target"]
