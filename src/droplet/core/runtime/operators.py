"""Operator registry and the built-in comparison semantics.

Operators are binary predicates ``(left, right) -> bool`` kept in a
process-wide mutable table keyed by the name they were registered under.
Tokens from template source are matched against registered names through
the render's naming convention (see ``find_operator``).

The table is not synchronized. Register operators before rendering starts
or hold ``REGISTRY_LOCK`` around mutation.
"""
from __future__ import annotations

import logging
import operator as _op
from collections.abc import Hashable, Mapping, Sequence, Set
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Optional, Tuple

from ..exceptions import InvalidComparisonError, UnknownOperatorError
from ..naming import NamingConvention
from .expressions import Symbol

logger = logging.getLogger(__name__)

Predicate = Callable[[Any, Any], bool]

_SCALARS = (bool, int, float, Decimal, str)


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _is_scalar(value: Any) -> bool:
    return isinstance(value, _SCALARS)


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # repr round-trips, so 4.333 compares as Decimal("4.333")
        return Decimal(repr(value))
    return Decimal(value)


def numeric_equal(left: Any, right: Any) -> bool:
    return _to_decimal(left) == _to_decimal(right)


def convert_scalar(value: Any, target: type) -> Tuple[bool, Any]:
    """Try converting a scalar to ``target``; return ``(converted?, value)``."""
    if isinstance(value, target) and not (target is int and isinstance(value, bool)):
        return True, value
    try:
        if target is bool:
            if isinstance(value, str) and value.strip().lower() in ("true", "false"):
                return True, value.strip().lower() == "true"
            return False, value
        if target is str:
            if isinstance(value, bool):
                return True, "true" if value else "false"
            return True, str(value)
        if isinstance(value, bool):
            return False, value
        if target is int:
            if isinstance(value, str):
                return True, int(value.strip())
            if is_number(value) and _to_decimal(value) == int(value):
                return True, int(value)
            return False, value
        if target is float:
            return True, float(value)
        if target is Decimal:
            return True, _to_decimal(value) if is_number(value) else Decimal(value.strip())
    except (ValueError, TypeError, ArithmeticError, InvalidOperation):
        return False, value
    return False, value


def equal_variables(left: Any, right: Any) -> bool:
    """General equality used by ``==``, ``!=`` and element tests.

    Numbers compare by value, mismatched scalars convert the right side to
    the left side's type, everything else uses Python's equality protocol
    (left operand first, then the reflected right operand).
    """
    if isinstance(left, Symbol):
        return left.matches(right)
    if isinstance(right, Symbol):
        return right.matches(left)
    if left is None or right is None:
        return left is None and right is None
    if is_number(left) and is_number(right):
        return numeric_equal(left, right)
    if type(left) is not type(right) and _is_scalar(left) and _is_scalar(right):
        converted, right = convert_scalar(right, type(left))
        if not converted:
            return False
        if is_number(left):
            return numeric_equal(left, right)
    return bool(left == right)


def element_equal(element: Any, value: Any) -> bool:
    """Equality under the element's own type, used by ``contains``.

    A boolean only matches a boolean, a string only a string, a number only a
    number; other objects decide through their own ``__eq__``.
    """
    if element is None:
        return value is None
    if isinstance(element, bool):
        return isinstance(value, bool) and element is value
    if is_number(element):
        return is_number(value) and numeric_equal(element, value)
    if isinstance(element, str):
        return isinstance(value, str) and element == value
    return bool(element == value)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (Sequence, Set, range)) and not isinstance(
        value, (str, bytes, bytearray)
    )


def _compare(left: Any, right: Any, compare: Callable[[Any, Any], bool]) -> bool:
    if left is None or right is None:
        return False
    if is_number(left) and is_number(right):
        operands = (_to_decimal(left), _to_decimal(right))
    else:
        if type(left) is not type(right) and _is_scalar(left) and _is_scalar(right):
            converted, candidate = convert_scalar(right, type(left))
            if not converted:
                raise InvalidComparisonError(left, right)
            right = candidate
        operands = (left, right)
    try:
        return bool(compare(*operands))
    except (TypeError, InvalidOperation) as exc:
        # NaN has no ordering
        raise InvalidComparisonError(left, right) from exc


def contains(left: Any, right: Any) -> bool:
    if left is None or right is None:
        return False
    if isinstance(left, str):
        if is_number(right):
            right = str(right)
        return isinstance(right, str) and right in left
    if isinstance(left, Mapping):
        return isinstance(right, Hashable) and right in left
    if _is_sequence(left):
        return any(element_equal(element, right) for element in left)
    return False


def starts_with(left: Any, right: Any) -> bool:
    if left is None or right is None:
        return False
    if isinstance(left, str):
        return isinstance(right, str) and left.startswith(right)
    if isinstance(left, Sequence) and not isinstance(left, (bytes, bytearray)) and len(left) > 0:
        return equal_variables(left[0], right)
    return False


def ends_with(left: Any, right: Any) -> bool:
    if left is None or right is None:
        return False
    if isinstance(left, str):
        return isinstance(right, str) and left.endswith(right)
    if isinstance(left, Sequence) and not isinstance(left, (bytes, bytearray)) and len(left) > 0:
        return equal_variables(left[-1], right)
    return False


def has_key(left: Any, right: Any) -> bool:
    if not isinstance(left, Mapping) or right is None:
        return False
    return isinstance(right, Hashable) and right in left


def has_value(left: Any, right: Any) -> bool:
    if not isinstance(left, Mapping) or right is None:
        return False
    return any(element_equal(value, right) for value in left.values())


DEFAULT_OPERATORS: Dict[str, Predicate] = {
    "==": equal_variables,
    "!=": lambda left, right: not equal_variables(left, right),
    "<>": lambda left, right: not equal_variables(left, right),
    "<": lambda left, right: _compare(left, right, _op.lt),
    ">": lambda left, right: _compare(left, right, _op.gt),
    "<=": lambda left, right: _compare(left, right, _op.le),
    ">=": lambda left, right: _compare(left, right, _op.ge),
    "contains": contains,
    "startsWith": starts_with,
    "endsWith": ends_with,
    "hasKey": has_key,
    "hasValue": has_value,
}

operators: Dict[str, Predicate] = dict(DEFAULT_OPERATORS)


def register_operator(name: str, predicate: Predicate) -> None:
    """Register (or replace) the operator ``name``."""
    if not name:
        raise ValueError("Operator name must not be empty")
    operators[name] = predicate
    logger.debug("Registered operator %s", name)


def unregister_operator(name: str) -> Optional[Predicate]:
    """Remove the operator ``name``; return its predicate if it existed."""
    predicate = operators.pop(name, None)
    if predicate is not None:
        logger.debug("Unregistered operator %s", name)
    return predicate


def registered_operators() -> Dict[str, Predicate]:
    """Return a snapshot of the operator table."""
    return dict(operators)


def restore_operators(snapshot: Mapping[str, Predicate]) -> None:
    """Replace the operator table with a ``registered_operators()`` snapshot."""
    operators.clear()
    operators.update(snapshot)


def find_operator(token: str, convention: NamingConvention) -> Predicate:
    """Return the predicate ``token`` spells under ``convention``.

    A registered key matches when the token equals the key, the lower-cased
    key, or the key as the convention spells operators.
    """
    for key, predicate in operators.items():
        if key == token or key.lower() == token or convention.operator_equals(key, token):
            return predicate
    raise UnknownOperatorError(token)


__all__ = [
    "Predicate",
    "DEFAULT_OPERATORS",
    "operators",
    "register_operator",
    "unregister_operator",
    "registered_operators",
    "restore_operators",
    "find_operator",
    "equal_variables",
    "element_equal",
    "convert_scalar",
    "numeric_equal",
    "is_number",
    "contains",
    "starts_with",
    "ends_with",
    "has_key",
    "has_value",
]
