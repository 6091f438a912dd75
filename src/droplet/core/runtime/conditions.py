"""Condition nodes for ``if``/``unless``/``case`` style tags.

The parser builds a chain of conditions joined by ``and``/``or``:

    {% if a == 1 or b contains 'x' and c %}

becomes ``Condition("a", "==", "1")`` whose next link is ``or`` to
``Condition("b", "contains", "'x'")`` whose next link is ``and`` to
``Condition("c")``. The chain is folded strictly left to right with no
precedence between ``and`` and ``or``.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Iterator, Optional, Tuple

from .context import Context
from .operators import find_operator

logger = logging.getLogger(__name__)


class Combinator(str, Enum):
    AND = "and"
    OR = "or"


def is_truthy(value: Any) -> bool:
    """Liquid truthiness: only ``None`` and ``False`` are falsy."""
    return value is not None and value is not False


class Condition:
    """One comparison, optionally linked to the next condition in a chain."""

    def __init__(
        self,
        left: Optional[str] = None,
        operator: Optional[str] = None,
        right: Optional[str] = None,
    ) -> None:
        self.left = left
        self.operator = operator
        self.right = right
        self.child_relation: Optional[Combinator] = None
        self.child_condition: Optional["Condition"] = None
        self.attachment: Any = None

    def and_(self, condition: "Condition") -> "Condition":
        """Link ``condition`` with ``and``; returns it for further chaining."""
        return self._link(Combinator.AND, condition)

    def or_(self, condition: "Condition") -> "Condition":
        """Link ``condition`` with ``or``; returns it for further chaining."""
        return self._link(Combinator.OR, condition)

    def _link(self, relation: Combinator, condition: "Condition") -> "Condition":
        self.child_relation = relation
        self.child_condition = condition
        return condition

    def attach(self, attachment: Any) -> Any:
        self.attachment = attachment
        return attachment

    @property
    def is_else(self) -> bool:
        return False

    def chain(self) -> Iterator[Tuple[Optional[Combinator], "Condition"]]:
        """Yield ``(relation, node)`` pairs; the root has no relation."""
        relation: Optional[Combinator] = None
        node: Optional[Condition] = self
        while node is not None:
            yield relation, node
            relation, node = node.child_relation, node.child_condition

    def evaluate(self, context: Optional[Context] = None) -> bool:
        context = context if context is not None else Context()
        result = False
        for relation, node in self.chain():
            value = node.evaluate_self(context)
            if relation is None:
                result = value
            elif relation is Combinator.AND:
                result = result and value
            else:
                result = result or value
        return result

    def evaluate_self(self, context: Context) -> bool:
        """Evaluate this node alone, ignoring the rest of the chain."""
        left = context.resolve(self.left)
        if self.operator is None:
            return is_truthy(left)

        predicate = find_operator(self.operator, context.naming_convention)
        right = context.resolve(self.right)
        result = bool(predicate(left, right))
        logger.debug("%r %s %r -> %s", left, self.operator, right, result)
        return result

    def __repr__(self) -> str:
        parts = [repr(p) for p in (self.left, self.operator, self.right) if p is not None]
        return f"{self.__class__.__name__}({', '.join(parts)})"


class ElseCondition(Condition):
    """The ``else`` branch: always true."""

    @property
    def is_else(self) -> bool:
        return True

    def evaluate(self, context: Optional[Context] = None) -> bool:
        return True


def evaluate_condition(condition: Condition, context: Optional[Context] = None) -> bool:
    """Evaluate a condition chain; raises ``UnknownOperatorError`` on bad tokens."""
    return condition.evaluate(context)


__all__ = [
    "Combinator",
    "Condition",
    "ElseCondition",
    "evaluate_condition",
    "is_truthy",
]
