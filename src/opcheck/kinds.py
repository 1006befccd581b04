"""Assertion kinds and the comparisons behind them."""

from __future__ import annotations

import operator
from enum import Enum
from typing import Any

from opcheck.errors import MalformedCheckError


class AssertionKind(str, Enum):
    EQUAL = "=="
    NOT_EQUAL = "!="
    GREATER_THAN = ">"
    LESS_THAN = "<"
    GREATER_OR_EQUAL = ">="
    LESS_OR_EQUAL = "<="
    PATTERN_MATCH = "="

    @property
    def symbol(self) -> str:
        return self.value

    @classmethod
    def from_symbol(cls, symbol: str) -> AssertionKind:
        """Map a written operator to its kind.

        Raises MalformedCheckError for anything outside the fixed set.
        """
        try:
            return cls(symbol)
        except ValueError:
            supported = ", ".join(k.value for k in cls)
            raise MalformedCheckError(
                f"Unsupported operator '{symbol}' (expected one of: {supported})"
            ) from None

    def compare(self, lhs: Any, rhs: Any) -> bool:
        """Apply the operands' own comparison for this kind."""
        if self is AssertionKind.PATTERN_MATCH:
            raise TypeError("PATTERN_MATCH is not a binary comparison")
        return bool(_COMPARATORS[self](lhs, rhs))


_COMPARATORS = {
    AssertionKind.EQUAL: operator.eq,
    AssertionKind.NOT_EQUAL: operator.ne,
    AssertionKind.GREATER_THAN: operator.gt,
    AssertionKind.LESS_THAN: operator.lt,
    AssertionKind.GREATER_OR_EQUAL: operator.ge,
    AssertionKind.LESS_OR_EQUAL: operator.le,
}
