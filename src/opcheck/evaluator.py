"""Operand binding and comparison."""

from __future__ import annotations

from dataclasses import dataclass
from types import CodeType
from typing import Any

from opcheck.kinds import AssertionKind
from opcheck.report import CustomMessage, FailureContext, fail


@dataclass(frozen=True)
class OperandRecord:
    """One evaluated operand and the text it was written as."""

    label: str
    value: Any

    def debug_text(self) -> str:
        return repr(self.value)


def evaluate_operand(label: str, code: CodeType, namespace: dict[str, Any]) -> OperandRecord:
    """Evaluate one compiled operand in ``namespace``.

    ``namespace`` serves as globals so comprehensions and generator
    expressions in the operand see the caller's locals too.
    """
    return OperandRecord(label, eval(code, namespace))


def compare(
    kind: AssertionKind,
    lhs: OperandRecord,
    rhs: OperandRecord,
    message: CustomMessage | None = None,
    location: tuple[str, int] | None = None,
) -> None:
    """Return if ``lhs <kind> rhs`` holds, otherwise report the failure.

    Errors raised by the operands' own comparison methods propagate
    unchanged.
    """
    if kind.compare(lhs.value, rhs.value):
        return

    fail(
        FailureContext(
            kind=kind,
            lhs_label=lhs.label,
            rhs_label=rhs.label,
            lhs_debug=lhs.debug_text(),
            rhs_debug=rhs.debug_text(),
            message=message,
            location=location,
        )
    )
