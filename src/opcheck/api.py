"""Public check functions.

Examples:
>>> from opcheck import check
>>> check("len(items) > 0")
>>> check("response.status == 200", "unexpected response: {}", response.text)
>>> check("None = cache.get(key)")

The expression is evaluated in the caller's frame. Each operand is
evaluated exactly once, and the message is only formatted after the
check has failed.
"""

from __future__ import annotations

import inspect
from functools import partial, partialmethod
from types import FrameType
from typing import Any, Callable

from opcheck.config import get_config
from opcheck.dispatch import compile_check
from opcheck.errors import MalformedCheckError
from opcheck.evaluator import OperandRecord, compare
from opcheck.kinds import AssertionKind
from opcheck.patterns import compile_pattern, match_value
from opcheck.report import make_message

Message = str | Callable[..., Any] | None


def _location(frame: FrameType) -> tuple[str, int]:
    return frame.f_code.co_filename, frame.f_lineno


def _run_in_frame(expression: str, message: Message, args: tuple[Any, ...], frame: FrameType) -> None:
    __tracebackhide__ = True
    compiled = compile_check(expression)
    custom = make_message(message, args)
    compiled.run(frame.f_globals, frame.f_locals, message=custom, location=_location(frame))


def check(expression: str, message: Message = None, /, *args: Any) -> None:
    """Check ``expression`` and raise AssertionFailure if it is false.

    Args:
        expression: ``"<lhs> <op> <rhs>"`` with ``<op>`` one of ``==``,
            ``!=``, ``>``, ``<``, ``>=``, ``<=``, or ``"<pattern> = <rhs>"``.
        message: Optional ``str.format`` template, or a callable that
            returns the message. Only used if the check fails.
        *args: Arguments for ``message``.

    Raises:
        AssertionFailure: The comparison or pattern match is false.
        MalformedCheckError: ``expression`` cannot be dispatched. Nothing
            has been evaluated when this is raised.
    """
    __tracebackhide__ = True
    frame = inspect.currentframe().f_back
    try:
        _run_in_frame(expression, message, args, frame)
    finally:
        del frame


def debug_check(expression: str, message: Message = None, /, *args: Any) -> None:
    """Same as ``check``, but only when debug checks are enabled.

    The expression is always validated, so a malformed check is rejected
    in every configuration. When ``get_config().debug_checks`` is false
    nothing is evaluated and the message is untouched.
    """
    __tracebackhide__ = True
    compile_check(expression)
    if not get_config().debug_checks:
        return

    frame = inspect.currentframe().f_back
    try:
        _run_in_frame(expression, message, args, frame)
    finally:
        del frame


def _comparison_kind(kind: AssertionKind | str) -> AssertionKind:
    if not isinstance(kind, AssertionKind):
        kind = AssertionKind.from_symbol(kind)
    if kind is AssertionKind.PATTERN_MATCH:
        raise MalformedCheckError("Use check_matches() for pattern checks")
    return kind


def check_values(
    kind: AssertionKind | str,
    lhs: Any,
    rhs: Any,
    *,
    lhs_label: str | None = None,
    rhs_label: str | None = None,
    message: Message = None,
    args: tuple[Any, ...] = (),
) -> None:
    """Compare two already-evaluated values.

    Labels default to the values' ``repr``.

    Examples:
    >>> check_values(">", retries, 0, lhs_label="retries")
    """
    __tracebackhide__ = True
    kind = _comparison_kind(kind)
    frame = inspect.currentframe().f_back
    try:
        location = _location(frame)
    finally:
        del frame

    compare(
        kind,
        OperandRecord(repr(lhs) if lhs_label is None else lhs_label, lhs),
        OperandRecord(repr(rhs) if rhs_label is None else rhs_label, rhs),
        message=make_message(message, args),
        location=location,
    )


def check_matches(
    value: Any,
    pattern: str,
    predicate: Callable[[Any], bool] | None = None,
    *,
    label: str | None = None,
    message: Message = None,
    args: tuple[Any, ...] = (),
) -> None:
    """Check the shape of an already-evaluated value.

    Without ``predicate``, ``pattern`` is a ``case`` pattern resolved in
    the caller's namespace. With ``predicate``, ``pattern`` is only the
    label shown in the report.

    Examples:
    >>> check_matches(result, "None")
    >>> check_matches(result, "Present", lambda v: v is not None, label="result")
    """
    __tracebackhide__ = True
    frame = inspect.currentframe().f_back
    try:
        if predicate is None:
            compiled = compile_pattern(pattern)
            namespace = {**frame.f_globals, **frame.f_locals}
            predicate = partial(compiled.matches, globals=namespace)
        location = _location(frame)
    finally:
        del frame

    match_value(
        pattern,
        OperandRecord(repr(value) if label is None else label, value),
        predicate,
        message=make_message(message, args),
        location=location,
    )


class Subject:
    """Explicitly labelled checks on one value.

    Every method returns the subject on success, so checks chain.

    Examples:
    >>> that(port, "port").is_greater_than(0).is_at_most(65535, "MAX_PORT")
    """

    def __init__(self, value: Any, label: str | None = None):
        self.record = OperandRecord(repr(value) if label is None else label, value)

    @property
    def value(self) -> Any:
        return self.record.value

    def _compare(self, kind, other, label=None, message=None, *args):
        __tracebackhide__ = True
        frame = inspect.currentframe().f_back
        try:
            location = _location(frame)
        finally:
            del frame
        compare(
            kind,
            self.record,
            OperandRecord(repr(other) if label is None else label, other),
            message=make_message(message, args),
            location=location,
        )
        return self

    is_equal_to = partialmethod(_compare, AssertionKind.EQUAL)
    is_not_equal_to = partialmethod(_compare, AssertionKind.NOT_EQUAL)
    is_greater_than = partialmethod(_compare, AssertionKind.GREATER_THAN)
    is_less_than = partialmethod(_compare, AssertionKind.LESS_THAN)
    is_at_least = partialmethod(_compare, AssertionKind.GREATER_OR_EQUAL)
    is_at_most = partialmethod(_compare, AssertionKind.LESS_OR_EQUAL)

    def matches(self, pattern_label: str, predicate: Callable[[Any], bool], message=None, *args):
        __tracebackhide__ = True
        frame = inspect.currentframe().f_back
        try:
            location = _location(frame)
        finally:
            del frame
        match_value(pattern_label, self.record, predicate, message=make_message(message, args), location=location)
        return self


def that(value: Any, label: str | None = None) -> Subject:
    return Subject(value, label)
