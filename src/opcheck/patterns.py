"""Structural pattern checks.

A pattern check tests the shape of a single value instead of comparing
two values. Patterns use the ``case`` syntax of the ``match`` statement:

    check("None = result")
    check("Point(x=0) = origin")
    check("[_, _, *rest] = items")
    check("{'status': 'ok'} = response")

Names inside the pattern (``Point``, ``Color.RED``) resolve in the
caller's namespace. Capture names bind in a scratch namespace and are
discarded.
"""

from __future__ import annotations

import ast
import logging
from dataclasses import dataclass
from types import CodeType
from typing import Any, Callable, Mapping

from opcheck.errors import MalformedCheckError
from opcheck.evaluator import OperandRecord
from opcheck.kinds import AssertionKind
from opcheck.report import CustomMessage, FailureContext, fail

logger = logging.getLogger(__name__)

_SUBJECT = "__opcheck_subject__"
_MATCHED = "__opcheck_matched__"


@dataclass(frozen=True)
class CompiledPattern:
    source: str
    code: CodeType

    def matches(
        self,
        value: Any,
        globals: dict[str, Any] | None = None,
        locals: Mapping[str, Any] | None = None,
    ) -> bool:
        namespace = dict(locals or {})
        namespace[_SUBJECT] = value
        exec(self.code, {} if globals is None else globals, namespace)
        return namespace[_MATCHED]


def _is_single_case(tree: ast.Module) -> bool:
    if len(tree.body) != 2 or not isinstance(tree.body[1], ast.Match):
        return False
    cases = tree.body[1].cases
    return len(cases) == 1 and cases[0].guard is None and len(cases[0].body) == 1


def compile_pattern(source: str) -> CompiledPattern:
    """Validate and compile a ``case`` pattern.

    Raises MalformedCheckError if ``source`` is not exactly one pattern.
    """
    pattern = source.strip()
    if not pattern:
        raise MalformedCheckError("Empty pattern")

    program = (
        f"{_MATCHED} = False\n"
        f"match {_SUBJECT}:\n"
        f"    case {pattern}:\n"
        f"        {_MATCHED} = True\n"
    )
    try:
        tree = ast.parse(program, mode="exec")
    except SyntaxError as e:
        raise MalformedCheckError(f"Invalid pattern '{pattern}': {e.msg}") from e

    if not _is_single_case(tree):
        raise MalformedCheckError(f"Invalid pattern '{pattern}': expected a single case pattern")

    top = tree.body[1].cases[0].pattern
    if isinstance(top, ast.MatchAs) and top.pattern is None and top.name is not None:
        raise MalformedCheckError(
            f"Pattern '{pattern}' is a bare capture name and matches every value; "
            f"write a class pattern such as '{pattern}()' or a dotted value such as 'module.{pattern}'"
        )

    try:
        code = compile(tree, f"<opcheck pattern: {pattern}>", "exec")
    except SyntaxError as e:
        # Irrefutability and duplicate-capture errors surface at compile time.
        raise MalformedCheckError(f"Invalid pattern '{pattern}': {e.msg}") from e

    logger.debug(f"Compiled pattern '{pattern}'")
    return CompiledPattern(source=pattern, code=code)


def match_value(
    pattern_label: str,
    record: OperandRecord,
    predicate: Callable[[Any], bool],
    message: CustomMessage | None = None,
    location: tuple[str, int] | None = None,
) -> None:
    """Fail unless ``predicate(record.value)`` is true.

    ``pattern_label`` names the shape being tested in the report.
    """
    if predicate(record.value):
        return

    fail(
        FailureContext(
            kind=AssertionKind.PATTERN_MATCH,
            lhs_label=pattern_label,
            rhs_label=record.label,
            lhs_debug=None,
            rhs_debug=record.debug_text(),
            message=message,
            location=location,
        )
    )
