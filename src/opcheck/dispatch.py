"""Operator dispatch for check expressions.

An expression is ``<lhs> <op> <rhs>`` with ``<op>`` one of ``==``,
``!=``, ``>``, ``<``, ``>=``, ``<=``, or ``<pattern> = <rhs>``. Exactly
one operator may appear outside brackets. Each operand must be a single
primary expression (a name, literal, attribute, subscript, call or
display); anything else has to be parenthesized:

    check("x < (x + 10)")        # ok
    check("x < x + 10")          # MalformedCheckError
    check("a < b < c")           # MalformedCheckError

Expressions are validated and compiled once and cached by their text.
"""

from __future__ import annotations

import ast
import io
import logging
import tokenize
from dataclasses import dataclass
from functools import lru_cache
from types import CodeType
from typing import Any, Mapping

from opcheck.errors import MalformedCheckError
from opcheck.evaluator import compare, evaluate_operand
from opcheck.kinds import AssertionKind
from opcheck.patterns import CompiledPattern, compile_pattern, match_value
from opcheck.report import CustomMessage

logger = logging.getLogger(__name__)

_OPERATORS = frozenset(kind.symbol for kind in AssertionKind)
_OPENERS = frozenset("([{")
_CLOSERS = frozenset(")]}")
_IGNORED_TOKENS = frozenset(
    {tokenize.NEWLINE, tokenize.NL, tokenize.COMMENT, tokenize.INDENT, tokenize.DEDENT, tokenize.ENDMARKER}
)

_PRIMARY_NODES = (
    ast.Name,
    ast.Constant,
    ast.Attribute,
    ast.Subscript,
    ast.Call,
    ast.List,
    ast.Dict,
    ast.Set,
    ast.ListComp,
    ast.SetComp,
    ast.DictComp,
    ast.JoinedStr,
)


@dataclass(frozen=True)
class CompiledCheck:
    """A validated check expression, ready to run against a namespace.

    ``lhs_code`` is None and ``pattern`` is set for pattern checks.
    """

    source: str
    kind: AssertionKind
    lhs_label: str
    rhs_label: str
    lhs_code: CodeType | None
    rhs_code: CodeType
    pattern: CompiledPattern | None = None

    def run(
        self,
        globals: dict[str, Any],
        locals: Mapping[str, Any],
        message: CustomMessage | None = None,
        location: tuple[str, int] | None = None,
    ) -> None:
        """Evaluate each operand once, left to right, and check the result."""
        namespace = {**globals, **locals}
        if self.pattern is not None:
            rhs = evaluate_operand(self.rhs_label, self.rhs_code, namespace)
            pattern = self.pattern
            match_value(
                self.lhs_label,
                rhs,
                lambda value: pattern.matches(value, namespace),
                message=message,
                location=location,
            )
            return

        lhs = evaluate_operand(self.lhs_label, self.lhs_code, namespace)
        rhs = evaluate_operand(self.rhs_label, self.rhs_code, namespace)
        compare(self.kind, lhs, rhs, message=message, location=location)


def _tokens(source: str) -> list[tokenize.TokenInfo]:
    try:
        return list(tokenize.generate_tokens(io.StringIO(source).readline))
    except (tokenize.TokenError, SyntaxError) as e:
        raise MalformedCheckError(f"Cannot tokenize check expression '{source}': {e}") from e


def _significant_tokens(source: str) -> list[tokenize.TokenInfo]:
    return [tok for tok in _tokens(source) if tok.type not in _IGNORED_TOKENS]


def _offset(source: str, position: tuple[int, int]) -> int:
    row, col = position
    lines = source.splitlines(keepends=True)
    return sum(len(line) for line in lines[: row - 1]) + col


def _strip_comments(source: str) -> str:
    comments = [tok for tok in _tokens(source) if tok.type == tokenize.COMMENT]
    for tok in reversed(comments):
        start, end = _offset(source, tok.start), _offset(source, tok.end)
        source = source[:start].rstrip(" \t") + source[end:]
    return source.strip()


def _top_level_operators(source: str) -> list[tokenize.TokenInfo]:
    depth = 0
    found = []
    for tok in _significant_tokens(source):
        if tok.type != tokenize.OP:
            continue
        if tok.string in _OPENERS:
            depth += 1
        elif tok.string in _CLOSERS:
            depth -= 1
        elif depth == 0 and tok.string in _OPERATORS:
            found.append(tok)
    return found


def _is_parenthesized(source: str) -> bool:
    """True if ``source`` is one bracket group opened by ``(``."""
    tokens = _significant_tokens(source)
    if not tokens or tokens[0].string != "(":
        return False

    depth = 0
    for index, tok in enumerate(tokens):
        if tok.type != tokenize.OP:
            continue
        if tok.string in _OPENERS:
            depth += 1
        elif tok.string in _CLOSERS:
            depth -= 1
            if depth == 0:
                return index == len(tokens) - 1
    return False


def _is_negative_literal(node: ast.expr) -> bool:
    return (
        isinstance(node, ast.UnaryOp)
        and isinstance(node.op, (ast.USub, ast.UAdd))
        and isinstance(node.operand, ast.Constant)
        and isinstance(node.operand.value, (int, float, complex))
    )


def _compile_operand(label: str, source: str) -> CodeType:
    if not label:
        raise MalformedCheckError(f"Missing operand in check expression '{source}'")

    try:
        tree = ast.parse(label, mode="eval")
    except SyntaxError as e:
        raise MalformedCheckError(f"Invalid operand '{label}' in '{source}': {e.msg}") from e

    node = tree.body
    if not (isinstance(node, _PRIMARY_NODES) or _is_negative_literal(node) or _is_parenthesized(label)):
        raise MalformedCheckError(
            f"Operand '{label}' in '{source}' is ambiguous; wrap it in parentheses"
        )

    return compile(tree, f"<opcheck: {label}>", "eval")


def compile_check(source: str) -> CompiledCheck:
    """Validate ``source`` and compile its operands.

    Raises MalformedCheckError without evaluating anything if the
    expression has no supported operator, more than one top-level
    operator, or an operand that needs parentheses.
    """
    if not isinstance(source, str):
        raise MalformedCheckError(
            f"Check expression must be a string, not {type(source).__name__}"
        )
    return _compile(source)


@lru_cache(maxsize=512)
def _compile(source: str) -> CompiledCheck:
    text = _strip_comments(source.strip())
    if not text:
        raise MalformedCheckError("Empty check expression")

    operators = _top_level_operators(text)
    if not operators:
        supported = ", ".join(kind.symbol for kind in AssertionKind)
        raise MalformedCheckError(
            f"Check expression '{text}' has no comparison operator (expected one of: {supported})"
        )
    if len(operators) > 1:
        written = " ".join(tok.string for tok in operators)
        raise MalformedCheckError(
            f"Check expression '{text}' is ambiguous: found operators {written}; "
            "parenthesize the operands"
        )

    op = operators[0]
    kind = AssertionKind.from_symbol(op.string)
    lhs_label = text[: _offset(text, op.start)].strip()
    rhs_label = text[_offset(text, op.end) :].strip()

    if kind is AssertionKind.PATTERN_MATCH:
        if not lhs_label:
            raise MalformedCheckError(f"Missing pattern in check expression '{text}'")
        rhs_code = _compile_operand(rhs_label, text)
        pattern = compile_pattern(lhs_label)
        compiled = CompiledCheck(text, kind, lhs_label, rhs_label, None, rhs_code, pattern)
    else:
        lhs_code = _compile_operand(lhs_label, text)
        rhs_code = _compile_operand(rhs_label, text)
        compiled = CompiledCheck(text, kind, lhs_label, rhs_label, lhs_code, rhs_code)

    logger.debug(f"Compiled check '{text}' as {kind.name}")
    return compiled
