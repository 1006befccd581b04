"""Failure reporting: render the diagnostic and raise."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, NoReturn

from opcheck.config import get_config
from opcheck.errors import AssertionFailure
from opcheck.kinds import AssertionKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CustomMessage:
    """A caller-supplied message, rendered only once a check has failed.

    Attributes:
        fmt: A ``str.format`` template, or a callable returning the
            message text.
        args: Positional arguments for the template or callable.
    """

    fmt: str | Callable[..., Any]
    args: tuple[Any, ...] = ()

    def render(self) -> str:
        if callable(self.fmt):
            return str(self.fmt(*self.args))
        try:
            return self.fmt.format(*self.args)
        except (IndexError, KeyError, ValueError) as e:
            # A template that does not fit its args still yields a message.
            return (
                f"{self.fmt!r} {self.args!r} "
                f"(message formatting failed: {type(e).__name__}: {e})"
            )


def make_message(fmt: str | Callable[..., Any] | None, args: tuple[Any, ...]) -> CustomMessage | None:
    if fmt is None:
        if args:
            raise TypeError("message arguments given without a message")
        return None
    return CustomMessage(fmt, tuple(args))


@dataclass(frozen=True)
class FailureContext:
    """Everything the reporter needs to describe one failed check.

    ``lhs_debug`` is None for pattern matches, whose left side is a
    pattern rather than a value.
    """

    kind: AssertionKind
    lhs_label: str
    rhs_label: str
    lhs_debug: str | None
    rhs_debug: str
    message: CustomMessage | None = None
    location: tuple[str, int] | None = field(default=None, compare=False)


def render_failure(ctx: FailureContext) -> str:
    lines = [f"assertion failed: `{ctx.lhs_label} {ctx.kind.symbol} {ctx.rhs_label}`"]
    if ctx.kind is not AssertionKind.PATTERN_MATCH:
        lines.append(f"{ctx.lhs_label}: `{ctx.lhs_debug}`,")
    lines.append(f"{ctx.rhs_label}: `{ctx.rhs_debug}`")

    text = "\n".join(lines)
    if ctx.message is not None:
        text = f"{text}: {ctx.message.render()}"
    return text


def fail(ctx: FailureContext) -> NoReturn:
    """Render ``ctx`` and raise AssertionFailure. Never returns."""
    message = render_failure(ctx)

    if get_config().log_failures:
        if ctx.location is not None:
            filename, lineno = ctx.location
            logger.error(f"Check failed at {filename}:{lineno}\n{message}")
        else:
            logger.error(f"Check failed\n{message}")

    raise AssertionFailure(message, ctx)
