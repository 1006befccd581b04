"""Exception types raised by opcheck."""


class OpcheckError(Exception):
    """Base class for every error raised by opcheck."""


class AssertionFailure(OpcheckError, AssertionError):
    """A check evaluated to false.

    Attributes:
        context: The ``FailureContext`` the message was rendered from.
    """

    def __init__(self, message: str, context=None):
        super().__init__(message)
        self.context = context


class MalformedCheckError(OpcheckError, ValueError):
    """A check expression or pattern that cannot be dispatched.

    Raised before any operand is evaluated.
    """


class ConfigError(OpcheckError, ValueError):
    """Configuration that cannot be loaded or validated."""
