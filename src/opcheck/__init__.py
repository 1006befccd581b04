"""Runtime checks that report the expression and the values behind it."""

import logging

from opcheck.api import Subject, check, check_matches, check_values, debug_check, that
from opcheck.config import CheckConfig, configure, get_config, load_config, reset_config
from opcheck.errors import AssertionFailure, ConfigError, MalformedCheckError, OpcheckError
from opcheck.kinds import AssertionKind

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AssertionFailure",
    "AssertionKind",
    "CheckConfig",
    "ConfigError",
    "MalformedCheckError",
    "OpcheckError",
    "Subject",
    "check",
    "check_matches",
    "check_values",
    "configure",
    "debug_check",
    "get_config",
    "load_config",
    "reset_config",
    "that",
]
