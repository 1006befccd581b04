"""Logging setup for opcheck's own diagnostics."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

_configured: set[str] = set()


def setup_logger(
    debug_file: Path | None = None, verbose: bool = False, logger_name: str = "opcheck"
) -> logging.Logger:
    """
    Configure and return the logger that opcheck's modules log through.

    Writes to debug_file when given, and to stderr when verbose=True.
    Module loggers (``opcheck.report``, ``opcheck.dispatch``) propagate to
    the ``opcheck`` logger, so the default name captures all of them.

    Args:
        debug_file: Optional path to a debug log file
        verbose: If True, also log to stderr
        logger_name: Name of the logger instance

    Returns:
        Configured logger instance.

    Raises:
        RuntimeError: A logger with this name was already set up.
    """
    if logger_name in _configured:
        raise RuntimeError(f"Logger '{logger_name}' already exists; use a unique logger_name")

    logger = logging.getLogger(logger_name)
    _remove_handlers(logger)
    logger.disabled = False
    logger.setLevel(logging.DEBUG)

    formatter = logging.Formatter(
        fmt="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S"
    )

    if debug_file is not None:
        debug_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(debug_file, mode='a')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if verbose:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(logging.DEBUG)
        stderr_handler.setFormatter(formatter)
        logger.addHandler(stderr_handler)

    _configured.add(logger_name)
    return logger


def _remove_handlers(logger: logging.Logger) -> None:
    # The package NullHandler stays so an unconfigured app prints nothing.
    for handler in list(logger.handlers):
        if isinstance(handler, logging.NullHandler):
            continue
        handler.close()
        logger.removeHandler(handler)


def release_logger(logger_name: str = "opcheck") -> None:
    """Close and detach the handlers added by ``setup_logger``."""
    logger = logging.getLogger(logger_name)
    _remove_handlers(logger)
    logger.setLevel(logging.NOTSET)
    _configured.discard(logger_name)
