from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from expandvars import expandvars
from pydantic import BaseModel, ConfigDict, ValidationError

from opcheck.errors import ConfigError

ENV_PREFIX = "OPCHECK_"


class CheckConfig(BaseModel):
    """Process-wide settings.

    Attributes:
        debug_checks: Whether ``debug_check`` runs its check. Defaults to
            ``__debug__``, so ``python -O`` turns debug checks off.
        log_failures: Log every failed check at ERROR before raising.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    debug_checks: bool = __debug__
    log_failures: bool = True


def _validate(raw: Mapping[str, Any], source: str) -> CheckConfig:
    try:
        return CheckConfig(**raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid opcheck config from {source}:\n{e}") from e


def load_config(path: Path) -> CheckConfig:
    """Load and validate a config from a YAML file.

    ``${VAR}`` and ``${VAR:-default}`` references are expanded before
    parsing, so a file can defer to the environment.
    """
    try:
        text = Path(path).read_text()
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    try:
        raw = yaml.safe_load(expandvars(text))
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file {path} is not valid YAML: {e}") from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return _validate(raw, str(path))


def config_from_env(base: CheckConfig | None = None, environ: Mapping[str, str] | None = None) -> CheckConfig:
    """Overlay ``OPCHECK_<FIELD>`` environment variables onto ``base``."""
    environ = os.environ if environ is None else environ
    base = base or CheckConfig()

    overrides = {}
    for name in CheckConfig.model_fields:
        key = f"{ENV_PREFIX}{name.upper()}"
        if key in environ:
            overrides[name] = environ[key]

    if not overrides:
        return base
    return _validate({**base.model_dump(), **overrides}, "environment")


_config: CheckConfig | None = None


def get_config() -> CheckConfig:
    """Return the active config, reading the environment on first use."""
    global _config
    if _config is None:
        _config = config_from_env()
    return _config


def configure(config: CheckConfig | None = None, **overrides: Any) -> CheckConfig:
    """Replace the active config.

    An explicit ``config`` sits below the ``OPCHECK_*`` environment, the
    same order as file then environment. Keyword overrides apply last.

    Examples:
    >>> configure(debug_checks=False)
    >>> configure(load_config(Path("opcheck.yaml")))
    """
    global _config
    base = get_config() if config is None else config_from_env(config)
    if overrides:
        base = _validate({**base.model_dump(), **overrides}, "configure()")
    _config = base
    return _config


def reset_config() -> None:
    """Forget the active config so the next ``get_config`` rereads the environment."""
    global _config
    _config = None
