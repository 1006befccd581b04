"""Tests for config loading and validation."""

import textwrap
from pathlib import Path

import pytest
from pydantic import ValidationError

from opcheck.config import CheckConfig, config_from_env, configure, get_config, load_config, reset_config
from opcheck.errors import ConfigError


@pytest.fixture()
def tmp_yaml(tmp_path):
    """Helper that writes YAML content to a temp file and returns its path."""

    def _write(content: str) -> Path:
        p = tmp_path / "opcheck.yaml"
        p.write_text(textwrap.dedent(content))
        return p

    return _write


def test_defaults():
    cfg = CheckConfig()
    assert cfg.debug_checks is __debug__
    assert cfg.log_failures is True


def test_load_config(tmp_yaml):
    path = tmp_yaml("""\
        debug_checks: false
        log_failures: false
    """)
    cfg = load_config(path)
    assert cfg.debug_checks is False
    assert cfg.log_failures is False


def test_load_empty_config_uses_defaults(tmp_yaml):
    assert load_config(tmp_yaml("")) == CheckConfig()


def test_load_config_expands_env_vars(tmp_yaml, monkeypatch):
    path = tmp_yaml("""\
        debug_checks: ${OPCHECK_TEST_DEBUG:-false}
    """)
    assert load_config(path).debug_checks is False

    monkeypatch.setenv("OPCHECK_TEST_DEBUG", "true")
    assert load_config(path).debug_checks is True


def test_load_config_rejects_unknown_keys(tmp_yaml):
    path = tmp_yaml("""\
        debug_checks: true
        verbosity: 3
    """)
    with pytest.raises(ConfigError, match="verbosity"):
        load_config(path)


def test_load_config_rejects_non_mapping(tmp_yaml):
    with pytest.raises(ConfigError, match="mapping"):
        load_config(tmp_yaml("- debug_checks\n"))


def test_load_config_rejects_invalid_yaml(tmp_yaml):
    with pytest.raises(ConfigError, match="not valid YAML"):
        load_config(tmp_yaml("debug_checks: [true\n"))


def test_load_config_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="Cannot read"):
        load_config(tmp_path / "missing.yaml")


def test_config_from_env_overrides_base():
    base = CheckConfig(debug_checks=True, log_failures=True)
    cfg = config_from_env(base, environ={"OPCHECK_LOG_FAILURES": "no"})
    assert cfg.debug_checks is True
    assert cfg.log_failures is False


def test_config_from_env_without_variables_returns_base():
    base = CheckConfig(debug_checks=False)
    assert config_from_env(base, environ={}) is base


def test_config_from_env_rejects_bad_value():
    with pytest.raises(ConfigError, match="environment"):
        config_from_env(environ={"OPCHECK_DEBUG_CHECKS": "maybe"})


def test_get_config_reads_environment_once(monkeypatch):
    monkeypatch.setenv("OPCHECK_DEBUG_CHECKS", "false")
    reset_config()
    assert get_config().debug_checks is False

    monkeypatch.setenv("OPCHECK_DEBUG_CHECKS", "true")
    assert get_config().debug_checks is False

    reset_config()
    assert get_config().debug_checks is True


def test_configure_overrides():
    cfg = configure(log_failures=False)
    assert get_config() is cfg
    assert cfg.log_failures is False
    assert cfg.debug_checks is __debug__


def test_configure_with_config_object(tmp_yaml):
    loaded = load_config(tmp_yaml("debug_checks: false\n"))
    configure(loaded)
    assert get_config() is loaded


def test_configure_with_config_object_applies_environment(tmp_yaml, monkeypatch):
    monkeypatch.setenv("OPCHECK_DEBUG_CHECKS", "0")
    loaded = load_config(tmp_yaml("debug_checks: true\nlog_failures: false\n"))
    cfg = configure(loaded)
    assert cfg.debug_checks is False
    assert cfg.log_failures is False
    assert get_config() is cfg


def test_configure_keyword_overrides_beat_environment(tmp_yaml, monkeypatch):
    monkeypatch.setenv("OPCHECK_DEBUG_CHECKS", "0")
    cfg = configure(load_config(tmp_yaml("debug_checks: true\n")), debug_checks=True)
    assert cfg.debug_checks is True


def test_configure_rejects_unknown_override():
    with pytest.raises(ConfigError):
        configure(colour=True)


def test_config_is_immutable():
    cfg = CheckConfig()
    with pytest.raises(ValidationError):
        cfg.debug_checks = False
