"""Tests for configuration loading and notmuch settings resolution."""

import os
import sys

import pytest

import muchview.config as config_module
from muchview.config import (
    init_config,
    is_debug,
    load_config,
    log_level,
    resolve_settings,
    set_config_value,
)
from muchview.config import paths
from muchview.errors import ConfigError


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    """Point the config module at a temporary config.toml."""
    path = tmp_path / "config.toml"
    monkeypatch.setattr(config_module, "CONFIG_FILE", path)
    monkeypatch.setattr(paths, "CONFIG_DIR", tmp_path)
    monkeypatch.setattr(config_module, "_cached_config", None)
    return path


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("NOTMUCH_CONFIG", "NOTMUCH_BIN", "MUCHVIEW_DEBUG"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def notmuch_config(tmp_path):
    path = tmp_path / "notmuch-config"
    path.write_text("[database]\npath=/tmp/mail\n")
    return path


@pytest.fixture
def notmuch_bin(tmp_path):
    path = tmp_path / "bin" / "notmuch"
    path.parent.mkdir()
    path.write_text("#!/bin/sh\n")
    path.chmod(0o755)
    return path


class TestLoadConfig:
    """Tests for loading and saving the config file."""

    def test_missing_file_is_empty(self, config_file):
        assert load_config() == {}

    def test_invalid_toml(self, config_file):
        config_file.write_text("[notmuch\n")

        with pytest.raises(ConfigError, match="Invalid config file"):
            load_config()

    def test_init_writes_template(self, config_file):
        assert init_config() is True
        assert init_config() is False

        config = load_config(force_reload=True)
        assert config["notmuch"]["bin"] == "notmuch"
        assert config["web"]["page_size"] == 50

    def test_set_value_converts_known_fields(self, config_file):
        set_config_value("notmuch.timeout", "30")
        set_config_value("web.debug", "yes")
        set_config_value("notmuch.config", "~/mail/.notmuch-config")

        config = load_config(force_reload=True)
        assert config["notmuch"]["timeout"] == 30
        assert config["web"]["debug"] is True
        assert config["notmuch"]["config"] == "~/mail/.notmuch-config"

    def test_set_value_rejects_bad_int(self, config_file):
        with pytest.raises(ValueError):
            set_config_value("web.port", "eighty")


class TestResolveSettings:
    """Tests for resolve_settings()."""

    def test_resolves_paths_and_timeout(self, clean_env, notmuch_config, notmuch_bin):
        config = {
            "notmuch": {
                "bin": str(notmuch_bin),
                "config": str(notmuch_config),
                "timeout": 15,
            }
        }

        settings = resolve_settings(config)

        assert settings.binary == str(notmuch_bin)
        assert settings.config_path == str(notmuch_config.resolve())
        assert settings.timeout == 15.0

    def test_zero_timeout_waits_forever(self, clean_env, notmuch_config, notmuch_bin):
        config = {
            "notmuch": {"bin": str(notmuch_bin), "config": str(notmuch_config), "timeout": 0}
        }

        assert resolve_settings(config).timeout is None

    def test_environment_overrides_config(
        self, clean_env, monkeypatch, notmuch_config, notmuch_bin
    ):
        monkeypatch.setenv("NOTMUCH_CONFIG", str(notmuch_config))
        monkeypatch.setenv("NOTMUCH_BIN", str(notmuch_bin))
        config = {"notmuch": {"bin": "/nonexistent/notmuch", "config": "/nonexistent"}}

        settings = resolve_settings(config)

        assert settings.binary == str(notmuch_bin)
        assert settings.config_path == str(notmuch_config.resolve())

    def test_bare_binary_name_is_looked_up_on_path(
        self, clean_env, monkeypatch, notmuch_config, notmuch_bin
    ):
        monkeypatch.setenv("PATH", str(notmuch_bin.parent))
        config = {"notmuch": {"config": str(notmuch_config)}}

        settings = resolve_settings(config)

        assert os.path.samefile(settings.binary, notmuch_bin)

    def test_missing_config_setting(self, clean_env):
        with pytest.raises(ConfigError, match="No notmuch config set"):
            resolve_settings({})

    def test_config_file_must_exist(self, clean_env, tmp_path):
        config = {"notmuch": {"config": str(tmp_path / "nope")}}

        with pytest.raises(ConfigError, match="config file not found"):
            resolve_settings(config)

    def test_binary_must_exist(self, clean_env, notmuch_config, tmp_path):
        config = {
            "notmuch": {"config": str(notmuch_config), "bin": str(tmp_path / "nope")}
        }

        with pytest.raises(ConfigError, match="binary not found"):
            resolve_settings(config)

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_binary_must_be_executable(self, clean_env, notmuch_config, notmuch_bin):
        notmuch_bin.chmod(0o644)
        config = {"notmuch": {"config": str(notmuch_config), "bin": str(notmuch_bin)}}

        with pytest.raises(ConfigError, match="not executable"):
            resolve_settings(config)


class TestDebugAndLogLevel:
    """Tests for is_debug() and log_level()."""

    def test_debug_from_config(self, clean_env):
        assert is_debug({"web": {"debug": True}}) is True
        assert is_debug({}) is False

    def test_debug_environment_wins(self, clean_env, monkeypatch):
        monkeypatch.setenv("MUCHVIEW_DEBUG", "0")
        assert is_debug({"web": {"debug": True}}) is False

        monkeypatch.setenv("MUCHVIEW_DEBUG", "true")
        assert is_debug({}) is True

    def test_log_level(self, clean_env):
        assert log_level({}) == "WARNING"
        assert log_level({"web": {"debug": True}}) == "DEBUG"
        assert log_level({"logging": {"level": "INFO"}, "web": {"debug": True}}) == "INFO"
