"""Configuration management module.

Handles loading, saving, and accessing the muchview configuration.
Config is stored at ~/.config/muchview/config.toml

Usage:
    from muchview.config import load_config, resolve_settings

    config = load_config()
    settings = resolve_settings(config)
"""

import os
import shutil
import tomllib
from dataclasses import dataclass
from pathlib import Path

import tomli_w

from muchview.errors import ConfigError

from .paths import CONFIG_FILE, ensure_config_dir
from .schema import MuchviewConfig
from .template import CONFIG_TEMPLATE

# Re-export for convenience
__all__ = [
    "load_config",
    "save_config",
    "init_config",
    "set_config_value",
    "resolve_settings",
    "is_debug",
    "log_level",
    "NotmuchSettings",
    "CONFIG_FILE",
]

# Module-level cache for loaded config.
# Avoids repeated disk reads during a single CLI invocation.
_cached_config: MuchviewConfig | None = None


@dataclass(frozen=True)
class NotmuchSettings:
    """Resolved, validated settings for invoking notmuch.

    Attributes:
        binary: Absolute path to an executable notmuch binary.
        config_path: Absolute path to an existing notmuch config file.
        timeout: Seconds to wait for a command, or None to wait forever.
    """

    binary: str
    config_path: str
    timeout: float | None = None


def load_config(*, force_reload: bool = False) -> MuchviewConfig:
    """Load configuration from disk.

    Returns empty dict if config file doesn't exist.
    Uses module-level caching to avoid repeated disk reads.

    Args:
        force_reload: Bypass cache and read from disk (useful after saving).

    Returns:
        The configuration dictionary.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    if not CONFIG_FILE.exists():
        _cached_config = {}
        return _cached_config

    with open(CONFIG_FILE, "rb") as f:
        try:
            _cached_config = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid config file {CONFIG_FILE}: {e}") from e

    return _cached_config


def save_config(config: MuchviewConfig) -> None:
    """Save configuration to disk.

    Creates config directory if needed. Updates the module cache.

    Args:
        config: The configuration dictionary to save.
    """
    global _cached_config

    ensure_config_dir()

    with open(CONFIG_FILE, "wb") as f:
        tomli_w.dump(config, f)

    # Keep cache in sync with disk
    _cached_config = config


def init_config(*, overwrite: bool = False) -> bool:
    """Initialize config directory and create template config file.

    Args:
        overwrite: If True, overwrite existing config file.

    Returns:
        True if config was created, False if it already existed.
    """
    ensure_config_dir()

    if CONFIG_FILE.exists() and not overwrite:
        return False

    CONFIG_FILE.write_text(CONFIG_TEMPLATE)
    return True


def set_config_value(key: str, value: str) -> None:
    """Set a configuration value using dot notation.

    Examples:
        set_config_value("notmuch.timeout", "30")
        set_config_value("web.debug", "true")

    Args:
        key: Dot-separated key path (e.g., "notmuch.config").
        value: Value to set (will be type-converted for known fields).

    Raises:
        ValueError: If value cannot be converted to expected type.
    """
    config = load_config(force_reload=True)

    parts = key.split(".")

    # Navigate to parent dict, creating intermediate dicts as needed
    current: dict = config
    for part in parts[:-1]:
        if part not in current:
            current[part] = {}
        current = current[part]

    final_key = parts[-1]
    current[final_key] = _convert_value(final_key, value)

    save_config(config)


def _convert_value(key: str, value: str) -> str | int | bool:
    """Convert string value to appropriate type based on field name.

    Known integer and boolean fields are converted, everything else stays str.

    Raises:
        ValueError: If value cannot be converted to expected type.
    """
    int_fields = {"timeout", "port", "page_size"}
    bool_fields = {"debug"}

    if key in int_fields:
        return int(value)

    if key in bool_fields:
        return _parse_bool(value)

    return value


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"not a boolean: {value!r}")


def resolve_settings(config: MuchviewConfig) -> NotmuchSettings:
    """Validate the notmuch section of the config and resolve paths.

    NOTMUCH_CONFIG and NOTMUCH_BIN environment variables take precedence
    over the config file.

    Args:
        config: The loaded configuration dictionary.

    Returns:
        NotmuchSettings with absolute, checked paths.

    Raises:
        ConfigError: If the notmuch config file or binary can't be found.
    """
    section = config.get("notmuch", {})

    config_path = os.environ.get("NOTMUCH_CONFIG") or section.get("config", "")
    if not str(config_path).strip():
        raise ConfigError(
            "No notmuch config set. Set NOTMUCH_CONFIG or notmuch.config in "
            f"{CONFIG_FILE}"
        )

    resolved_config = Path(config_path).expanduser().resolve()
    if not resolved_config.is_file():
        raise ConfigError(f"Notmuch config file not found: {resolved_config}")

    binary = os.environ.get("NOTMUCH_BIN") or section.get("bin", "notmuch")
    if os.sep not in binary:
        # Bare command name - look it up on PATH
        binary = shutil.which(binary) or ""
    else:
        binary = str(Path(binary).expanduser())

    if not binary or not os.access(binary, os.X_OK):
        raise ConfigError(
            f"Notmuch binary not found or not executable: {binary or '(none)'}"
        )

    timeout = section.get("timeout") or None

    return NotmuchSettings(
        binary=binary,
        config_path=str(resolved_config),
        timeout=float(timeout) if timeout else None,
    )


def is_debug(config: MuchviewConfig) -> bool:
    """Whether error responses may include stderr and tracebacks.

    MUCHVIEW_DEBUG overrides web.debug from the config file.
    """
    env = os.environ.get("MUCHVIEW_DEBUG")
    if env is not None:
        try:
            return _parse_bool(env)
        except ValueError:
            return False
    return bool(config.get("web", {}).get("debug", False))


def log_level(config: MuchviewConfig) -> str:
    """Configured log level; DEBUG when debug mode is on and no level is set."""
    level = config.get("logging", {}).get("level")
    if level:
        return str(level)
    return "DEBUG" if is_debug(config) else "WARNING"
