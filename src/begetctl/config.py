"""Runtime settings loader for begetctl.

Settings are resolved from layered sources, lowest precedence first:

1. Built-in defaults.
2. Environment variables (``BEGET_CONFIG``, ``BEGET_LOGS_DIR``, ...).
3. Explicit overrides supplied programmatically (CLI flags).

The profile store path follows its own fallback chain: an explicit path wins,
then ``BEGET_CONFIG``, then ``$XDG_CONFIG_HOME/beget-cli/config.json`` and
finally ``~/.config/beget-cli/config.json``. Logs follow the same pattern
under ``$XDG_STATE_HOME``.
"""
from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigError

ENV_PREFIX = "BEGET_"
CONFIG_ENV_VAR = f"{ENV_PREFIX}CONFIG"
LOGS_DIR_ENV_VAR = f"{ENV_PREFIX}LOGS_DIR"
TIMEOUT_ENV_VAR = f"{ENV_PREFIX}TIMEOUT_MS"

PROFILE_ENV_VAR = f"{ENV_PREFIX}PROFILE"
LOGIN_ENV_VAR = f"{ENV_PREFIX}LOGIN"
SECRET_ENV_VARS: tuple[str, ...] = (f"{ENV_PREFIX}API_PASSWORD", f"{ENV_PREFIX}API_KEY")
BASE_URL_ENV_VAR = f"{ENV_PREFIX}API_BASE_URL"

FTP_PASSWORD_ENV_VAR = f"{ENV_PREFIX}FTP_PASSWORD"
MAILBOX_PASSWORD_ENV_VAR = f"{ENV_PREFIX}MAILBOX_PASSWORD"
MYSQL_PASSWORD_ENV_VAR = f"{ENV_PREFIX}MYSQL_PASSWORD"

APP_DIR_NAME = "beget-cli"
CONFIG_FILE_NAME = "config.json"
DEFAULT_BASE_URL = "https://api.beget.com/api"


@dataclass(frozen=True)
class AppConfig:
    """Resolved runtime settings for one invocation."""

    config_file: Path
    logs_dir: Path
    timeout_ms: int
    default_base_url: str = DEFAULT_BASE_URL

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-serialisable representation of the config."""
        return {
            "config_file": str(self.config_file),
            "logs_dir": str(self.logs_dir),
            "timeout_ms": self.timeout_ms,
            "default_base_url": self.default_base_url,
        }


DEFAULTS: dict[str, object] = {
    "config_file": None,  # derived from the environment when absent
    "logs_dir": None,  # derived from the environment when absent
    "timeout_ms": 20000,
}

ALLOWED_OVERRIDE_KEYS = set(DEFAULTS.keys())


def load_config(
    config_file: str | os.PathLike[str] | None = None,
    *,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, object] | None = None,
) -> AppConfig:
    """Load and merge settings sources into an :class:`AppConfig`."""
    merged: dict[str, object] = dict(DEFAULTS)
    resolved_env = dict(os.environ if env is None else env)

    merged.update(_build_env_overrides(resolved_env))

    if overrides:
        unknown_keys = set(overrides.keys()) - ALLOWED_OVERRIDE_KEYS
        if unknown_keys:
            joined = ", ".join(sorted(unknown_keys))
            raise ConfigError(f"Unknown configuration keys: {joined}.")
        merged.update({key: value for key, value in overrides.items() if value is not None})

    config_path = determine_config_path(config_file, resolved_env)
    logs_value = merged.get("logs_dir")
    logs_dir = _to_path(logs_value) if logs_value else _default_logs_dir(resolved_env)

    timeout_ms = _expect_positive_int(merged.get("timeout_ms"), "timeout_ms", default=20000)

    return AppConfig(config_file=config_path, logs_dir=logs_dir, timeout_ms=timeout_ms)


def determine_config_path(
    cli_override: str | os.PathLike[str] | None,
    env: Mapping[str, str],
) -> Path:
    """Return the profile store path following the documented precedence."""
    if cli_override:
        return _to_path(cli_override)
    explicit = _env_value(env, CONFIG_ENV_VAR)
    if explicit:
        return _to_path(explicit)
    xdg = _env_value(env, "XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / APP_DIR_NAME / CONFIG_FILE_NAME
    return Path.home() / ".config" / APP_DIR_NAME / CONFIG_FILE_NAME


def _default_logs_dir(env: Mapping[str, str]) -> Path:
    xdg_state = _env_value(env, "XDG_STATE_HOME")
    if xdg_state:
        return Path(xdg_state) / APP_DIR_NAME / "logs"
    return Path.home() / ".local" / "state" / APP_DIR_NAME / "logs"


def _build_env_overrides(env: Mapping[str, str]) -> dict[str, object]:
    overrides: dict[str, object] = {}
    logs_dir = _env_value(env, LOGS_DIR_ENV_VAR)
    if logs_dir:
        overrides["logs_dir"] = logs_dir
    timeout = _env_value(env, TIMEOUT_ENV_VAR)
    if timeout:
        overrides["timeout_ms"] = timeout
    return overrides


def _env_value(env: Mapping[str, str], name: str) -> str | None:
    value = (env.get(name) or "").strip()
    return value or None


def _to_path(value: object) -> Path:
    if value is None:
        raise ConfigError("Expected a filesystem path, received None.")
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    if isinstance(value, os.PathLike):
        return Path(os.fspath(value)).expanduser()
    raise ConfigError(f"Cannot convert value {value!r} to Path.")


def _expect_positive_int(value: object | None, label: str, *, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        raise ConfigError(f"Expected {label} to be an integer. Got boolean {value!r}.")
    if isinstance(value, int):
        numeric = value
    elif isinstance(value, str):
        try:
            numeric = int(value.strip(), 10)
        except ValueError as exc:
            raise ConfigError(f"Invalid integer for {label}: {value!r}.") from exc
    else:
        raise ConfigError(f"Expected {label} to be an integer. Got {type(value).__name__}.")
    if numeric <= 0:
        raise ConfigError(f"{label} must be greater than zero. Got {numeric}.")
    return numeric


__all__ = [
    "AppConfig",
    "BASE_URL_ENV_VAR",
    "CONFIG_ENV_VAR",
    "ConfigError",
    "DEFAULT_BASE_URL",
    "FTP_PASSWORD_ENV_VAR",
    "LOGIN_ENV_VAR",
    "LOGS_DIR_ENV_VAR",
    "MAILBOX_PASSWORD_ENV_VAR",
    "MYSQL_PASSWORD_ENV_VAR",
    "PROFILE_ENV_VAR",
    "SECRET_ENV_VARS",
    "TIMEOUT_ENV_VAR",
    "determine_config_path",
    "load_config",
]
