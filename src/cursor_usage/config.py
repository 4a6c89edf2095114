"""TOML configuration management."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from cursor_usage import constants

DEFAULT_CONFIG = """\
# cursor-usage configuration

[api]
# Usage statistics endpoint (the account id is added as ?user=...)
usage_url = "{usage_url}"
# Seconds to wait for the endpoint before giving up
timeout = {timeout}

[display]
# Model whose request count is summarized
model = "{model}"

[auth]
# Menu rounds allowed when asking for credentials
max_attempts = {max_attempts}
""".format(
    usage_url=constants.USAGE_URL,
    timeout=constants.REQUEST_TIMEOUT_SECONDS,
    model=constants.DEFAULT_MODEL,
    max_attempts=constants.MAX_AUTH_ATTEMPTS,
)


@dataclass(frozen=True)
class Settings:
    """Resolved settings, built once at startup and handed to each component."""

    data_dir: Path
    usage_url: str = constants.USAGE_URL
    timeout: float = constants.REQUEST_TIMEOUT_SECONDS
    model: str = constants.DEFAULT_MODEL
    max_auth_attempts: int = constants.MAX_AUTH_ATTEMPTS

    @property
    def config_file(self) -> Path:
        return self.data_dir / constants.CONFIG_FILE_NAME

    @property
    def credentials_file(self) -> Path:
        return self.data_dir / constants.CREDENTIALS_FILE_NAME

    @property
    def cache_file(self) -> Path:
        return self.data_dir / constants.CACHE_FILE_NAME

    @property
    def log_file(self) -> Path:
        return self.data_dir / constants.LOG_FILE_NAME


def default_data_dir() -> Path:
    """Return the data directory, honouring ``$CURSOR_USAGE_HOME``."""
    return Path(os.environ.get(constants.DATA_DIR_ENV, constants.DEFAULT_DATA_DIR)).expanduser()


def init_config(data_dir: Path | None = None, force: bool = False) -> Path:
    """Create default config file. Returns path to config file."""
    data_dir = data_dir or default_data_dir()
    config_file = data_dir / constants.CONFIG_FILE_NAME
    data_dir.mkdir(parents=True, exist_ok=True)
    if config_file.exists() and not force:
        raise FileExistsError(f"Config already exists: {config_file}")
    config_file.write_text(DEFAULT_CONFIG)
    return config_file


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge *override* into *base*, returning a new dict."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(data_dir: Path | None = None) -> dict[str, Any]:
    """Load config from TOML file, merged on top of built-in defaults.

    Keys missing from the on-disk file fall back to the defaults, so an
    old or hand-trimmed file keeps working.
    """
    data_dir = data_dir or default_data_dir()
    config_file = data_dir / constants.CONFIG_FILE_NAME
    defaults = tomllib.loads(DEFAULT_CONFIG)
    if config_file.exists():
        on_disk = tomllib.loads(config_file.read_text())
        return _deep_merge(defaults, on_disk)
    return defaults


def load_settings(data_dir: Path | None = None) -> Settings:
    """Build :class:`Settings` from the config file in *data_dir*."""
    data_dir = data_dir or default_data_dir()
    cfg = load_config(data_dir)
    return Settings(
        data_dir=data_dir,
        usage_url=cfg["api"]["usage_url"],
        timeout=float(cfg["api"]["timeout"]),
        model=cfg["display"]["model"],
        max_auth_attempts=max(int(cfg["auth"]["max_attempts"]), 1),
    )
