"""
Configuration loader — reads config.yml into a Settings model.

Everything has a working default, so a config file is optional.
Location precedence:

    --config flag  >  CTK_CONFIG env var  >  ~/.config/cyber-toolkit/config.yml

Individual keys can then be overridden from the environment
(CTK_CATALOG_URL, CTK_ROLE_FILE, CTK_PACKAGE_MANAGER, CTK_HTTP_TIMEOUT).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_URL = "https://raw.githubusercontent.com/jakubGodula/cyber-toolkit/main/roles/"
DEFAULT_ROLE_INDEX = "role_names"
DEFAULT_CONFIG_PATH = Path("~/.config/cyber-toolkit/config.yml")
DEFAULT_ROLE_FILE = Path("~/.roles/roles.cnf")

# env var → settings key
_ENV_OVERRIDES = {
    "CTK_CATALOG_URL": "catalog_url",
    "CTK_ROLE_FILE": "role_file",
    "CTK_PACKAGE_MANAGER": "package_manager",
    "CTK_HTTP_TIMEOUT": "http_timeout",
}


class ConfigError(Exception):
    """Raised when configuration is invalid or unreadable."""


class Settings(BaseModel):
    """Runtime settings for the toolkit."""

    catalog_url: str = DEFAULT_CATALOG_URL
    role_index: str = DEFAULT_ROLE_INDEX
    role_file: Path = Field(default=DEFAULT_ROLE_FILE, validate_default=True)
    package_manager: str = "pacman"
    use_sudo: Literal["auto", "always", "never"] = "auto"
    http_timeout: float | None = Field(default=None, gt=0)
    command_timeout: int | None = Field(default=None, gt=0)

    @field_validator("catalog_url")
    @classmethod
    def _trailing_slash(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("catalog_url must not be empty")
        return v if v.endswith("/") else v + "/"

    @field_validator("role_file")
    @classmethod
    def _expand_home(cls, v: Path) -> Path:
        return v.expanduser()


def find_config_file(explicit: Path | None = None) -> Path | None:
    """Locate the config file to use, if any.

    An explicit path (flag or CTK_CONFIG) is returned even when it does
    not exist, so that ``load_settings`` can report it. The default
    location is only returned when present.
    """
    if explicit is not None:
        return explicit

    env_path = os.environ.get("CTK_CONFIG")
    if env_path:
        return Path(env_path)

    default = DEFAULT_CONFIG_PATH.expanduser()
    if default.is_file():
        return default

    return None


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate settings.

    Args:
        path: Explicit config path. If None, searches the default locations.

    Returns:
        Validated Settings model.

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid.
    """
    path = find_config_file(path)
    data: dict = {}

    if path is not None:
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")

        logger.debug("Loading config from %s", path)
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read {path}: {e}") from e

        try:
            loaded = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigError(f"Expected a YAML mapping in {path}, got {type(loaded).__name__}")
        data = dict(loaded)

    for env_name, key in _ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            data[key] = value

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    logger.info(
        "Settings: catalog=%s manager=%s role_file=%s",
        settings.catalog_url,
        settings.package_manager,
        settings.role_file,
    )
    return settings
