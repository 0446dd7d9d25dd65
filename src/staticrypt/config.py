"""Configuration management for staticrypt.

Handles the persisted ``.staticrypt.json`` file, option defaults and the
immutable option set produced once per run.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from types import MappingProxyType
from typing import Any

from .crypto import StaticryptError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".staticrypt.json"
CONFIG_DISABLED = "false"
ENV_PASSWORD = "STATICRYPT_PASSWORD"

ASSETS_DIR = Path(__file__).parent / "assets"
PASSWORD_TEMPLATE_DEFAULT_PATH = ASSETS_DIR / "lib" / "password_template.html"
DEFAULT_OUTPUT_DIR = "encrypted/"

REMEMBER_DISABLED = "false"


@dataclass(frozen=True)
class TemplateConfig:
    """Template-facing strings, keyed by their placeholder names."""

    template_button: str = "DECRYPT"
    template_instructions: str = ""
    template_error: str = "Bad password!"
    template_placeholder: str = "Password"
    template_remember: str = "Remember me"
    template_title: str = "Protected Page"


@dataclass(frozen=True)
class ResolvedOptions:
    """Complete option set for one run. Read-only once built."""

    password: str
    salt: str
    output_dir: str = DEFAULT_OUTPUT_DIR
    template_path: Path = PASSWORD_TEMPLATE_DEFAULT_PATH
    remember_days: int | None = 0  # None = remember-me disabled, 0 = no expiry
    template: TemplateConfig = field(default_factory=TemplateConfig)

    @property
    def is_remember_enabled(self) -> bool:
        return self.remember_days is not None

    def as_template_data(self) -> Mapping[str, Any]:
        """Template strings plus salt as a read-only placeholder mapping."""
        data: dict[str, Any] = {
            f.name: getattr(self.template, f.name) for f in fields(self.template)
        }
        data["salt"] = self.salt
        return MappingProxyType(data)


def resolve_config_path(config_arg: str | None) -> Path | None:
    """Map the --config value to a path, or None when persistence is disabled."""
    if config_arg is None or config_arg.lower() == CONFIG_DISABLED:
        return None
    return Path(config_arg)


def parse_remember(value: str | int | None) -> int | None:
    """Parse the --remember value into days.

    Returns:
        Number of days (0 = no expiration), or None if disabled.

    Raises:
        StaticryptError: If the value is neither "false" nor a non-negative int.
    """
    if value is None:
        return 0
    if isinstance(value, str) and value.strip().lower() == REMEMBER_DISABLED:
        return None
    try:
        days = int(value)
    except ValueError:
        raise StaticryptError(
            f'--remember must be a number of days or "false", got "{value}"'
        )
    if days < 0:
        raise StaticryptError("--remember must be non-negative")
    return days


def load_config(config_path: Path | None) -> dict[str, Any]:
    """Load the persisted config.

    Args:
        config_path: Path to the JSON config, or None if persistence is off.

    Returns:
        The config document; empty if disabled or the file does not exist.

    Raises:
        StaticryptError: If the file exists but cannot be read or parsed.
    """
    if config_path is None or not config_path.is_file():
        return {}

    try:
        with open(config_path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise StaticryptError(f"Invalid JSON in {config_path}: {e}") from e
    except OSError as e:
        raise StaticryptError(f"Cannot read config file {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise StaticryptError(f"Config file {config_path} must contain a JSON object")

    logger.debug("Loaded config from %s (keys: %s)", config_path, ", ".join(data))
    return data


def write_config(config_path: Path | None, config: Mapping[str, Any]) -> None:
    """Write the config document. Does nothing if persistence is off.

    Raises:
        StaticryptError: If the file cannot be written.
    """
    if config_path is None:
        return

    try:
        config_path.write_text(json.dumps(dict(config), indent=4), encoding="utf-8")
    except OSError as e:
        logger.error("Cannot write %s: %s", config_path, e)
        raise StaticryptError(f"Cannot write config file {config_path}: {e}") from e

    logger.debug("Wrote config to %s", config_path)


def update_config_salt(
    config_path: Path | None, config: Mapping[str, Any], salt: str
) -> dict[str, Any]:
    """Store salt in the config, preserving every other field.

    The file is only rewritten when the salt actually changed.

    Returns:
        The updated config document.
    """
    if config.get("salt") == salt:
        return dict(config)

    updated = {**config, "salt": salt}
    write_config(config_path, updated)
    return updated
