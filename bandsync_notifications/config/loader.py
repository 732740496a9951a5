import os
import re
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from instrukt_ai_logging import get_logger
from pydantic import BaseModel, ValidationError

from bandsync_notifications.config.schema import NotifierConfig

logger = get_logger(__name__)

CONFIG_PATH_ENV = "BANDSYNC_NOTIFICATIONS_CONFIG"
DEFAULT_CONFIG_PATH = Path("notifications.yml")


class ConfigError(Exception):
    """The configuration file exists but cannot be used."""


def expand_env_vars(config: object) -> object:
    """Recursively replace ``${VAR}`` patterns with environment values.

    Unknown variables are left as written.
    """
    if isinstance(config, dict):
        return {k: expand_env_vars(v) for k, v in config.items()}
    if isinstance(config, list):
        return [expand_env_vars(item) for item in config]
    if isinstance(config, str):

        def replace_env_var(match: re.Match[str]) -> str:
            return os.getenv(match.group(1), match.group(0))

        return re.sub(r"\$\{([^}]+)\}", replace_env_var, config)
    return config


def _warn_unknown_keys(model: BaseModel, path: str, config_path: Path) -> None:
    """Recursively warn about unknown keys in a model and its nested models."""
    if model.model_extra:
        logger.warning("Unknown keys in %s at %s: %s", path, config_path, list(model.model_extra.keys()))
    for field_name, field_value in model.__dict__.items():
        if isinstance(field_value, BaseModel):
            _warn_unknown_keys(field_value, f"{path}.{field_name}", config_path)


def load_config(path: Optional[Path] = None, env_file: Optional[Path] = None) -> NotifierConfig:
    """Load and validate the notifier configuration.

    Args:
        path: YAML file; defaults to ``$BANDSYNC_NOTIFICATIONS_CONFIG`` or ``./notifications.yml``.
        env_file: Optional ``.env`` file loaded before variable expansion.

    Returns:
        The validated configuration; defaults when the file does not exist.

    Raises:
        ConfigError: The file is unreadable, not a mapping, or fails validation.
    """
    if env_file is not None:
        load_dotenv(env_file)
    else:
        load_dotenv()
    if path is None:
        env_path = os.getenv(CONFIG_PATH_ENV)
        path = Path(env_path).expanduser() if env_path else DEFAULT_CONFIG_PATH

    if not path.exists():
        logger.info("No config file at %s; using defaults", path)
        return NotifierConfig()

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read config file {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    try:
        model = NotifierConfig.model_validate(expand_env_vars(raw))
    except ValidationError as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e
    _warn_unknown_keys(model, "root", path)
    return model
