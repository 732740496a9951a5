"""Notifier configuration — YAML file with ``${VAR}`` expansion and ``.env`` support."""

from bandsync_notifications.config.loader import ConfigError, load_config
from bandsync_notifications.config.schema import (
    FcmConfig,
    FirestoreConfig,
    NotifierConfig,
    RedisConfig,
    ServerConfig,
)

__all__ = [
    "ConfigError",
    "load_config",
    "NotifierConfig",
    "FcmConfig",
    "FirestoreConfig",
    "RedisConfig",
    "ServerConfig",
]
