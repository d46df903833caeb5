"""Configuration management module for Insyd."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, parse_app_config, validate_config_file
from .models import (
    AppConfig,
    AudienceMode,
    DeliveryMode,
    EmailConfig,
    LikePolicy,
    LogFormat,
    LoggingConfig,
    LogLevel,
    MaintenanceConfig,
    NotificationConfig,
    ServerConfig,
)

__all__ = [
    # Loader functions
    "load_config",
    "parse_app_config",
    "validate_config_file",
    "load_environment_config",
    # Configuration models
    "AppConfig",
    "NotificationConfig",
    "EmailConfig",
    "LoggingConfig",
    "ServerConfig",
    "MaintenanceConfig",
    "EnvironmentConfig",
    # Enums
    "AudienceMode",
    "LikePolicy",
    "DeliveryMode",
    "LogLevel",
    "LogFormat",
    # Exceptions
    "ConfigurationError",
]
