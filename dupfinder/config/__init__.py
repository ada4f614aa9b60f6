"""Configuration management for dupfinder."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import apply_overrides, load_config, validate_config_dict, validate_config_file
from .models import (
    AppConfig,
    DetectionConfig,
    KeyConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    OutputConfig,
    ReportFormat,
    ReportSort,
)

__all__ = [
    # Loader functions
    "load_config",
    "apply_overrides",
    "validate_config_dict",
    "validate_config_file",
    "load_environment_config",
    # Configuration models
    "AppConfig",
    "DetectionConfig",
    "KeyConfig",
    "OutputConfig",
    "LoggingConfig",
    "EnvironmentConfig",
    # Enums
    "LogLevel",
    "LogFormat",
    "ReportFormat",
    "ReportSort",
    # Exceptions
    "ConfigurationError",
]
