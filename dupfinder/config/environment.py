"""Environment variable loading and validation."""

import os
from typing import Optional

from .exceptions import ConfigurationError

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
VALID_LOG_FORMATS = ("json", "key-value")


class EnvironmentConfig:
    """Environment variable configuration holder.

    Every field is optional; None means "not set, fall back to the file".
    """

    def __init__(
        self,
        log_level: Optional[str] = None,
        log_format: Optional[str] = None,
        environment: Optional[str] = None,
        threshold: Optional[int] = None,
    ):
        self.log_level = log_level
        self.log_format = log_format
        self.environment = environment or "local"
        self.threshold = threshold


def load_environment_config() -> EnvironmentConfig:
    """
    Load and validate environment variables.

    Optional environment variables:
    - DUPFINDER_LOG_LEVEL: Override log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - DUPFINDER_LOG_FORMAT: Override log format (json, key-value)
    - DUPFINDER_ENVIRONMENT: Environment label attached to every log record
    - DUPFINDER_THRESHOLD: Override the detection threshold (integer >= 0)

    Returns:
        EnvironmentConfig object with validated values

    Raises:
        ConfigurationError: If any variable is set to an invalid value
    """
    errors = []

    log_level = os.getenv("DUPFINDER_LOG_LEVEL")
    log_format = os.getenv("DUPFINDER_LOG_FORMAT")
    environment = os.getenv("DUPFINDER_ENVIRONMENT")
    threshold_str = os.getenv("DUPFINDER_THRESHOLD")

    if log_level:
        log_level = log_level.strip().upper()
        if log_level not in VALID_LOG_LEVELS:
            errors.append(
                f"Invalid DUPFINDER_LOG_LEVEL: '{log_level}'. "
                f"Must be one of: {', '.join(VALID_LOG_LEVELS)}"
            )

    if log_format:
        log_format = log_format.strip().lower()
        if log_format not in VALID_LOG_FORMATS:
            errors.append(
                f"Invalid DUPFINDER_LOG_FORMAT: '{log_format}'. "
                f"Must be one of: {', '.join(VALID_LOG_FORMATS)}"
            )

    threshold = None
    if threshold_str:
        try:
            threshold = int(threshold_str)
            if threshold < 0:
                errors.append(f"Invalid DUPFINDER_THRESHOLD: {threshold}. Must be >= 0.")
        except ValueError:
            errors.append(
                f"Invalid DUPFINDER_THRESHOLD: '{threshold_str}'. Must be a valid integer."
            )

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Check the DUPFINDER_* variables in your shell or .env file",
                "Unset a variable to fall back to the configuration file",
            ],
        )

    return EnvironmentConfig(
        log_level=log_level or None,
        log_format=log_format or None,
        environment=environment,
        threshold=threshold,
    )
