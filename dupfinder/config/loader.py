"""Configuration loader for dupfinder."""

from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from pydantic import ValidationError

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .models import AppConfig
from .validators import check_for_warnings, emit_warnings

DEFAULT_CONFIG_LOCATIONS = (
    Path("dupfinder.yaml"),
    Path("config") / "dupfinder.yaml",
)


def load_config(
    config_path: Optional[Path] = None,
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load and validate configuration from an optional YAML file and the
    environment.

    Config file lookup:
    1. Use config_path if given (it must exist)
    2. Try dupfinder.yaml in the current directory
    3. Try ./config/dupfinder.yaml
    4. Fall back to built-in defaults

    Environment overrides (DUPFINDER_THRESHOLD, DUPFINDER_LOG_LEVEL,
    DUPFINDER_LOG_FORMAT) are applied on top of the file.

    Args:
        config_path: Optional path to configuration file

    Returns:
        Tuple of (AppConfig, EnvironmentConfig)

    Raises:
        ConfigurationError: If the file or any environment variable is invalid
    """
    config_file = _find_config_file(config_path)
    config_dict: Dict[str, Any] = _read_config_file(config_file) if config_file else {}

    warnings = check_for_warnings(config_dict)
    if warnings:
        emit_warnings(warnings)

    env_config = load_environment_config()

    overrides: Dict[str, Dict[str, Any]] = {}
    if env_config.threshold is not None:
        overrides.setdefault("detection", {})["threshold"] = env_config.threshold
    if env_config.log_level:
        overrides.setdefault("logging", {})["level"] = env_config.log_level
    if env_config.log_format:
        overrides.setdefault("logging", {})["format"] = env_config.log_format

    app_config = validate_config_dict(_merge_sections(config_dict, overrides))
    return app_config, env_config


def apply_overrides(app_config: AppConfig, overrides: Dict[str, Dict[str, Any]]) -> AppConfig:
    """
    Return a new AppConfig with section-level overrides applied and validated.

    None values in ``overrides`` are ignored so CLI flags that were not given
    leave the configuration untouched.

    Example:
        >>> apply_overrides(config, {"detection": {"threshold": 3}})
    """
    cleaned = {
        section: {key: value for key, value in values.items() if value is not None}
        for section, values in overrides.items()
    }
    base = app_config.model_dump(mode="json")
    return validate_config_dict(_merge_sections(base, cleaned))


def validate_config_dict(config_dict: Dict[str, Any]) -> AppConfig:
    """
    Validate a raw configuration dictionary.

    Raises:
        ConfigurationError: With one readable error per invalid field
    """
    try:
        return AppConfig.model_validate(config_dict)
    except ValidationError as e:
        errors = []
        for error in e.errors():
            field_path = " -> ".join(str(loc) for loc in error["loc"])
            error_type = error["type"]

            if error_type == "extra_forbidden":
                errors.append(f"Unknown setting: {field_path}")
            elif error_type in ("int_type", "int_parsing", "string_type", "bool_type"):
                expected_type = error_type.split("_")[0]
                errors.append(
                    f"Invalid type for '{field_path}': expected {expected_type}, "
                    f"got {error.get('input')!r}"
                )
            elif "enum" in error_type:
                errors.append(f"Invalid value for '{field_path}': {error['msg']}")
            elif field_path:
                errors.append(f"{field_path}: {error['msg']}")
            else:
                errors.append(error["msg"])

        raise ConfigurationError(
            "Configuration validation failed",
            errors=errors,
            suggestions=[
                "Review config.example.yaml for the expected format",
                "Verify field types match the expected schema",
            ],
        )


def validate_config_file(config_path: Path) -> bool:
    """
    Validate a configuration file without reading the environment.

    Args:
        config_path: Path to configuration file

    Returns:
        True if valid, False otherwise (errors printed)
    """
    try:
        validate_config_dict(_read_config_file(config_path))
        print(f"✓ Configuration file {config_path} is valid")
        return True
    except ConfigurationError as e:
        print(f"✗ Configuration validation failed:\n{e}")
        return False


def _read_config_file(config_file: Path) -> Dict[str, Any]:
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigurationError(
            f"Configuration file not found: {config_file}",
            suggestions=[f"Ensure {config_file} exists and is readable"],
        )
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse YAML configuration: {e}",
            suggestions=[
                "Check YAML syntax in your config file",
                "Ensure proper indentation (use spaces, not tabs)",
            ],
        )
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read configuration file: {e}",
            suggestions=[f"Ensure {config_file} is readable", "Check file permissions"],
        )

    if config_dict is None:
        return {}

    if not isinstance(config_dict, dict):
        raise ConfigurationError(
            f"Configuration file {config_file} must contain a mapping at the top level",
            suggestions=["Review config.example.yaml for the expected format"],
        )

    return config_dict


def _find_config_file(config_path: Optional[Path] = None) -> Optional[Path]:
    """
    Locate the configuration file.

    Returns:
        Path to the configuration file, or None when no default file exists

    Raises:
        ConfigurationError: If an explicitly requested file does not exist
    """
    if config_path:
        if not config_path.exists():
            raise ConfigurationError(
                f"Specified configuration file not found: {config_path}",
                suggestions=[
                    f"Ensure {config_path} exists",
                    "Omit --config to use dupfinder.yaml or built-in defaults",
                ],
            )
        return config_path

    for candidate in DEFAULT_CONFIG_LOCATIONS:
        if candidate.exists():
            return candidate

    return None


def _merge_sections(
    base: Dict[str, Any], overrides: Dict[str, Dict[str, Any]]
) -> Dict[str, Any]:
    merged = dict(base)
    for section, values in overrides.items():
        current = merged.get(section)
        if isinstance(current, dict):
            merged[section] = {**current, **values}
        else:
            merged[section] = dict(values)
    return merged
