"""Settings loading.

The loading hierarchy is:
1. Default values from the settings model
2. Environment variables
3. Optional YAML file (``SCALE_RUNNERS_CONFIG_PATH`` or an explicit path)
4. Runtime overrides

String values in the YAML file may reference environment variables as
``${VAR_NAME}`` or ``${VAR_NAME:default_value}``.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .exceptions import (
    ConfigurationFileError,
    ConfigurationValidationError,
    EnvironmentVariableError,
)
from .models import ScaleUpSettings

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV_VAR = "SCALE_RUNNERS_CONFIG_PATH"

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::([^}]*))?\}")


def substitute_env_vars(value: Any) -> Any:
    """Recursively substitute ``${VAR}`` references in strings.

    Raises:
        EnvironmentVariableError: If a variable without default is unset
    """
    if isinstance(value, str):

        def replacer(match: re.Match[str]) -> str:
            var_name, default_value = match.group(1), match.group(2)
            env_value = os.getenv(var_name)
            if env_value is not None:
                return env_value
            if default_value is not None:
                return default_value
            raise EnvironmentVariableError(var_name)

        return _ENV_VAR_PATTERN.sub(replacer, value)
    if isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [substitute_env_vars(item) for item in value]
    return value


def read_config_file(config_path: str | Path) -> dict[str, Any]:
    """Read a YAML settings overlay.

    Raises:
        ConfigurationFileError: If the file is missing, unreadable or not a mapping
    """
    config_path = Path(config_path)

    if not config_path.is_file():
        raise ConfigurationFileError(
            f"Configuration file not found: {config_path}", file_path=str(config_path)
        )

    try:
        with open(config_path, encoding="utf-8") as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationFileError(
            f"Failed to parse YAML configuration: {e}", file_path=str(config_path)
        ) from e
    except OSError as e:
        raise ConfigurationFileError(
            f"Failed to read configuration file: {e}", file_path=str(config_path)
        ) from e

    if config_data is None:
        return {}
    if not isinstance(config_data, dict):
        raise ConfigurationFileError(
            "Configuration file must contain a mapping", file_path=str(config_path)
        )
    return substitute_env_vars(config_data)


def load_settings(
    config_path: str | Path | None = None, **overrides: Any
) -> ScaleUpSettings:
    """Build settings for one invocation.

    Args:
        config_path: YAML overlay, defaults to ``$SCALE_RUNNERS_CONFIG_PATH``
        **overrides: Field values taking precedence over every other source

    Returns:
        Validated settings

    Raises:
        ConfigurationFileError: If the overlay cannot be read
        ConfigurationValidationError: If the resulting settings are invalid
    """
    config_path = config_path or os.getenv(CONFIG_PATH_ENV_VAR)
    file_data = read_config_file(config_path) if config_path else {}

    try:
        return ScaleUpSettings(**{**file_data, **overrides})
    except ValidationError as e:
        error = ConfigurationValidationError(
            f"Configuration validation failed: {e}",
            validation_errors=e.errors(),
        )
        logger.error(
            f"Invalid scale-up settings: {', '.join(error.invalid_variables)}"
        )
        raise error from e
