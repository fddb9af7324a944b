"""Configuration for the scale-up Lambda.

Example usage:
    from scale_runners.config import load_settings

    settings = load_settings()
    context = settings.to_context()
"""

from .exceptions import (
    ConfigurationError,
    ConfigurationFileError,
    ConfigurationValidationError,
    EnvironmentVariableError,
)
from .loader import load_settings, read_config_file, substitute_env_vars
from .models import AllocationStrategy, LogLevel, ScaleUpSettings, TargetCapacityType

__all__ = [
    "AllocationStrategy",
    "ConfigurationError",
    "ConfigurationFileError",
    "ConfigurationValidationError",
    "EnvironmentVariableError",
    "LogLevel",
    "ScaleUpSettings",
    "TargetCapacityType",
    "load_settings",
    "read_config_file",
    "substitute_env_vars",
]
