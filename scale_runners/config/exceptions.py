"""Configuration-related exceptions.

All of these are raised while the Lambda builds its settings, before any
queue record is looked at. They fail the whole invocation, so SQS retries
the batch and eventually moves it to the dead letter queue until the
deployment is fixed.
"""

from typing import Any


class ConfigurationError(Exception):
    """Base exception for settings that cannot be built."""


class ConfigurationFileError(ConfigurationError):
    """The YAML overlay named by ``SCALE_RUNNERS_CONFIG_PATH`` is unusable."""

    def __init__(self, message: str, file_path: str | None = None):
        super().__init__(message)
        self.file_path = file_path


class ConfigurationValidationError(ConfigurationError):
    """Lambda environment or overlay values are missing or invalid."""

    def __init__(self, message: str, validation_errors: list[Any] | None = None):
        """Initialize configuration validation error.

        Args:
            message: Human-readable error message
            validation_errors: Errors reported by pydantic, one per field
        """
        super().__init__(message)
        self.validation_errors = validation_errors or []

    @property
    def invalid_variables(self) -> list[str]:
        """Environment variable names of the rejected settings."""
        names = {
            str(error["loc"][0]).upper()
            for error in self.validation_errors
            if error.get("loc")
        }
        return sorted(names)


class EnvironmentVariableError(ConfigurationError):
    """A ``${VAR}`` reference in the YAML overlay has no value."""

    def __init__(self, variable_name: str):
        super().__init__(f"Required environment variable '{variable_name}' not found")
        self.variable_name = variable_name
