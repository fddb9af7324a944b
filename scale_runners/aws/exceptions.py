"""AWS resource exceptions."""

from typing import Any


class ProvisioningError(Exception):
    """Raised when a runner instance cannot be listed, launched or configured."""

    def __init__(
        self,
        message: str,
        errors: list[dict[str, Any]] | None = None,
    ):
        """Initialize provisioning error.

        Args:
            message: Error message
            errors: Per-request errors reported by EC2 Fleet, if any
        """
        super().__init__(message)
        self.errors = errors or []


class ParameterStoreError(Exception):
    """Raised when an SSM parameter cannot be read or written."""

    def __init__(self, message: str, parameter_name: str | None = None):
        super().__init__(message)
        self.parameter_name = parameter_name
