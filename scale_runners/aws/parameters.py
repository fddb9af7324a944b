"""SSM Parameter Store access."""

import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import ParameterStoreError

logger = logging.getLogger(__name__)


class SSMParameterStore:
    """Thin wrapper around the SSM client for secure string parameters."""

    def __init__(self, client: Any = None, region: str | None = None) -> None:
        self._client = client or boto3.client("ssm", region_name=region)

    def get(self, name: str, decrypt: bool = True) -> str:
        """Read a parameter value.

        Raises:
            ParameterStoreError: If the parameter is missing or unreadable
        """
        try:
            response = self._client.get_parameter(Name=name, WithDecryption=decrypt)
        except (BotoCoreError, ClientError) as e:
            raise ParameterStoreError(
                f"Failed to read parameter {name}: {e}", parameter_name=name
            ) from e
        return str(response["Parameter"]["Value"])

    def put_secure(self, name: str, value: str) -> None:
        """Store a value as a ``SecureString`` parameter.

        Raises:
            ParameterStoreError: If the parameter cannot be written
        """
        try:
            self._client.put_parameter(
                Name=name, Value=value, Type="SecureString", Overwrite=True
            )
        except (BotoCoreError, ClientError) as e:
            raise ParameterStoreError(
                f"Failed to write parameter {name}: {e}", parameter_name=name
            ) from e
        logger.debug(f"Stored parameter {name}")
