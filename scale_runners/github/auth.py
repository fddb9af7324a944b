"""GitHub App authentication handlers.

Two kinds of credentials are involved in a scale-up:

- the App JWT, signed with the App's private key, which can only call
  ``/app`` endpoints (installation lookup and token exchange);
- the installation access token, which acts on behalf of one installation
  (job status, registration tokens).
"""

import base64
import binascii
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import jwt

from .exceptions import GitHubAuthenticationError

# GitHub rejects App JWTs that live longer than 10 minutes.
JWT_EXPIRATION_SECONDS = 600
JWT_CLOCK_DRIFT_SECONDS = 60


@dataclass
class AuthToken:
    """Authentication token with metadata."""

    token: str
    token_type: str = "Bearer"
    expires_at: int | None = None

    @property
    def is_expired(self) -> bool:
        """Check if token is expired."""
        if self.expires_at is None:
            return False
        return time.time() >= self.expires_at

    def to_header(self) -> dict[str, str]:
        """Convert to authorization header."""
        return {"Authorization": f"{self.token_type} {self.token}"}

    def __repr__(self) -> str:
        return f"AuthToken(token_type={self.token_type!r}, expires_at={self.expires_at})"


class AuthProvider(ABC):
    """Abstract base class for authentication providers."""

    @abstractmethod
    async def get_token(self) -> AuthToken:
        """Get authentication token."""


class GitHubAppAuth(AuthProvider):
    """Authenticates as the GitHub App itself using a short-lived JWT."""

    def __init__(self, app_id: str, private_key: str):
        """Initialize GitHub App authentication.

        Args:
            app_id: GitHub App ID
            private_key: PEM encoded private key for JWT signing
        """
        if not app_id or not private_key:
            raise GitHubAuthenticationError(
                "GitHub App ID and private key are required"
            )
        self.app_id = app_id
        self.private_key = private_key
        self._current_token: AuthToken | None = None

    @classmethod
    def from_base64_key(cls, app_id: str, private_key_base64: str) -> "GitHubAppAuth":
        """Create App auth from a base64 encoded PEM key, as stored in SSM."""
        try:
            private_key = base64.b64decode(private_key_base64).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise GitHubAuthenticationError(
                f"GitHub App private key is not valid base64: {e}"
            ) from e
        return cls(app_id=app_id, private_key=private_key)

    def _generate_jwt(self) -> str:
        """Generate JWT for GitHub App authentication."""
        now = int(time.time())
        payload = {
            "iat": now - JWT_CLOCK_DRIFT_SECONDS,
            "exp": now + JWT_EXPIRATION_SECONDS,
            "iss": self.app_id,
        }

        try:
            token = jwt.encode(payload, self.private_key, algorithm="RS256")
            return token if isinstance(token, str) else token.decode("utf-8")
        except Exception as e:
            raise GitHubAuthenticationError(f"Failed to generate JWT: {e}") from e

    async def get_token(self) -> AuthToken:
        """Get a valid App JWT, generating a new one when expired."""
        if self._current_token and not self._current_token.is_expired:
            return self._current_token

        self._current_token = AuthToken(
            token=self._generate_jwt(),
            token_type="Bearer",  # nosec B106
            # Refresh a little before GitHub considers the JWT expired
            expires_at=int(time.time()) + JWT_EXPIRATION_SECONDS - JWT_CLOCK_DRIFT_SECONDS,
        )
        return self._current_token


class TokenAuth(AuthProvider):
    """Static token authentication, used for installation access tokens."""

    DEFAULT_TOKEN_TYPE = "token"  # nosec B105

    def __init__(
        self,
        token: str,
        token_type: str | None = None,
        expires_at: int | None = None,
    ):
        """Initialize token authentication.

        Args:
            token: Authentication token
            token_type: Authorization scheme, ``token`` by default
            expires_at: Unix timestamp of token expiry, if known
        """
        if not token:
            raise GitHubAuthenticationError("Token is required")
        self._token = AuthToken(
            token=token,
            token_type=token_type or self.DEFAULT_TOKEN_TYPE,
            expires_at=expires_at,
        )

    @classmethod
    def from_installation_token(cls, payload: dict[str, Any]) -> "TokenAuth":
        """Build from the body of ``POST /app/installations/{id}/access_tokens``.

        Raises:
            GitHubAuthenticationError: If the body holds no usable token
        """
        try:
            expires_at = None
            if payload.get("expires_at"):
                expires_at = int(
                    datetime.fromisoformat(
                        payload["expires_at"].replace("Z", "+00:00")
                    ).timestamp()
                )
            token = payload["token"]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise GitHubAuthenticationError(
                f"Malformed installation token response: {e!r}",
                response_data=payload if isinstance(payload, dict) else None,
            ) from e
        return cls(token, expires_at=expires_at)

    async def get_token(self) -> AuthToken:
        """Return the static token."""
        if self._token.is_expired:
            raise GitHubAuthenticationError("Installation token has expired")
        return self._token
