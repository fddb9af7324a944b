"""GitHub API client package."""

from .auth import AuthProvider, AuthToken, GitHubAppAuth, TokenAuth
from .client import GitHubClient, GitHubClientConfig
from .control_plane import GitHubAppIdentityProvider, GitHubControlPlane
from .exceptions import (
    GitHubAuthenticationError,
    GitHubConnectionError,
    GitHubError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubServerError,
    GitHubValidationError,
)

__all__ = [
    "AuthProvider",
    "AuthToken",
    "GitHubAppAuth",
    "GitHubAppIdentityProvider",
    "GitHubAuthenticationError",
    "GitHubClient",
    "GitHubClientConfig",
    "GitHubConnectionError",
    "GitHubControlPlane",
    "GitHubError",
    "GitHubNotFoundError",
    "GitHubRateLimitError",
    "GitHubServerError",
    "GitHubValidationError",
    "TokenAuth",
]
