"""GitHub API client exceptions."""

from collections.abc import Mapping
from typing import Any


class GitHubError(Exception):
    """Base exception for GitHub API errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_data: dict[str, Any] | None = None,
    ):
        """Initialize GitHub error.

        Args:
            message: Error message
            status_code: HTTP status code
            response_data: Response data from GitHub API
        """
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data or {}


class GitHubAuthenticationError(GitHubError):
    """Raised when the App JWT or installation token is rejected."""


class GitHubRateLimitError(GitHubError):
    """Raised when the installation's rate limit is exhausted."""

    def __init__(
        self,
        message: str,
        reset_time: int | None = None,
        remaining: int = 0,
        limit: int = 0,
    ):
        """Initialize rate limit error.

        Args:
            message: Error message
            reset_time: Unix timestamp when rate limit resets
            remaining: Remaining API calls
            limit: Total rate limit
        """
        super().__init__(message, status_code=403)
        self.reset_time = reset_time
        self.remaining = remaining
        self.limit = limit


class GitHubNotFoundError(GitHubError):
    """Raised when a job, check run or App installation does not exist."""


class GitHubValidationError(GitHubError):
    """Raised when GitHub rejects the request payload (422)."""


class GitHubServerError(GitHubError):
    """Raised when GitHub returns a 5xx error."""


class GitHubConnectionError(GitHubError):
    """Raised when GitHub cannot be reached or the request times out."""


def error_for_status(
    status: int,
    error_data: Any,
    headers: Mapping[str, str] | None = None,
) -> GitHubError:
    """Map an HTTP error response onto the matching exception.

    Args:
        status: HTTP status code of the response
        error_data: Decoded error body, normally ``{"message": ...}``
        headers: Response headers, used for rate limit details

    Returns:
        Exception instance to raise
    """
    if not isinstance(error_data, dict):
        error_data = {"body": error_data}
    message = str(error_data.get("message") or f"HTTP {status}")
    headers = headers or {}

    if status == 401:
        return GitHubAuthenticationError(message, status, error_data)
    if status == 403:
        if "rate limit" in message.lower():
            reset_time = headers.get("X-RateLimit-Reset")
            return GitHubRateLimitError(
                message,
                reset_time=int(reset_time) if reset_time else None,
                remaining=int(headers.get("X-RateLimit-Remaining", "0")),
                limit=int(headers.get("X-RateLimit-Limit", "0")),
            )
        return GitHubAuthenticationError(message, status, error_data)
    if status == 404:
        return GitHubNotFoundError(message, status, error_data)
    if status == 422:
        return GitHubValidationError(message, status, error_data)
    if 500 <= status < 600:
        return GitHubServerError(message, status, error_data)
    return GitHubError(message, status, error_data)
