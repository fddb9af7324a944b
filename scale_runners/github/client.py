"""Async GitHub REST client for the endpoints the scale-up path needs."""

import asyncio
import json
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any

import aiohttp

from .auth import AuthProvider
from .exceptions import (
    GitHubConnectionError,
    GitHubError,
    GitHubServerError,
    error_for_status,
)

logger = logging.getLogger(__name__)

PUBLIC_API_URL = "https://api.github.com"


@dataclass
class GitHubClientConfig:
    """Configuration for GitHub client.

    Retries default to zero: redelivery is owned by the queue, and a
    scale-up invocation performs each call at most once.
    """

    base_url: str = PUBLIC_API_URL
    timeout: int = 30
    max_retries: int = 0
    retry_backoff_factor: float = 2.0
    user_agent: str = "scale-runners/0.1"

    @classmethod
    def for_ghes(cls, ghes_url: str | None, **kwargs: Any) -> "GitHubClientConfig":
        """Build config for github.com, or a GHES host's ``/api/v3`` API."""
        if ghes_url:
            return cls(base_url=f"{ghes_url.rstrip('/')}/api/v3", **kwargs)
        return cls(**kwargs)


class GitHubClient:
    """Async GitHub API client."""

    def __init__(
        self,
        auth: AuthProvider,
        config: GitHubClientConfig | None = None,
    ) -> None:
        """Initialize GitHub client.

        Args:
            auth: Authentication provider
            config: Client configuration
        """
        self.auth = auth
        self.config = config or GitHubClientConfig()

        # HTTP session will be initialized on first use
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "GitHubClient":
        """Async context manager entry."""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def _ensure_session(self) -> None:
        """Ensure HTTP session is initialized."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.timeout),
                headers={
                    "User-Agent": self.config.user_agent,
                    "Accept": "application/vnd.github+json",
                    "X-GitHub-Api-Version": "2022-11-28",
                },
            )

    async def close(self) -> None:
        """Close HTTP session and cleanup resources."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    def _url(self, path: str) -> str:
        # urljoin would drop the /api/v3 prefix of GHES base URLs
        return f"{self.config.base_url.rstrip('/')}/{path.lstrip('/')}"

    async def _make_request(
        self,
        method: str,
        path: str,
        data: dict[str, Any] | None = None,
        correlation_id: str | None = None,
    ) -> dict[str, Any]:
        """Make HTTP request and decode the JSON body.

        Only connection failures and 5xx responses are retried, and only
        when ``max_retries`` is positive.

        Args:
            method: HTTP method
            path: API path relative to the base URL
            data: Request body data
            correlation_id: Request correlation ID

        Returns:
            Decoded JSON response, empty for 204 responses

        Raises:
            GitHubError: Various GitHub API errors
        """
        correlation_id = correlation_id or str(uuid.uuid4())[:8]
        url = self._url(path)

        auth_token = await self.auth.get_token()
        request_kwargs: dict[str, Any] = {"headers": auth_token.to_header()}
        if data is not None:
            request_kwargs["json"] = data

        await self._ensure_session()
        if not self._session:
            raise GitHubConnectionError("Failed to initialize HTTP session")

        last_exception: GitHubError | None = None
        for attempt in range(self.config.max_retries + 1):
            try:
                start_time = time.time()
                logger.debug(
                    f"GitHub API request [{correlation_id}] {method} {url} "
                    f"(attempt {attempt + 1})"
                )

                async with self._session.request(
                    method, url, **request_kwargs
                ) as response:
                    logger.debug(
                        f"GitHub API response [{correlation_id}] "
                        f"{response.status} in {time.time() - start_time:.2f}s"
                    )

                    if response.status == 204:
                        return {}
                    if response.status in (200, 201):
                        json_data = await response.json()
                        if not isinstance(json_data, dict):
                            raise GitHubError(
                                f"Expected a JSON object from {method} {url}",
                                status_code=response.status,
                                response_data={"body": json_data},
                            )
                        return json_data

                    await self._handle_error_response(response, correlation_id)

            except GitHubServerError as e:
                last_exception = e

            except TimeoutError:
                last_exception = GitHubConnectionError(
                    f"Request timeout for {method} {url}"
                )

            except aiohttp.ClientError as e:
                last_exception = GitHubConnectionError(
                    f"Connection error for {method} {url}: {e}"
                )

            if attempt < self.config.max_retries:
                backoff_time = self.config.retry_backoff_factor**attempt
                logger.warning(
                    f"Request [{correlation_id}] failed (attempt {attempt + 1}), "
                    f"retrying in {backoff_time:.1f}s: {last_exception}"
                )
                await asyncio.sleep(backoff_time)

        if last_exception:
            raise last_exception
        raise GitHubError(f"Request failed after {self.config.max_retries} retries")

    async def _handle_error_response(
        self, response: aiohttp.ClientResponse, correlation_id: str
    ) -> None:
        """Raise the exception matching an error response.

        Args:
            response: HTTP response
            correlation_id: Request correlation ID

        Raises:
            GitHubError: Appropriate error based on status code
        """
        try:
            error_data = await response.json()
        except (json.JSONDecodeError, aiohttp.ContentTypeError):
            error_data = {"message": await response.text()}

        error = error_for_status(response.status, error_data, response.headers)
        logger.warning(
            f"GitHub API error [{correlation_id}] {response.status}: {error}"
        )
        raise error

    async def get(self, path: str) -> dict[str, Any]:
        """Make GET request to GitHub API."""
        return await self._make_request("GET", path)

    async def post(
        self, path: str, data: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Make POST request to GitHub API."""
        return await self._make_request("POST", path, data)

    # App endpoints (JWT authenticated)

    async def get_org_installation(self, org: str) -> dict[str, Any]:
        """Get the App installation for an organization."""
        return await self.get(f"/orgs/{org}/installation")

    async def get_repo_installation(self, owner: str, repo: str) -> dict[str, Any]:
        """Get the App installation for a repository."""
        return await self.get(f"/repos/{owner}/{repo}/installation")

    async def create_installation_access_token(
        self, installation_id: int
    ) -> dict[str, Any]:
        """Exchange the App JWT for an installation access token."""
        return await self.post(f"/app/installations/{installation_id}/access_tokens")

    # Installation endpoints

    async def get_workflow_job(self, owner: str, repo: str, job_id: int) -> dict[str, Any]:
        """Get a workflow run job.

        Args:
            owner: Repository owner
            repo: Repository name
            job_id: Workflow job ID

        Returns:
            Job data, including ``status``
        """
        return await self.get(f"/repos/{owner}/{repo}/actions/jobs/{job_id}")

    async def get_check_run(
        self, owner: str, repo: str, check_run_id: int
    ) -> dict[str, Any]:
        """Get a check run, including its ``status``."""
        return await self.get(f"/repos/{owner}/{repo}/check-runs/{check_run_id}")

    async def create_registration_token_for_org(self, org: str) -> dict[str, Any]:
        """Create a runner registration token for an organization."""
        return await self.post(f"/orgs/{org}/actions/runners/registration-token")

    async def create_registration_token_for_repo(
        self, owner: str, repo: str
    ) -> dict[str, Any]:
        """Create a runner registration token for a repository."""
        return await self.post(
            f"/repos/{owner}/{repo}/actions/runners/registration-token"
        )
