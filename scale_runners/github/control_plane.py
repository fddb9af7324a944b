"""GitHub App backed identity provider and control plane."""

import logging

from ..scaling.exceptions import UnsupportedEventTypeError
from ..scaling.interfaces import CIControlPlane, IdentityProvider
from ..scaling.models import EventType, JobEvent, RunnerScope
from .auth import GitHubAppAuth, TokenAuth
from .client import GitHubClient, GitHubClientConfig
from .exceptions import GitHubError

logger = logging.getLogger(__name__)


class GitHubControlPlane(CIControlPlane):
    """Control plane calls made with an installation access token."""

    def __init__(self, client: GitHubClient) -> None:
        self.client = client

    async def get_job_status(self, event: JobEvent) -> str:
        if event.event_type is EventType.WORKFLOW_JOB:
            data = await self.client.get_workflow_job(
                event.repository_owner, event.repository_name, event.id
            )
        elif event.event_type is EventType.CHECK_RUN:
            data = await self.client.get_check_run(
                event.repository_owner, event.repository_name, event.id
            )
        else:
            raise UnsupportedEventTypeError(event.event_name)
        return str(data.get("status", ""))

    async def issue_registration_token(self, scope: RunnerScope, event: JobEvent) -> str:
        if scope.is_org:
            data = await self.client.create_registration_token_for_org(
                event.repository_owner
            )
        else:
            data = await self.client.create_registration_token_for_repo(
                event.repository_owner, event.repository_name
            )
        token = data.get("token")
        if not token:
            raise GitHubError("Registration token missing from GitHub response")
        return str(token)

    async def close(self) -> None:
        await self.client.close()


class GitHubAppIdentityProvider(IdentityProvider):
    """Resolves installations with the App JWT and exchanges installation tokens."""

    def __init__(
        self,
        app_auth: GitHubAppAuth,
        config: GitHubClientConfig | None = None,
    ) -> None:
        """Initialize the identity provider.

        Args:
            app_auth: App JWT authentication
            config: Client configuration shared by app and installation clients
        """
        self.app_auth = app_auth
        self.config = config or GitHubClientConfig()

    async def resolve_installation(self, scope: RunnerScope, event: JobEvent) -> int:
        async with GitHubClient(self.app_auth, self.config) as app_client:
            if scope.is_org:
                data = await app_client.get_org_installation(event.repository_owner)
            else:
                data = await app_client.get_repo_installation(
                    event.repository_owner, event.repository_name
                )
        try:
            installation_id = int(data["id"])
        except (KeyError, TypeError, ValueError) as e:
            raise GitHubError(
                f"Installation id missing from GitHub response: {e!r}",
                response_data=data,
            ) from e
        logger.debug(
            f"Resolved installation {installation_id} for {scope.runner_owner}"
        )
        return installation_id

    async def authenticate(self, installation_id: int) -> CIControlPlane:
        async with GitHubClient(self.app_auth, self.config) as app_client:
            token_data = await app_client.create_installation_access_token(
                installation_id
            )
        installation_auth = TokenAuth.from_installation_token(token_data)
        return GitHubControlPlane(GitHubClient(installation_auth, self.config))
