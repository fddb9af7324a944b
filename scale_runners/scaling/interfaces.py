"""Contracts for the collaborators the scale-up engine consumes.

The engine only depends on these abstractions, so tests can drive it with
in-memory fakes and the GitHub/EC2 implementations stay swappable.
"""

from abc import ABC, abstractmethod

from .models import JobEvent, RunnerInfo, RunnerInputParameters, RunnerScope


class CIControlPlane(ABC):
    """CI control plane operations scoped to one App installation."""

    @abstractmethod
    async def get_job_status(self, event: JobEvent) -> str:
        """Return the current status of the job or check run behind ``event``.

        Raises:
            GitHubNotFoundError: If the job or check run no longer exists
            UnsupportedEventTypeError: If the event type cannot be queried
        """

    @abstractmethod
    async def issue_registration_token(self, scope: RunnerScope, event: JobEvent) -> str:
        """Issue a short-lived runner registration token for ``scope``."""

    async def close(self) -> None:
        """Release any resources held by the client."""


class IdentityProvider(ABC):
    """Resolves App installations and authenticates against them."""

    @abstractmethod
    async def resolve_installation(self, scope: RunnerScope, event: JobEvent) -> int:
        """Look up the installation id for an org or repository.

        Raises:
            GitHubNotFoundError: If the App is not installed for the scope
        """

    @abstractmethod
    async def authenticate(self, installation_id: int) -> CIControlPlane:
        """Return a control plane client authenticated as the installation."""


class FleetManager(ABC):
    """Lists and creates runner instances."""

    @abstractmethod
    async def list_runners(
        self, environment: str, runner_type: str, runner_owner: str
    ) -> list[RunnerInfo]:
        """List active and pending runners for one scope."""

    @abstractmethod
    async def create_runner(self, params: RunnerInputParameters) -> None:
        """Launch one runner. Does not wait for it to register.

        Raises:
            ProvisioningError: On any underlying resource failure
        """
