"""
Shared fixtures for scale-up tests.

Provides job events, a decision context and in-memory fakes for the GitHub
control plane, the identity provider and the runner fleet, so the decision
engine can be exercised without network access.
"""

from collections.abc import Callable
from typing import Any

import pytest

from scale_runners.github.exceptions import GitHubNotFoundError
from scale_runners.scaling.interfaces import CIControlPlane, FleetManager, IdentityProvider
from scale_runners.scaling.models import (
    EventType,
    InstanceCriteria,
    JobEvent,
    RunnerInfo,
    RunnerInputParameters,
    RunnerScope,
    ScaleDecisionContext,
)

SETTINGS_ENV_VARS = (
    "ENABLE_ORGANIZATION_RUNNERS",
    "RUNNERS_MAXIMUM_COUNT",
    "RUNNER_EXTRA_LABELS",
    "RUNNER_GROUP_NAME",
    "ENVIRONMENT",
    "GHES_URL",
    "SUBNET_IDS",
    "INSTANCE_TYPES",
    "INSTANCE_TARGET_CAPACITY_TYPE",
    "ENABLE_EPHEMERAL_RUNNERS",
    "LAUNCH_TEMPLATE_NAME",
    "INSTANCE_MAX_SPOT_PRICE",
    "INSTANCE_ALLOCATION_STRATEGY",
    "GITHUB_APP_ID",
    "GITHUB_APP_KEY_BASE64",
    "PARAMETER_GITHUB_APP_ID_NAME",
    "PARAMETER_GITHUB_APP_KEY_BASE64_NAME",
    "AWS_REGION",
    "LOG_LEVEL",
    "SCALE_RUNNERS_CONFIG_PATH",
)


class FakeControlPlane(CIControlPlane):
    """Control plane answering from a fixed job status."""

    def __init__(self, status: str = "queued", token: str = "reg-token-123") -> None:
        self.status = status
        self.token = token
        self.status_calls: list[JobEvent] = []
        self.token_calls: list[RunnerScope] = []
        self.closed = False

    async def get_job_status(self, event: JobEvent) -> str:
        self.status_calls.append(event)
        if self.status == "missing":
            raise GitHubNotFoundError("Not Found", status_code=404)
        return self.status

    async def issue_registration_token(self, scope: RunnerScope, event: JobEvent) -> str:
        self.token_calls.append(scope)
        return self.token

    async def close(self) -> None:
        self.closed = True


class FakeIdentityProvider(IdentityProvider):
    """Identity provider handing out one fake control plane."""

    def __init__(self, control_plane: FakeControlPlane, installation_id: int = 42) -> None:
        self.control_plane = control_plane
        self.installation_id = installation_id
        self.resolve_calls: list[RunnerScope] = []
        self.authenticated_with: list[int] = []

    async def resolve_installation(self, scope: RunnerScope, event: JobEvent) -> int:
        self.resolve_calls.append(scope)
        return self.installation_id

    async def authenticate(self, installation_id: int) -> CIControlPlane:
        self.authenticated_with.append(installation_id)
        return self.control_plane

    @property
    def network_calls(self) -> int:
        return len(self.resolve_calls) + len(self.authenticated_with)


class FakeFleet(FleetManager):
    """Fleet with a fixed number of running instances."""

    def __init__(self, current_runners: int = 0) -> None:
        self.current_runners = current_runners
        self.list_calls: list[tuple[str, str, str]] = []
        self.created: list[RunnerInputParameters] = []

    async def list_runners(
        self, environment: str, runner_type: str, runner_owner: str
    ) -> list[RunnerInfo]:
        self.list_calls.append((environment, runner_type, runner_owner))
        return [RunnerInfo(instance_id=f"i-{n}") for n in range(self.current_runners)]

    async def create_runner(self, params: RunnerInputParameters) -> None:
        self.created.append(params)


@pytest.fixture
def make_event() -> Callable[..., JobEvent]:
    """Factory for job events with sensible defaults."""

    def _make(**overrides: Any) -> JobEvent:
        values: dict[str, Any] = {
            "id": 1,
            "event_type": EventType.WORKFLOW_JOB,
            "repository_owner": "acme",
            "repository_name": "widgets",
            "installation_id": 0,
        }
        values.update(overrides)
        return JobEvent(**values)

    return _make


@pytest.fixture
def make_context() -> Callable[..., ScaleDecisionContext]:
    """Factory for decision contexts with sensible defaults."""

    def _make(**overrides: Any) -> ScaleDecisionContext:
        values: dict[str, Any] = {
            "enable_org_level": True,
            "maximum_runners": 3,
            "ephemeral_enabled": False,
            "environment": "test",
            "subnets": ("subnet-a", "subnet-b"),
            "launch_template_name": "runner-template",
            "instance_criteria": InstanceCriteria(instance_types=("m5.large",)),
        }
        values.update(overrides)
        return ScaleDecisionContext(**values)

    return _make


@pytest.fixture
def control_plane() -> FakeControlPlane:
    return FakeControlPlane()


@pytest.fixture
def identity(control_plane: FakeControlPlane) -> FakeIdentityProvider:
    return FakeIdentityProvider(control_plane)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove every settings variable from the environment."""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def settings_env(clean_env: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Minimal valid settings environment."""
    clean_env.setenv("ENVIRONMENT", "test")
    clean_env.setenv("SUBNET_IDS", "subnet-a,subnet-b")
    clean_env.setenv("INSTANCE_TYPES", "m5.large,c5.large")
    clean_env.setenv("LAUNCH_TEMPLATE_NAME", "runner-template")
    clean_env.setenv("GITHUB_APP_ID", "1234")
    clean_env.setenv("GITHUB_APP_KEY_BASE64", "a2V5")
    return clean_env


@pytest.fixture
def make_fleet() -> Callable[[int], FakeFleet]:
    return FakeFleet
