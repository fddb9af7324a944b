"""Value objects used by a single scale-up invocation.

Everything here is created fresh for one event and discarded afterwards;
fleet state lives in EC2 and job state in GitHub.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from .exceptions import MalformedEventError


class EventType(str, Enum):
    """GitHub events that can trigger a scale-up."""

    WORKFLOW_JOB = "workflow_job"
    CHECK_RUN = "check_run"


class RunnerType(str, Enum):
    """Scope a runner is registered at."""

    ORG = "Org"
    REPO = "Repo"


class ScaleUpOutcome(str, Enum):
    """Non-error results of a scale-up invocation."""

    CREATED = "created"
    SKIPPED_AT_CAPACITY = "skipped_at_capacity"
    SKIPPED_NOT_QUEUED = "skipped_not_queued"


class CapacityDecision(str, Enum):
    """Whether the fleet has room for one more runner."""

    CREATE = "create"
    SKIP = "skip"


@dataclass(frozen=True)
class JobEvent:
    """One queued-job notification taken off the scale-up queue.

    ``event_type`` is coerced to :class:`EventType` when recognised. Any
    other value is kept as the raw string so that eligibility checks can
    reject it with a typed error instead of failing while parsing.
    """

    id: int
    event_type: EventType | str
    repository_owner: str
    repository_name: str
    installation_id: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.event_type, EventType):
            try:
                object.__setattr__(self, "event_type", EventType(self.event_type))
            except ValueError:
                pass

    @classmethod
    def from_message(cls, body: dict[str, Any]) -> "JobEvent":
        """Build an event from a decoded SQS message body.

        Raises:
            MalformedEventError: If a required key is missing or mistyped
        """
        try:
            return cls(
                id=int(body["id"]),
                event_type=str(body["eventType"]),
                repository_owner=str(body["repositoryOwner"]),
                repository_name=str(body["repositoryName"]),
                installation_id=int(body.get("installationId") or 0),
            )
        except KeyError as e:
            raise MalformedEventError(f"Job event is missing field {e}") from e
        except (TypeError, ValueError) as e:
            raise MalformedEventError(f"Job event has an invalid field: {e}") from e

    @property
    def event_name(self) -> str:
        """Event type as it appears on the wire."""
        if isinstance(self.event_type, EventType):
            return self.event_type.value
        return self.event_type

    @property
    def is_supported(self) -> bool:
        return isinstance(self.event_type, EventType)

    @property
    def repository_full_name(self) -> str:
        return f"{self.repository_owner}/{self.repository_name}"


@dataclass(frozen=True)
class RunnerScope:
    """Fleet partition key: the runner type and the owner it serves."""

    runner_type: RunnerType
    runner_owner: str

    @classmethod
    def for_event(cls, event: JobEvent, enable_org_level: bool) -> "RunnerScope":
        if enable_org_level:
            return cls(RunnerType.ORG, event.repository_owner)
        return cls(RunnerType.REPO, event.repository_full_name)

    @property
    def is_org(self) -> bool:
        return self.runner_type is RunnerType.ORG


@dataclass(frozen=True)
class Eligibility:
    """Result of a passed eligibility check."""

    ephemeral: bool
    scope: RunnerScope


@dataclass(frozen=True)
class InstanceCriteria:
    """EC2 instance selection for new runners."""

    instance_types: tuple[str, ...]
    target_capacity_type: str = "spot"
    max_spot_price: str | None = None
    instance_allocation_strategy: str = "lowest-price"


@dataclass(frozen=True)
class ScaleDecisionContext:
    """Configuration snapshot taken once per invocation."""

    enable_org_level: bool
    maximum_runners: int
    ephemeral_enabled: bool
    environment: str
    subnets: tuple[str, ...]
    launch_template_name: str
    instance_criteria: InstanceCriteria
    runner_extra_labels: str | None = None
    runner_group: str | None = None
    ghes_base_url: str | None = None

    def __post_init__(self) -> None:
        if self.maximum_runners < 1:
            raise ValueError("maximum_runners must be a positive integer")


@dataclass(frozen=True)
class RunnerInputParameters:
    """Everything the fleet manager needs to launch one runner."""

    environment: str
    runner_service_config: str = field(repr=False)
    runner_owner: str
    runner_type: RunnerType
    subnets: tuple[str, ...]
    launch_template_name: str
    instance_criteria: InstanceCriteria


@dataclass(frozen=True)
class RunnerInfo:
    """An active or pending runner instance."""

    instance_id: str
    launch_time: datetime | None = None
    owner: str | None = None
    runner_type: str | None = None
