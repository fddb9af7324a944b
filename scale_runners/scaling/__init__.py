"""Scale-up decision engine."""

from .capacity import decide_capacity
from .context import InvocationLogger
from .eligibility import SQS_EVENT_SOURCE, check_eligibility
from .exceptions import (
    FleetSaturatedError,
    MalformedEventError,
    ScaleError,
    ScaleInputError,
    UnsupportedCombinationError,
    UnsupportedEventTypeError,
    UnsupportedSourceError,
)
from .interfaces import CIControlPlane, FleetManager, IdentityProvider
from .models import (
    CapacityDecision,
    Eligibility,
    EventType,
    InstanceCriteria,
    JobEvent,
    RunnerInfo,
    RunnerInputParameters,
    RunnerScope,
    RunnerType,
    ScaleDecisionContext,
    ScaleUpOutcome,
)
from .scale_up import ScaleUpOrchestrator
from .service_config import RunnerServiceConfig, build_service_config
from .verifier import is_job_queued

__all__ = [
    "SQS_EVENT_SOURCE",
    "CIControlPlane",
    "CapacityDecision",
    "Eligibility",
    "EventType",
    "FleetManager",
    "FleetSaturatedError",
    "IdentityProvider",
    "InstanceCriteria",
    "InvocationLogger",
    "JobEvent",
    "MalformedEventError",
    "RunnerInfo",
    "RunnerInputParameters",
    "RunnerScope",
    "RunnerServiceConfig",
    "RunnerType",
    "ScaleDecisionContext",
    "ScaleError",
    "ScaleInputError",
    "ScaleUpOrchestrator",
    "ScaleUpOutcome",
    "UnsupportedCombinationError",
    "UnsupportedEventTypeError",
    "UnsupportedSourceError",
    "build_service_config",
    "check_eligibility",
    "decide_capacity",
    "is_job_queued",
]
