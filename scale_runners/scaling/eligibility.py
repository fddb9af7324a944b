"""Eligibility checks run before any network call."""

from .exceptions import (
    UnsupportedCombinationError,
    UnsupportedEventTypeError,
    UnsupportedSourceError,
)
from .models import Eligibility, EventType, JobEvent, RunnerScope

SQS_EVENT_SOURCE = "aws:sqs"


def check_eligibility(
    event_source: str,
    event: JobEvent,
    enable_org_level: bool,
    ephemeral_enabled: bool,
    expected_source: str = SQS_EVENT_SOURCE,
) -> Eligibility:
    """Validate that an event may trigger a scale-up.

    Args:
        event_source: Source identifier of the delivering queue record
        event: The queued-job event
        enable_org_level: Whether runners are registered at org level
        ephemeral_enabled: Whether ephemeral runners are configured
        expected_source: Source identifier the handler accepts

    Returns:
        Whether the runner is ephemeral, and the scope it belongs to

    Raises:
        UnsupportedSourceError: If the event was not delivered by the queue
        UnsupportedEventTypeError: If the event type is not recognised
        UnsupportedCombinationError: If ephemeral runners are enabled for a
            non ``workflow_job`` event
    """
    if event_source != expected_source:
        raise UnsupportedSourceError(event_source, expected_source)

    if not event.is_supported:
        raise UnsupportedEventTypeError(event.event_name)

    is_workflow_job = event.event_type is EventType.WORKFLOW_JOB
    if ephemeral_enabled and not is_workflow_job:
        raise UnsupportedCombinationError(event.event_name)

    return Eligibility(
        ephemeral=ephemeral_enabled and is_workflow_job,
        scope=RunnerScope.for_event(event, enable_org_level),
    )
