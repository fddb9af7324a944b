"""Re-check that a job is still waiting for a runner."""

from .context import InvocationLogger
from .exceptions import UnsupportedEventTypeError
from .interfaces import CIControlPlane
from .models import JobEvent

QUEUED_STATUS = "queued"


async def is_job_queued(
    control_plane: CIControlPlane,
    event: JobEvent,
    log: InvocationLogger,
) -> bool:
    """Ask the control plane whether the job behind ``event`` is still queued.

    Between publication and handling another runner may already have picked
    the job up, in which case no new runner is needed.

    Raises:
        UnsupportedEventTypeError: If the event type is not recognised
        GitHubNotFoundError: If the job or check run no longer exists
    """
    if not event.is_supported:
        raise UnsupportedEventTypeError(event.event_name)

    status = await control_plane.get_job_status(event)
    queued = status == QUEUED_STATUS
    if not queued:
        log.info(f"Job not queued (status: {status})")
    return queued
