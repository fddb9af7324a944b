"""Scale-up orchestration for a single queued-job event.

Per invocation the engine moves through::

    Received -> Validated -> (IdentityResolved) -> (Verified | SkippedVerification)
             -> CapacityChecked -> Created | SkippedAtCapacity | Failed

Every network call happens sequentially and nothing is retried here; errors
propagate unchanged so the queue layer can decide on redelivery.
"""

import logging

from .capacity import decide_capacity
from .context import InvocationLogger
from .eligibility import SQS_EVENT_SOURCE, check_eligibility
from .exceptions import FleetSaturatedError
from .interfaces import CIControlPlane, FleetManager, IdentityProvider
from .models import (
    CapacityDecision,
    Eligibility,
    JobEvent,
    RunnerInputParameters,
    ScaleDecisionContext,
    ScaleUpOutcome,
)
from .service_config import build_service_config
from .verifier import is_job_queued

logger = logging.getLogger(__name__)


class ScaleUpOrchestrator:
    """Decides whether to create one runner for an event, and creates it."""

    def __init__(
        self,
        identity: IdentityProvider,
        fleet: FleetManager,
        context: ScaleDecisionContext,
        expected_source: str = SQS_EVENT_SOURCE,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            identity: Resolves and authenticates App installations
            fleet: Lists and creates runner instances
            context: Configuration snapshot for this invocation
            expected_source: Event source the orchestrator accepts
        """
        self.identity = identity
        self.fleet = fleet
        self.context = context
        self.expected_source = expected_source

    async def scale_up(
        self,
        event_source: str,
        event: JobEvent,
        log: InvocationLogger | None = None,
    ) -> ScaleUpOutcome:
        """Handle one queued-job event.

        Args:
            event_source: Source identifier of the queue record
            event: The queued-job event
            log: Invocation logger, created if not given

        Returns:
            ``CREATED``, ``SKIPPED_AT_CAPACITY`` or ``SKIPPED_NOT_QUEUED``

        Raises:
            ScaleInputError: If the event is not eligible
            FleetSaturatedError: If an ephemeral runner cannot be created
            GitHubError: On control plane failures, including not-found
            ProvisioningError: If the runner cannot be launched
        """
        log = log or InvocationLogger(logger)
        log.info(
            f"Received {event.event_name} from {event.repository_full_name}"
        )

        eligibility = check_eligibility(
            event_source,
            event,
            enable_org_level=self.context.enable_org_level,
            ephemeral_enabled=self.context.ephemeral_enabled,
            expected_source=self.expected_source,
        )
        scope = eligibility.scope
        log = log.bind(
            runner_type=scope.runner_type.value,
            runner_owner=scope.runner_owner,
            event=event.event_name,
            job_id=event.id,
        )

        installation_id = await self._resolve_installation_id(eligibility, event)
        control_plane = await self.identity.authenticate(installation_id)
        try:
            return await self._scale_up_with(control_plane, eligibility, event, log)
        finally:
            await control_plane.close()

    async def _resolve_installation_id(
        self, eligibility: Eligibility, event: JobEvent
    ) -> int:
        if event.installation_id:
            return event.installation_id
        return await self.identity.resolve_installation(eligibility.scope, event)

    async def _scale_up_with(
        self,
        control_plane: CIControlPlane,
        eligibility: Eligibility,
        event: JobEvent,
        log: InvocationLogger,
    ) -> ScaleUpOutcome:
        ephemeral = eligibility.ephemeral
        scope = eligibility.scope

        if not ephemeral and not await is_job_queued(control_plane, event, log):
            return ScaleUpOutcome.SKIPPED_NOT_QUEUED

        current_runners = await self.fleet.list_runners(
            environment=self.context.environment,
            runner_type=scope.runner_type.value,
            runner_owner=scope.runner_owner,
        )
        maximum_runners = self.context.maximum_runners
        log.info(f"Current runners: {len(current_runners)} of {maximum_runners}")

        try:
            decision = decide_capacity(len(current_runners), maximum_runners, ephemeral)
        except FleetSaturatedError:
            log.info("No runner will be created, maximum number of runners reached.")
            raise

        if decision is CapacityDecision.SKIP:
            log.info("No runner will be created, maximum number of runners reached.")
            return ScaleUpOutcome.SKIPPED_AT_CAPACITY

        log.info("Attempting to launch a new runner")
        token = await control_plane.issue_registration_token(scope, event)
        runner_service_config = build_service_config(
            runner_extra_labels=self.context.runner_extra_labels,
            runner_group=self.context.runner_group,
            base_url=self.context.ghes_base_url,
            ephemeral=ephemeral,
            token=token,
            runner_type=scope.runner_type,
            event=event,
        )

        await self.fleet.create_runner(
            RunnerInputParameters(
                environment=self.context.environment,
                runner_service_config=runner_service_config,
                runner_owner=scope.runner_owner,
                runner_type=scope.runner_type,
                subnets=self.context.subnets,
                launch_template_name=self.context.launch_template_name,
                instance_criteria=self.context.instance_criteria,
            )
        )
        return ScaleUpOutcome.CREATED
