"""SQS Lambda entry point for scale-up.

Each record carries one queued-job event. Records are handled one after
the other, and failures are reported per record through the partial batch
response so that SQS only redelivers what may still succeed:

- input errors and not-found errors are terminal and acknowledged;
- saturation, provisioning and other provider errors are returned in
  ``batchItemFailures`` and left to the queue's redelivery policy.

Settings, App credentials and client wiring are resolved once, before the
first record. A failure there, such as an unreadable SSM parameter,
raises out of the handler and fails the whole batch.
"""

import asyncio
import json
import logging
from typing import Any

from .aws.parameters import SSMParameterStore
from .aws.runners import EC2FleetManager
from .config.loader import load_settings
from .config.models import LogLevel, ScaleUpSettings
from .github.auth import GitHubAppAuth
from .github.client import GitHubClientConfig
from .github.control_plane import GitHubAppIdentityProvider
from .github.exceptions import GitHubNotFoundError
from .scaling.context import InvocationLogger
from .scaling.exceptions import MalformedEventError, ScaleInputError
from .scaling.models import JobEvent
from .scaling.scale_up import ScaleUpOrchestrator

logger = logging.getLogger(__name__)


def configure_logging(level: LogLevel) -> None:
    """Set the root log level; Lambda installs its own handler."""
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logging.getLogger().setLevel(level.value)


def resolve_app_auth(
    settings: ScaleUpSettings, parameter_store: SSMParameterStore | None = None
) -> GitHubAppAuth:
    """Build App auth from the environment, falling back to SSM parameters."""
    app_id = settings.github_app_id
    key_base64 = settings.github_app_key_base64

    if not app_id or not key_base64:
        parameter_store = parameter_store or SSMParameterStore(region=settings.aws_region)
        if not app_id and settings.parameter_github_app_id_name:
            app_id = parameter_store.get(settings.parameter_github_app_id_name)
        if not key_base64 and settings.parameter_github_app_key_base64_name:
            key_base64 = parameter_store.get(settings.parameter_github_app_key_base64_name)

    return GitHubAppAuth.from_base64_key(app_id or "", key_base64 or "")


def build_orchestrator(
    settings: ScaleUpSettings, parameter_store: SSMParameterStore | None = None
) -> ScaleUpOrchestrator:
    """Wire the GitHub and EC2 collaborators for one invocation."""
    parameter_store = parameter_store or SSMParameterStore(region=settings.aws_region)
    identity = GitHubAppIdentityProvider(
        resolve_app_auth(settings, parameter_store),
        GitHubClientConfig.for_ghes(settings.ghes_url),
    )
    fleet = EC2FleetManager(parameter_store=parameter_store, region=settings.aws_region)
    return ScaleUpOrchestrator(identity, fleet, settings.to_context())


def parse_record(record: dict[str, Any]) -> JobEvent:
    """Decode the job event carried by an SQS record.

    Raises:
        MalformedEventError: If the body is not a JSON job event
    """
    try:
        body = json.loads(record["body"])
    except (KeyError, TypeError, json.JSONDecodeError) as e:
        raise MalformedEventError(f"Record body is not valid JSON: {e}") from e
    if not isinstance(body, dict):
        raise MalformedEventError("Record body must be a JSON object")
    return JobEvent.from_message(body)


async def handle_records(
    records: list[dict[str, Any]], orchestrator: ScaleUpOrchestrator
) -> dict[str, Any]:
    """Run scale-up for every record and collect the ones to redeliver."""
    failures: list[dict[str, str]] = []

    for record in records:
        message_id = record.get("messageId", "")
        log = InvocationLogger(logger, message_id=message_id)
        try:
            job_event = parse_record(record)
            outcome = await orchestrator.scale_up(
                record.get("eventSource", ""), job_event, log
            )
            log.info(f"Scale-up finished: {outcome.value}")
        except (ScaleInputError, GitHubNotFoundError) as e:
            log.warning(f"Dropping event that cannot be handled: {e}")
        except Exception as e:
            log.error(f"Scale-up failed: {e}", exc_info=True)
            failures.append({"itemIdentifier": message_id})

    return {"batchItemFailures": failures}


def scale_up_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """AWS Lambda handler for the scale-up queue."""
    settings = load_settings()
    configure_logging(settings.log_level)
    orchestrator = build_orchestrator(settings)
    return asyncio.run(handle_records(event.get("Records", []), orchestrator))
