"""EC2 backed runner fleet.

Runners are plain EC2 instances tagged with the environment, runner type
and owner they serve. A new instance reads its ``config.sh`` arguments from
the SSM parameter ``{environment}-{instance_id}`` when it boots.
"""

import asyncio
import logging
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..scaling.interfaces import FleetManager
from ..scaling.models import RunnerInfo, RunnerInputParameters
from .exceptions import ParameterStoreError, ProvisioningError
from .parameters import SSMParameterStore

logger = logging.getLogger(__name__)

RUNNER_APPLICATION_TAG = "github-action-runner"
ACTIVE_INSTANCE_STATES = ("running", "pending")


def runner_config_parameter_name(environment: str, instance_id: str) -> str:
    """SSM parameter a runner instance reads its service config from."""
    return f"{environment}-{instance_id}"


def _runner_tags(params: RunnerInputParameters) -> list[dict[str, str]]:
    return [
        {"Key": "Application", "Value": RUNNER_APPLICATION_TAG},
        {"Key": "Environment", "Value": params.environment},
        {"Key": "Type", "Value": params.runner_type.value},
        {"Key": "Owner", "Value": params.runner_owner},
    ]


def build_fleet_request(params: RunnerInputParameters) -> dict[str, Any]:
    """Build the ``CreateFleet`` request for a single instant runner.

    Every subnet is combined with every instance type so EC2 can pick any
    pool that has capacity.
    """
    criteria = params.instance_criteria
    overrides = [
        {"SubnetId": subnet, "InstanceType": instance_type}
        for subnet in params.subnets
        for instance_type in criteria.instance_types
    ]
    spot_options: dict[str, Any] = {
        "AllocationStrategy": criteria.instance_allocation_strategy,
    }
    if criteria.max_spot_price:
        spot_options["MaxTotalPrice"] = criteria.max_spot_price

    return {
        "LaunchTemplateConfigs": [
            {
                "LaunchTemplateSpecification": {
                    "LaunchTemplateName": params.launch_template_name,
                    "Version": "$Default",
                },
                "Overrides": overrides,
            }
        ],
        "SpotOptions": spot_options,
        "TargetCapacitySpecification": {
            "TotalTargetCapacity": 1,
            "DefaultTargetCapacityType": criteria.target_capacity_type,
        },
        "TagSpecifications": [
            {"ResourceType": "instance", "Tags": _runner_tags(params)}
        ],
        "Type": "instant",
    }


class EC2FleetManager(FleetManager):
    """Lists and launches runner instances through the EC2 API.

    boto3 is synchronous, so calls are made in a worker thread.
    """

    def __init__(
        self,
        ec2_client: Any = None,
        parameter_store: SSMParameterStore | None = None,
        region: str | None = None,
    ) -> None:
        """Initialize the fleet manager.

        Args:
            ec2_client: boto3 EC2 client, created when not given
            parameter_store: Store for runner service configs
            region: AWS region for clients created here
        """
        self._ec2 = ec2_client or boto3.client(
            "ec2",
            region_name=region,
            config=Config(user_agent_extra="scale-runners"),
        )
        self._parameters = parameter_store or SSMParameterStore(region=region)

    async def list_runners(
        self, environment: str, runner_type: str, runner_owner: str
    ) -> list[RunnerInfo]:
        return await asyncio.to_thread(
            self._describe_runners, environment, runner_type, runner_owner
        )

    def _describe_runners(
        self, environment: str, runner_type: str, runner_owner: str
    ) -> list[RunnerInfo]:
        filters = [
            {"Name": "instance-state-name", "Values": list(ACTIVE_INSTANCE_STATES)},
            {"Name": "tag:Application", "Values": [RUNNER_APPLICATION_TAG]},
            {"Name": "tag:Environment", "Values": [environment]},
            {"Name": "tag:Type", "Values": [runner_type]},
            {"Name": "tag:Owner", "Values": [runner_owner]},
        ]

        runners: list[RunnerInfo] = []
        try:
            paginator = self._ec2.get_paginator("describe_instances")
            for page in paginator.paginate(Filters=filters):
                for reservation in page.get("Reservations", []):
                    for instance in reservation.get("Instances", []):
                        tags = {
                            tag["Key"]: tag["Value"] for tag in instance.get("Tags", [])
                        }
                        runners.append(
                            RunnerInfo(
                                instance_id=instance["InstanceId"],
                                launch_time=instance.get("LaunchTime"),
                                owner=tags.get("Owner"),
                                runner_type=tags.get("Type"),
                            )
                        )
        except (BotoCoreError, ClientError) as e:
            raise ProvisioningError(f"Failed to list runner instances: {e}") from e

        return runners

    async def create_runner(self, params: RunnerInputParameters) -> None:
        await asyncio.to_thread(self._create_runner, params)

    def _create_runner(self, params: RunnerInputParameters) -> None:
        logger.info(
            f"Launching runner for {params.runner_type.value} {params.runner_owner} "
            f"using template {params.launch_template_name}"
        )
        try:
            fleet = self._ec2.create_fleet(**build_fleet_request(params))
        except (BotoCoreError, ClientError) as e:
            raise ProvisioningError(f"Failed to create runner fleet: {e}") from e

        instance_ids = [
            instance_id
            for instance in fleet.get("Instances", [])
            for instance_id in instance.get("InstanceIds", [])
        ]
        if not instance_ids:
            errors = fleet.get("Errors", [])
            logger.warning(f"No runner instance created, fleet errors: {errors}")
            raise ProvisioningError("No runner instance created", errors=errors)

        logger.info(f"Created runner instance(s): {', '.join(instance_ids)}")
        for instance_id in instance_ids:
            try:
                self._parameters.put_secure(
                    runner_config_parameter_name(params.environment, instance_id),
                    params.runner_service_config,
                )
            except ParameterStoreError as e:
                raise ProvisioningError(
                    f"Failed to store service config for {instance_id}: {e}"
                ) from e
