"""Scale-up settings.

Settings are read from the Lambda environment using the variable names
the deployment already sets (``RUNNERS_MAXIMUM_COUNT``, ``SUBNET_IDS``, ...).
Empty variables count as unset. List values are comma separated.
"""

from enum import Enum
from typing import Annotated, Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from ..scaling.models import InstanceCriteria, ScaleDecisionContext

CommaList = Annotated[list[str], NoDecode]


class LogLevel(str, Enum):
    """Supported logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class TargetCapacityType(str, Enum):
    """EC2 Fleet purchasing option."""

    SPOT = "spot"
    ON_DEMAND = "on-demand"


class AllocationStrategy(str, Enum):
    """EC2 Fleet spot allocation strategies."""

    LOWEST_PRICE = "lowest-price"
    DIVERSIFIED = "diversified"
    CAPACITY_OPTIMIZED = "capacity-optimized"
    CAPACITY_OPTIMIZED_PRIORITIZED = "capacity-optimized-prioritized"
    PRICE_CAPACITY_OPTIMIZED = "price-capacity-optimized"


class ScaleUpSettings(BaseSettings):
    """Process configuration for the scale-up Lambda."""

    # Scaling policy
    enable_organization_runners: bool = Field(
        default=True, description="Register runners at organization level"
    )
    runners_maximum_count: int = Field(
        default=3, ge=1, description="Maximum number of runners per scope"
    )
    enable_ephemeral_runners: bool = Field(
        default=False, description="Create single-job ephemeral runners"
    )

    # Runner registration
    runner_extra_labels: str | None = Field(
        default=None, description="Comma separated extra runner labels"
    )
    runner_group_name: str | None = Field(
        default=None, description="Runner group for repository runners"
    )
    ghes_url: str | None = Field(
        default=None, description="GitHub Enterprise Server URL, unset for github.com"
    )

    # Fleet provisioning
    environment: str = Field(description="Deployment environment, used in tags")
    subnet_ids: CommaList = Field(
        min_length=1, description="Subnets runners can be launched in"
    )
    instance_types: CommaList = Field(
        min_length=1, description="Instance types runners can be launched as"
    )
    launch_template_name: str = Field(description="EC2 launch template for runners")
    instance_target_capacity_type: TargetCapacityType = Field(
        default=TargetCapacityType.SPOT, description="Spot or on-demand instances"
    )
    instance_max_spot_price: str | None = Field(
        default=None, description="Maximum total spot price per hour"
    )
    instance_allocation_strategy: AllocationStrategy = Field(
        default=AllocationStrategy.LOWEST_PRICE,
        description="Spot allocation strategy",
    )

    # GitHub App credentials, given directly or as SSM parameter names
    github_app_id: str | None = Field(default=None, description="GitHub App ID")
    github_app_key_base64: str | None = Field(
        default=None, description="Base64 encoded GitHub App private key"
    )
    parameter_github_app_id_name: str | None = Field(
        default=None, description="SSM parameter holding the GitHub App ID"
    )
    parameter_github_app_key_base64_name: str | None = Field(
        default=None, description="SSM parameter holding the base64 private key"
    )

    aws_region: str | None = Field(default=None, description="AWS region")
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_ignore_empty=True,
        extra="ignore",
    )

    @field_validator("subnet_ids", "instance_types", mode="before")
    @classmethod
    def split_comma_list(cls, v: Any) -> Any:
        """Accept ``a,b`` strings as well as lists."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("runner_extra_labels", "runner_group_name")
    @classmethod
    def reject_whitespace(cls, v: str | None) -> str | None:
        """Values are passed to ``config.sh`` as a single argument."""
        if v is not None and any(c.isspace() for c in v):
            raise ValueError("must not contain whitespace")
        return v

    @field_validator("ghes_url")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str | None:
        if v is None:
            return v
        if not v.startswith(("http://", "https://")):
            raise ValueError("GHES URL must include scheme")
        return v.rstrip("/")

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @model_validator(mode="after")
    def validate_app_credentials(self) -> "ScaleUpSettings":
        """Each App credential must come from the environment or from SSM."""
        if not (self.github_app_id or self.parameter_github_app_id_name):
            raise ValueError(
                "GITHUB_APP_ID or PARAMETER_GITHUB_APP_ID_NAME must be set"
            )
        if not (self.github_app_key_base64 or self.parameter_github_app_key_base64_name):
            raise ValueError(
                "GITHUB_APP_KEY_BASE64 or PARAMETER_GITHUB_APP_KEY_BASE64_NAME must be set"
            )
        return self

    def to_context(self) -> ScaleDecisionContext:
        """Snapshot the settings the decision engine needs."""
        return ScaleDecisionContext(
            enable_org_level=self.enable_organization_runners,
            maximum_runners=self.runners_maximum_count,
            ephemeral_enabled=self.enable_ephemeral_runners,
            environment=self.environment,
            subnets=tuple(self.subnet_ids),
            launch_template_name=self.launch_template_name,
            instance_criteria=InstanceCriteria(
                instance_types=tuple(self.instance_types),
                target_capacity_type=self.instance_target_capacity_type.value,
                max_spot_price=self.instance_max_spot_price,
                instance_allocation_strategy=self.instance_allocation_strategy.value,
            ),
            runner_extra_labels=self.runner_extra_labels,
            runner_group=self.runner_group_name,
            ghes_base_url=self.ghes_url,
        )
