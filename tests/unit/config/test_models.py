"""
Unit tests for scale-up settings.

Why: Settings come from the Lambda environment under names the deployment
     already uses; defaults and list parsing must match what it sets.
"""

import pytest
from pydantic import ValidationError

from scale_runners.config.models import (
    AllocationStrategy,
    LogLevel,
    ScaleUpSettings,
    TargetCapacityType,
)


class TestScaleUpSettings:
    def test_defaults(self, settings_env) -> None:
        settings = ScaleUpSettings()

        assert settings.enable_organization_runners is True
        assert settings.runners_maximum_count == 3
        assert settings.enable_ephemeral_runners is False
        assert settings.instance_target_capacity_type is TargetCapacityType.SPOT
        assert settings.instance_allocation_strategy is AllocationStrategy.LOWEST_PRICE
        assert settings.log_level is LogLevel.INFO
        assert settings.ghes_url is None

    def test_comma_lists(self, settings_env) -> None:
        settings_env.setenv("SUBNET_IDS", " subnet-a , subnet-b,, ")

        settings = ScaleUpSettings()

        assert settings.subnet_ids == ["subnet-a", "subnet-b"]
        assert settings.instance_types == ["m5.large", "c5.large"]

    def test_environment_values(self, settings_env) -> None:
        settings_env.setenv("ENABLE_ORGANIZATION_RUNNERS", "false")
        settings_env.setenv("RUNNERS_MAXIMUM_COUNT", "10")
        settings_env.setenv("ENABLE_EPHEMERAL_RUNNERS", "true")
        settings_env.setenv("INSTANCE_TARGET_CAPACITY_TYPE", "on-demand")
        settings_env.setenv("LOG_LEVEL", "debug")

        settings = ScaleUpSettings()

        assert settings.enable_organization_runners is False
        assert settings.runners_maximum_count == 10
        assert settings.enable_ephemeral_runners is True
        assert settings.instance_target_capacity_type is TargetCapacityType.ON_DEMAND
        assert settings.log_level is LogLevel.DEBUG

    def test_empty_variables_are_unset(self, settings_env) -> None:
        settings_env.setenv("RUNNERS_MAXIMUM_COUNT", "")
        settings_env.setenv("RUNNER_EXTRA_LABELS", "")

        settings = ScaleUpSettings()

        assert settings.runners_maximum_count == 3
        assert settings.runner_extra_labels is None

    def test_maximum_must_be_positive(self, settings_env) -> None:
        settings_env.setenv("RUNNERS_MAXIMUM_COUNT", "0")

        with pytest.raises(ValidationError):
            ScaleUpSettings()

    def test_required_fields(self, clean_env) -> None:
        clean_env.setenv("GITHUB_APP_ID", "1")
        clean_env.setenv("GITHUB_APP_KEY_BASE64", "a2V5")

        with pytest.raises(ValidationError) as exc_info:
            ScaleUpSettings()

        missing = {error["loc"][0] for error in exc_info.value.errors()}
        assert {"environment", "subnet_ids", "instance_types", "launch_template_name"} <= missing

    def test_ghes_url(self, settings_env) -> None:
        settings_env.setenv("GHES_URL", "https://ghes.example.com/")
        assert ScaleUpSettings().ghes_url == "https://ghes.example.com"

        settings_env.setenv("GHES_URL", "ghes.example.com")
        with pytest.raises(ValidationError, match="scheme"):
            ScaleUpSettings()

    @pytest.mark.parametrize(
        ("variable", "value"),
        [
            ("RUNNER_GROUP_NAME", "Default Group"),
            ("RUNNER_EXTRA_LABELS", "gpu, linux"),
            ("RUNNER_EXTRA_LABELS", "gpu\tlinux"),
        ],
    )
    def test_whitespace_in_runner_arguments(
        self, settings_env, variable: str, value: str
    ) -> None:
        """
        Why: Labels and the runner group are passed to config.sh as single
             arguments; a value with whitespace can never register a runner.
        What: The value is rejected when settings load, before any event is
              handled or a registration token is requested.
        """
        settings_env.setenv(variable, value)

        with pytest.raises(ValidationError, match="whitespace"):
            ScaleUpSettings()

    def test_app_credentials_from_parameter_names(self, settings_env) -> None:
        settings_env.delenv("GITHUB_APP_ID")
        settings_env.delenv("GITHUB_APP_KEY_BASE64")
        settings_env.setenv("PARAMETER_GITHUB_APP_ID_NAME", "/runners/app-id")
        settings_env.setenv("PARAMETER_GITHUB_APP_KEY_BASE64_NAME", "/runners/app-key")

        settings = ScaleUpSettings()

        assert settings.github_app_id is None
        assert settings.parameter_github_app_id_name == "/runners/app-id"

    def test_app_credentials_required(self, settings_env) -> None:
        settings_env.delenv("GITHUB_APP_KEY_BASE64")

        with pytest.raises(ValidationError, match="GITHUB_APP_KEY_BASE64"):
            ScaleUpSettings()


class TestToContext:
    def test_snapshot(self, settings_env) -> None:
        settings_env.setenv("RUNNER_EXTRA_LABELS", "gpu,large")
        settings_env.setenv("RUNNER_GROUP_NAME", "ci")
        settings_env.setenv("INSTANCE_MAX_SPOT_PRICE", "0.2")
        settings_env.setenv("GHES_URL", "https://ghes.example.com")

        context = ScaleUpSettings().to_context()

        assert context.enable_org_level is True
        assert context.maximum_runners == 3
        assert context.ephemeral_enabled is False
        assert context.environment == "test"
        assert context.subnets == ("subnet-a", "subnet-b")
        assert context.launch_template_name == "runner-template"
        assert context.instance_criteria.instance_types == ("m5.large", "c5.large")
        assert context.instance_criteria.target_capacity_type == "spot"
        assert context.instance_criteria.max_spot_price == "0.2"
        assert context.instance_criteria.instance_allocation_strategy == "lowest-price"
        assert context.runner_extra_labels == "gpu,large"
        assert context.runner_group == "ci"
        assert context.ghes_base_url == "https://ghes.example.com"
