"""AWS implementations of the runner fleet."""

from .exceptions import ParameterStoreError, ProvisioningError
from .parameters import SSMParameterStore
from .runners import EC2FleetManager, build_fleet_request, runner_config_parameter_name

__all__ = [
    "EC2FleetManager",
    "ParameterStoreError",
    "ProvisioningError",
    "SSMParameterStore",
    "build_fleet_request",
    "runner_config_parameter_name",
]
