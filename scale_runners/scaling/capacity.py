"""Fleet cap check."""

from .exceptions import FleetSaturatedError
from .models import CapacityDecision


def decide_capacity(
    current_runners: int, maximum_runners: int, ephemeral: bool
) -> CapacityDecision:
    """Decide whether one more runner fits under the cap.

    The count comes from a non-atomic list call, so concurrent invocations
    can both see room and overshoot the cap; scale-down trims the excess.

    Raises:
        FleetSaturatedError: If the fleet is full and the runner is
            ephemeral, since no persistent runner will pick the job up later
    """
    if current_runners < maximum_runners:
        return CapacityDecision.CREATE
    if ephemeral:
        raise FleetSaturatedError(current_runners, maximum_runners)
    return CapacityDecision.SKIP
