"""Scale-up decision errors.

Input errors are terminal: retrying the same event can never succeed.
``FleetSaturatedError`` is terminal too, but signals that an ephemeral job
will not get a runner from this invocation, so the caller can alert or
requeue with backoff.
"""


class ScaleError(Exception):
    """Base exception for scale-up decision failures."""


class ScaleInputError(ScaleError):
    """The event or configuration can never be acted upon."""


class UnsupportedSourceError(ScaleInputError):
    """The event did not arrive through the expected queue."""

    def __init__(self, event_source: str, expected_source: str):
        super().__init__(
            f"Cannot handle events from source '{event_source}', "
            f"only '{expected_source}' is supported"
        )
        self.event_source = event_source
        self.expected_source = expected_source


class UnsupportedEventTypeError(ScaleInputError):
    """The event type is neither ``workflow_job`` nor ``check_run``."""

    def __init__(self, event_type: str):
        super().__init__(f"Event {event_type} is not supported")
        self.event_type = event_type


class UnsupportedCombinationError(ScaleInputError):
    """Ephemeral runners were requested for an event other than ``workflow_job``."""

    def __init__(self, event_type: str):
        super().__init__(
            f"The event type {event_type} is not supported in combination with "
            "ephemeral runners. Please ensure you have enabled workflow_job events."
        )
        self.event_type = event_type


class MalformedEventError(ScaleInputError):
    """The queue message body is not a valid job event."""


class FleetSaturatedError(ScaleError):
    """No ephemeral runner was created because the fleet is at its maximum."""

    def __init__(self, current_runners: int, maximum_runners: int):
        super().__init__(
            "No runners created: maximum of runners reached "
            f"({current_runners} of {maximum_runners})."
        )
        self.current_runners = current_runners
        self.maximum_runners = maximum_runners
