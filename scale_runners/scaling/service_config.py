"""Runner service configuration.

The configuration is the argument list a new instance passes to the
runner's ``config.sh`` to register itself with GitHub. It is built as an
ordered list of flags and only rendered to a string at the boundary.
"""

from dataclasses import dataclass, field

from .models import JobEvent, RunnerType

DEFAULT_GITHUB_URL = "https://github.com"


@dataclass
class RunnerServiceConfig:
    """Ordered ``config.sh`` flags."""

    flags: list[tuple[str, str | None]] = field(default_factory=list)

    def add(self, flag: str, value: str | None = None) -> "RunnerServiceConfig":
        if not flag.startswith("--"):
            raise ValueError(f"Invalid flag {flag!r}")
        if value is not None and (not value or any(c.isspace() for c in value)):
            raise ValueError(f"Value for {flag} must be a non-empty single word")
        self.flags.append((flag, value))
        return self

    def render(self) -> str:
        parts: list[str] = []
        for flag, value in self.flags:
            parts.append(flag)
            if value is not None:
                parts.append(value)
        return " ".join(parts)

    def __str__(self) -> str:
        return self.render()


def registration_url(
    base_url: str | None, runner_type: RunnerType, event: JobEvent
) -> str:
    """URL the runner registers against: the org or the repository."""
    config_base_url = base_url or DEFAULT_GITHUB_URL
    if runner_type is RunnerType.ORG:
        return f"{config_base_url}/{event.repository_owner}"
    return f"{config_base_url}/{event.repository_owner}/{event.repository_name}"


def build_service_config(
    runner_extra_labels: str | None,
    runner_group: str | None,
    base_url: str | None,
    ephemeral: bool,
    token: str,
    runner_type: RunnerType,
    event: JobEvent,
) -> str:
    """Build the ``config.sh`` arguments for a new runner.

    Flags are emitted in the order url, token, labels, ephemeral, runner
    group. The runner group only applies to repository runners and is
    dropped for organization runners.

    Args:
        runner_extra_labels: Comma separated labels, if any
        runner_group: Runner group name, if any
        base_url: GitHub Enterprise Server URL, ``https://github.com`` if unset
        ephemeral: Whether the runner handles a single job
        token: Registration token
        runner_type: Org or repository scope
        event: The event the runner is created for

    Returns:
        Rendered configuration string
    """
    config = RunnerServiceConfig()
    config.add("--url", registration_url(base_url, runner_type, event))
    config.add("--token", token)
    if runner_extra_labels:
        config.add("--labels", runner_extra_labels)
    if ephemeral:
        config.add("--ephemeral")
    if runner_group and runner_type is RunnerType.REPO:
        config.add("--runnergroup", runner_group)
    return config.render()
