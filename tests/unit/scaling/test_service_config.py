"""
Unit tests for the runner service configuration builder.

Why: The rendered string is passed verbatim to config.sh on the new
     instance; a wrong URL or flag order leaves a runner that never
     registers.

What: Tests URL derivation, flag ordering, optional flags and the
      structured RunnerServiceConfig renderer.

How: Calls the pure builder with constructed events.
"""

import pytest

from scale_runners.scaling.models import RunnerType
from scale_runners.scaling.service_config import (
    DEFAULT_GITHUB_URL,
    RunnerServiceConfig,
    build_service_config,
    registration_url,
)


class TestRegistrationUrl:
    def test_org_url_on_github_com(self, make_event) -> None:
        url = registration_url(None, RunnerType.ORG, make_event())
        assert url == f"{DEFAULT_GITHUB_URL}/acme"

    def test_repo_url_on_github_com(self, make_event) -> None:
        url = registration_url("", RunnerType.REPO, make_event())
        assert url == "https://github.com/acme/widgets"

    def test_custom_host_used_verbatim(self, make_event) -> None:
        url = registration_url("https://ghes.example.com", RunnerType.REPO, make_event())
        assert url == "https://ghes.example.com/acme/widgets"
        assert "/api/v3" not in url


class TestBuildServiceConfig:
    def test_minimal_org_config(self, make_event) -> None:
        config = build_service_config(
            None, None, None, False, "tok", RunnerType.ORG, make_event()
        )
        assert config == "--url https://github.com/acme --token tok"

    def test_full_repo_config_flag_order(self, make_event) -> None:
        """
        Why: Flags must follow a fixed order: url, token, labels, ephemeral,
             runner group.
        What: Tests a repository config with every optional flag set.
        How: Builds with labels, group and ephemeral, compares the string.
        """
        config = build_service_config(
            "gpu,linux", "builders", None, True, "tok", RunnerType.REPO, make_event()
        )
        assert config == (
            "--url https://github.com/acme/widgets --token tok --labels gpu,linux "
            "--ephemeral --runnergroup builders"
        )

    def test_org_config_has_no_runner_group(self, make_event) -> None:
        config = build_service_config(
            "linux", "builders", None, True, "tok", RunnerType.ORG, make_event()
        )
        assert config == (
            "--url https://github.com/acme --token tok --labels linux --ephemeral"
        )
        assert "--runnergroup" not in config

    def test_no_ephemeral_flag_for_persistent_runner(self, make_event) -> None:
        config = build_service_config(
            None, None, None, False, "tok", RunnerType.REPO, make_event()
        )
        assert "--ephemeral" not in config
        assert not config.endswith(" ")

    def test_empty_labels_are_omitted(self, make_event) -> None:
        config = build_service_config(
            "", None, None, False, "tok", RunnerType.ORG, make_event()
        )
        assert "--labels" not in config

    def test_ghes_base_url(self, make_event) -> None:
        config = build_service_config(
            None, None, "https://ghes.example.com", False, "tok", RunnerType.ORG,
            make_event(),
        )
        assert config.startswith("--url https://ghes.example.com/acme --token tok")


class TestRunnerServiceConfig:
    def test_render_switch_and_value_flags(self) -> None:
        config = RunnerServiceConfig().add("--url", "https://x").add("--ephemeral")
        assert config.render() == "--url https://x --ephemeral"
        assert str(config) == config.render()

    @pytest.mark.parametrize("value", ["", "two words", "tab\tseparated"])
    def test_rejects_values_that_would_split(self, value: str) -> None:
        with pytest.raises(ValueError):
            RunnerServiceConfig().add("--labels", value)

    def test_rejects_bare_flag_names(self) -> None:
        with pytest.raises(ValueError):
            RunnerServiceConfig().add("url", "https://x")
