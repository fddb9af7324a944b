"""
Unit tests for the queued job verifier.

Why: A job claimed between publication and handling must not trigger a
     new runner.

What: Tests is_job_queued for queued and non-queued statuses, unsupported
      event types and not-found propagation.

How: Uses the in-memory control plane fake and a real InvocationLogger.
"""

import logging

import pytest

from scale_runners.github.exceptions import GitHubNotFoundError
from scale_runners.scaling.context import InvocationLogger
from scale_runners.scaling.exceptions import UnsupportedEventTypeError
from scale_runners.scaling.models import EventType
from scale_runners.scaling.verifier import is_job_queued


@pytest.fixture
def log() -> InvocationLogger:
    return InvocationLogger(logging.getLogger("test.verifier"))


@pytest.mark.parametrize("event_type", [EventType.WORKFLOW_JOB, EventType.CHECK_RUN])
async def test_queued_job(control_plane, make_event, log, event_type) -> None:
    event = make_event(event_type=event_type)

    assert await is_job_queued(control_plane, event, log) is True
    assert control_plane.status_calls == [event]


@pytest.mark.parametrize("status", ["in_progress", "completed", "waiting"])
async def test_not_queued(control_plane, make_event, log, caplog, status: str) -> None:
    control_plane.status = status

    with caplog.at_level(logging.INFO, logger="test.verifier"):
        assert await is_job_queued(control_plane, make_event(), log) is False

    assert "Job not queued" in caplog.text


async def test_unsupported_event_type_makes_no_call(control_plane, make_event, log) -> None:
    with pytest.raises(UnsupportedEventTypeError):
        await is_job_queued(control_plane, make_event(event_type="pull_request"), log)

    assert control_plane.status_calls == []


async def test_missing_job_propagates(control_plane, make_event, log) -> None:
    control_plane.status = "missing"

    with pytest.raises(GitHubNotFoundError):
        await is_job_queued(control_plane, make_event(), log)
