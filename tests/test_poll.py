import pytest

from timeside_importer.core.importing.errors import (RemoteError,
                                                     RemoteTransportError)
from timeside_importer.core.importing.models import Job, JobStatus
from timeside_importer.core.importing.poll import (DEFAULT_BACKOFF_SCHEDULE,
                                                   JobPoller, PollOutcome)

SCHEDULE = (1, 1, 2, 3, 5)


class ScriptedClient:
    """Returns the scripted statuses in order, repeating the last one."""

    def __init__(self, *script):
        self.script = list(script)
        self.retrievals = 0

    def retrieve_job(self, job_uuid):
        self.retrievals += 1
        entry = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(entry, Exception):
            raise entry
        return Job(uuid=job_uuid, status=entry)


JOB = Job(uuid='task-1', status=JobStatus.PENDING)


def make_poller(client, clock, **kwargs):
    kwargs.setdefault('schedule', SCHEDULE)
    return JobPoller(client, sleep=clock.sleep, clock=clock, **kwargs)


def test_default_schedule():
    assert DEFAULT_BACKOFF_SCHEDULE[:11] == (1, 1, 2, 3, 5, 8, 13, 21, 34, 55, 89)
    assert len(DEFAULT_BACKOFF_SCHEDULE) == 20
    assert DEFAULT_BACKOFF_SCHEDULE[-1] == 233


def test_done_on_first_check_does_not_sleep(clock):
    client = ScriptedClient(JobStatus.DONE)

    result = make_poller(client, clock).await_terminal(JOB)

    assert result.outcome == PollOutcome.DONE
    assert result.attempts == 0
    assert result.elapsed == 0
    assert clock.sleeps == []


def test_done_after_some_checks(clock):
    client = ScriptedClient(JobStatus.PENDING, JobStatus.RUNNING, JobStatus.RUNNING, JobStatus.DONE)

    result = make_poller(client, clock).await_terminal(JOB)

    assert result.outcome == PollOutcome.DONE
    assert result.final_status == JobStatus.DONE
    assert result.attempts == 3
    assert clock.sleeps == [1, 1, 2]
    assert result.elapsed == 4
    assert client.retrievals == 4


def test_never_done_times_out_after_the_whole_schedule(clock):
    client = ScriptedClient(JobStatus.RUNNING)

    result = make_poller(client, clock).await_terminal(JOB)

    assert result.outcome == PollOutcome.TIMED_OUT
    assert result.final_status == JobStatus.RUNNING
    assert result.attempts == len(SCHEDULE)
    assert clock.sleeps == list(SCHEDULE)
    assert client.retrievals == len(SCHEDULE) + 1


def test_failed_status_keeps_polling_by_default(clock):
    client = ScriptedClient(JobStatus.FAILED, JobStatus.FAILED, JobStatus.DONE)

    result = make_poller(client, clock).await_terminal(JOB)

    assert result.outcome == PollOutcome.DONE
    assert clock.sleeps == [1, 1]


def test_failed_status_stops_when_requested(clock):
    client = ScriptedClient(JobStatus.RUNNING, JobStatus.FAILED)

    result = make_poller(client, clock, stop_on_failed=True).await_terminal(JOB)

    assert result.outcome == PollOutcome.FAILED
    assert result.final_status == JobStatus.FAILED
    assert clock.sleeps == [1]


def test_first_check_failure_is_raised(clock):
    client = ScriptedClient(RemoteTransportError("connection refused"), JobStatus.DONE)

    with pytest.raises(RemoteTransportError):
        make_poller(client, clock).await_terminal(JOB)

    assert clock.sleeps == []


def test_later_transport_failure_counts_as_not_done(clock):
    client = ScriptedClient(JobStatus.RUNNING, RemoteTransportError("timeout"), JobStatus.DONE)

    result = make_poller(client, clock).await_terminal(JOB)

    assert result.outcome == PollOutcome.DONE
    assert clock.sleeps == [1, 1]


def test_later_client_error_is_raised(clock):
    client = ScriptedClient(JobStatus.RUNNING, RemoteError("not found", status=404))

    with pytest.raises(RemoteError):
        make_poller(client, clock).await_terminal(JOB)


@pytest.mark.parametrize("schedule", [(), (1, -1)])
def test_invalid_schedule_is_rejected(schedule):
    with pytest.raises(ValueError):
        JobPoller(ScriptedClient(JobStatus.DONE), schedule=schedule)
