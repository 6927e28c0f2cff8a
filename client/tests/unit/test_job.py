"""
Unit tests for the Job lifecycle model.
"""

import pytest
from pydantic import ValidationError

from trendmaker.exceptions import InvalidTransitionError
from trendmaker.models import Job, JobPhase, RenderRequest, TERMINAL_PHASES, TRANSITIONS


@pytest.fixture
def queued_job():
    return Job.start(RenderRequest(title="Hello", duration=5)).mark_queued("abc123")


class TestJobTransitions:
    """Tests for legal transitions."""

    def test_start_is_submitting_without_id(self):
        """Test that a started job is submitting with no id."""
        job = Job.start(RenderRequest(title="Hello"))

        assert job.phase is JobPhase.SUBMITTING
        assert job.id is None
        assert job.is_active
        assert job.request.title == "Hello"

    def test_mark_queued_sets_id(self, queued_job):
        """Test that queuing assigns the server id."""
        assert queued_job.phase is JobPhase.QUEUED
        assert queued_job.id == "abc123"
        assert queued_job.server_state == "queued"

    def test_transitions_return_new_objects(self, queued_job):
        """Test that transitions leave the original job untouched."""
        processing = queued_job.mark_progress("processing")

        assert processing is not queued_job
        assert queued_job.phase is JobPhase.QUEUED
        assert processing.phase is JobPhase.PROCESSING

    def test_queued_state_stays_queued(self, queued_job):
        """Test that a queued server state keeps the job queued."""
        assert queued_job.mark_progress("queued").phase is JobPhase.QUEUED

    def test_unknown_state_is_processing(self, queued_job):
        """Test that other server states map to processing."""
        job = queued_job.mark_progress("rendering")

        assert job.phase is JobPhase.PROCESSING
        assert job.server_state == "rendering"

    def test_completed_carries_url_only(self, queued_job):
        """Test that a completed job has a URL and no error."""
        job = queued_job.mark_progress("processing").mark_completed("https://x/files/a.mp4")

        assert job.phase is JobPhase.COMPLETED
        assert job.result_url == "https://x/files/a.mp4"
        assert job.error_message is None
        assert job.is_terminal

    def test_failed_carries_error_only(self, queued_job):
        """Test that a failed job has an error and no URL."""
        job = queued_job.mark_failed("encode error", state="failed")

        assert job.phase is JobPhase.FAILED
        assert job.error_message == "encode error"
        assert job.result_url is None

    def test_cancel_returns_to_idle_keeping_id(self, queued_job):
        """Test that cancel returns to idle and keeps the id."""
        job = queued_job.cancel()

        assert job.phase is JobPhase.IDLE
        assert job.id == "abc123"
        assert job.is_cancelled
        assert not job.is_active


class TestJobInvariants:
    """Tests for forbidden transitions and field invariants."""

    @pytest.mark.parametrize("terminal", sorted(TERMINAL_PHASES, key=lambda p: p.value))
    def test_terminal_phases_have_no_exits(self, terminal):
        """Test that terminal phases have no outgoing transitions."""
        assert TRANSITIONS[terminal] == frozenset()

    def test_no_transition_after_completed(self, queued_job):
        """Test that a completed job cannot change phase."""
        job = queued_job.mark_completed("/files/a.mp4")

        with pytest.raises(InvalidTransitionError):
            job.mark_progress("processing")
        with pytest.raises(InvalidTransitionError):
            job.mark_failed("late")
        with pytest.raises(InvalidTransitionError):
            job.cancel()

    def test_no_transition_after_transport_error(self, queued_job):
        """Test that a transport error is final."""
        job = queued_job.mark_transport_error("Status HTTP 502")

        with pytest.raises(InvalidTransitionError):
            job.mark_completed("/files/a.mp4")

    def test_id_is_assigned_once(self, queued_job):
        """Test that a job id cannot be reassigned."""
        with pytest.raises(InvalidTransitionError):
            queued_job.mark_queued("other")

    def test_cancelled_job_cannot_resume(self, queued_job):
        """Test that a cancelled job cannot be polled again."""
        with pytest.raises(InvalidTransitionError):
            queued_job.cancel().mark_progress("processing")

    def test_submitting_cannot_be_polled(self):
        """Test that a submitting job cannot report progress."""
        with pytest.raises(InvalidTransitionError):
            Job.start().mark_progress("processing")

    def test_empty_job_id_rejected(self):
        """Test that an empty job id is refused."""
        with pytest.raises(ValueError):
            Job.start().mark_queued("")

    def test_result_url_outside_completed_rejected(self):
        """Test that only completed jobs may carry a URL."""
        with pytest.raises(ValidationError):
            Job(id="a", phase=JobPhase.PROCESSING, result_url="/files/a.mp4")

    def test_error_outside_failure_rejected(self):
        """Test that only failed phases may carry an error."""
        with pytest.raises(ValidationError):
            Job(id="a", phase=JobPhase.QUEUED, error_message="nope")

    def test_job_is_frozen(self, queued_job):
        """Test that jobs cannot be mutated."""
        with pytest.raises(ValidationError):
            queued_job.phase = JobPhase.COMPLETED
