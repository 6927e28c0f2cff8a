"""
Render job as observed by the client.

A Job is immutable: every lifecycle step returns a new Job, and the
transition table below rejects any step out of a terminal phase.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from trendmaker.exceptions import InvalidTransitionError

from .render_request import RenderRequest
from .status_response import QUEUED_STATE


class JobPhase(str, Enum):
    """Lifecycle stage of a render job."""

    IDLE = "idle"
    SUBMITTING = "submitting"
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    TRANSPORT_ERROR = "transport_error"


TERMINAL_PHASES = frozenset(
    {JobPhase.COMPLETED, JobPhase.FAILED, JobPhase.TRANSPORT_ERROR}
)
ACTIVE_PHASES = frozenset({JobPhase.SUBMITTING, JobPhase.QUEUED, JobPhase.PROCESSING})
POLLING_PHASES = frozenset({JobPhase.QUEUED, JobPhase.PROCESSING})
ERROR_PHASES = frozenset({JobPhase.FAILED, JobPhase.TRANSPORT_ERROR})

_POLLING_TARGETS = frozenset(
    {
        JobPhase.QUEUED,
        JobPhase.PROCESSING,
        JobPhase.COMPLETED,
        JobPhase.FAILED,
        JobPhase.TRANSPORT_ERROR,
        JobPhase.IDLE,
    }
)

TRANSITIONS: dict[JobPhase, frozenset] = {
    JobPhase.IDLE: frozenset({JobPhase.SUBMITTING}),
    JobPhase.SUBMITTING: frozenset({JobPhase.QUEUED, JobPhase.IDLE}),
    JobPhase.QUEUED: _POLLING_TARGETS,
    JobPhase.PROCESSING: _POLLING_TARGETS,
    JobPhase.COMPLETED: frozenset(),
    JobPhase.FAILED: frozenset(),
    JobPhase.TRANSPORT_ERROR: frozenset(),
}


class Job(BaseModel):
    """
    One server-side render task.

    Attributes:
        id: Server-assigned identifier, set once when submission succeeds
        phase: Current lifecycle phase
        server_state: Raw ``state`` string from the latest status response
        result_url: Playable video location, only when completed
        error_message: Error text, only when failed or transport_error
        request: Render request that created this job
    """

    id: Optional[str] = Field(None, description="Server-assigned job identifier")
    phase: JobPhase = Field(JobPhase.IDLE, description="Lifecycle phase")
    server_state: Optional[str] = Field(None, description="Latest raw server state")
    result_url: Optional[str] = Field(None, description="Produced video location")
    error_message: Optional[str] = Field(None, description="Error details")
    request: Optional[RenderRequest] = Field(None, description="Originating request")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_phase_fields(self) -> "Job":
        if self.result_url is not None and self.phase is not JobPhase.COMPLETED:
            raise ValueError("result_url is only allowed on completed jobs")
        if self.phase is JobPhase.COMPLETED and not self.result_url:
            raise ValueError("completed jobs require a result_url")
        if self.error_message is not None and self.phase not in ERROR_PHASES:
            raise ValueError("error_message is only allowed on failed jobs")
        if self.phase in POLLING_PHASES | TERMINAL_PHASES and not self.id:
            raise ValueError(f"{self.phase.value} jobs require an id")
        return self

    @property
    def is_terminal(self) -> bool:
        return self.phase in TERMINAL_PHASES

    @property
    def is_active(self) -> bool:
        return self.phase in ACTIVE_PHASES

    @property
    def is_cancelled(self) -> bool:
        return self.phase is JobPhase.IDLE and self.id is not None

    def _transition(self, target: JobPhase, **updates) -> "Job":
        if target not in TRANSITIONS[self.phase] or self.is_cancelled:
            raise InvalidTransitionError(self.phase.value, target.value)

        fields = {
            "id": self.id,
            "phase": target,
            "server_state": self.server_state,
            "result_url": None,
            "error_message": None,
            "request": self.request,
        }
        fields.update(updates)
        return Job(**fields)

    @classmethod
    def start(cls, request: Optional[RenderRequest] = None) -> "Job":
        """Create a job for a submission that is about to be sent."""
        return cls()._transition(JobPhase.SUBMITTING, request=request)

    def mark_queued(self, job_id: str) -> "Job":
        """Record the server-assigned id after a successful submission."""
        if self.phase is not JobPhase.SUBMITTING or self.id is not None:
            raise InvalidTransitionError(self.phase.value, JobPhase.QUEUED.value)
        if not job_id:
            raise ValueError("job_id must be a non-empty string")
        return self._transition(JobPhase.QUEUED, id=job_id, server_state=QUEUED_STATE)

    def mark_progress(self, state: Optional[str]) -> "Job":
        """Record a non-terminal server state; "queued" stays queued, anything else is processing."""
        target = JobPhase.QUEUED if state == QUEUED_STATE else JobPhase.PROCESSING
        if self.phase not in POLLING_PHASES:
            raise InvalidTransitionError(self.phase.value, target.value)
        return self._transition(target, server_state=state)

    def mark_completed(self, result_url: str, state: Optional[str] = None) -> "Job":
        if self.phase not in POLLING_PHASES:
            raise InvalidTransitionError(self.phase.value, JobPhase.COMPLETED.value)
        return self._transition(
            JobPhase.COMPLETED,
            result_url=result_url,
            server_state=state or self.server_state,
        )

    def mark_failed(self, message: str, state: Optional[str] = None) -> "Job":
        if self.phase not in POLLING_PHASES:
            raise InvalidTransitionError(self.phase.value, JobPhase.FAILED.value)
        return self._transition(
            JobPhase.FAILED,
            error_message=message,
            server_state=state or self.server_state,
        )

    def mark_transport_error(self, message: str) -> "Job":
        if self.phase not in POLLING_PHASES:
            raise InvalidTransitionError(self.phase.value, JobPhase.TRANSPORT_ERROR.value)
        return self._transition(JobPhase.TRANSPORT_ERROR, error_message=message)

    def cancel(self) -> "Job":
        """Return to idle without an error (submission rejected or cancelled)."""
        return self._transition(JobPhase.IDLE)
