"""Pydantic models for render requests, wire responses and job state."""

from .job import Job, JobPhase, TERMINAL_PHASES, TRANSITIONS
from .render_request import RenderRequest, normalize_duration
from .render_response import SubmitResponse
from .status_response import StatusResponse

__all__ = [
    "Job",
    "JobPhase",
    "TERMINAL_PHASES",
    "TRANSITIONS",
    "RenderRequest",
    "normalize_duration",
    "SubmitResponse",
    "StatusResponse",
]
