"""TrendMaker render client: submits automontage renders and tracks them to completion."""

from .exceptions import (
    InvalidTransitionError,
    JobFailedError,
    PollTimeoutError,
    RenderClientError,
    SubmissionError,
    TransportError,
)
from .models import Job, JobPhase, RenderRequest
from .services import JobController, RenderServiceClient

__version__ = "1.0.0"

__all__ = [
    "Job",
    "JobPhase",
    "RenderRequest",
    "JobController",
    "RenderServiceClient",
    "RenderClientError",
    "SubmissionError",
    "TransportError",
    "PollTimeoutError",
    "JobFailedError",
    "InvalidTransitionError",
]
