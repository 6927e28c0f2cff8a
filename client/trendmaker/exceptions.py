"""Error taxonomy for the render job lifecycle."""

from typing import Any


class RenderClientError(Exception):
    """Base exception for render client errors."""

    def __init__(self, message: str, details: Any = None):
        self.message = message
        self.details = details
        super().__init__(message)


class SubmissionError(RenderClientError):
    """Render request failed or was rejected by the server.

    Recoverable: the controller goes back to idle and the user may resubmit.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(
            message=message,
            details={"status_code": status_code} if status_code is not None else None,
        )
        self.status_code = status_code


class TransportError(RenderClientError):
    """Status request failed at the network layer or the server answered ok=false."""

    def __init__(
        self,
        message: str,
        job_id: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(
            message=message,
            details={"job_id": job_id, "status_code": status_code},
        )
        self.job_id = job_id
        self.status_code = status_code


class PollTimeoutError(TransportError):
    """Raised when the configured status poll cap is reached."""

    def __init__(self, job_id: str, attempts: int):
        super().__init__(
            message=f"No result after {attempts} status checks",
            job_id=job_id,
        )
        self.attempts = attempts


class JobFailedError(RenderClientError):
    """The server reported that the render itself failed."""

    def __init__(self, job_id: str, message: str):
        super().__init__(message=message, details={"job_id": job_id})
        self.job_id = job_id


class InvalidTransitionError(RenderClientError):
    """Raised on an illegal job phase transition."""

    def __init__(self, current: str, target: str):
        super().__init__(
            message=f"Cannot move job from '{current}' to '{target}'",
            details={"current": current, "target": target},
        )
