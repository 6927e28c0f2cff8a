"""
Job controller: shared state between the submitter and the poller.

Holds the active Job, the human-readable status string and the busy flag
that a presentation layer renders, and owns teardown. Errors are passed to
a Notifier collaborator; the Job transitions themselves stay side-effect free.
"""

import asyncio
import logging
from typing import Callable, List, Optional

from trendmaker.exceptions import (
    JobFailedError,
    RenderClientError,
    SubmissionError,
    TransportError,
)
from trendmaker.models import Job, JobPhase, RenderRequest

from .job_submitter import JobSubmitter
from .notifier import LoggingNotifier, Notifier
from .render_client import RenderServiceClient
from .status_poller import StatusPoller

logger = logging.getLogger(__name__)

Listener = Callable[["JobController"], None]

STATUS_SUBMITTING = "Sending request to server..."
STATUS_COMPLETED = "Render completed"
STATUS_CANCELLED = "Render cancelled"


class JobController:
    """
    Drives one render job at a time from submission to a terminal phase.

    Usage:
        async with JobController() as controller:
            await controller.submit(RenderRequest.from_form("Hello", "5"))
            job = await controller.wait()
            print(job.result_url)

    Args:
        client: Render service client (created from settings when omitted)
        notifier: Alert collaborator (LoggingNotifier when omitted)
        poll_interval: Seconds between status polls
        max_poll_attempts: Optional cap on status polls per job
        base_url: Service base URL, used only when ``client`` is omitted
    """

    def __init__(
        self,
        client: Optional[RenderServiceClient] = None,
        notifier: Optional[Notifier] = None,
        poll_interval: Optional[float] = None,
        max_poll_attempts: Optional[int] = None,
        base_url: Optional[str] = None,
    ):
        self._owns_client = client is None
        self._client = client or RenderServiceClient(base_url=base_url)
        self._notifier = notifier or LoggingNotifier()
        self._poller = StatusPoller(
            self._client,
            self._handle_transition,
            interval=poll_interval,
            max_attempts=max_poll_attempts,
        )
        self._submitter = JobSubmitter(self._client, self._poller, self._handle_transition)

        self._listeners: List[Listener] = []
        self._job: Optional[Job] = None
        self._status = ""
        self._loading = False
        self._last_error: Optional[RenderClientError] = None
        self._settled = asyncio.Event()
        self._settled.set()
        self._closed = False

    async def __aenter__(self) -> "JobController":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # Observable state

    @property
    def job(self) -> Optional[Job]:
        return self._job

    @property
    def phase(self) -> JobPhase:
        return self._job.phase if self._job else JobPhase.IDLE

    @property
    def job_id(self) -> Optional[str]:
        return self._job.id if self._job else None

    @property
    def result_url(self) -> Optional[str]:
        return self._job.result_url if self._job else None

    @property
    def status(self) -> str:
        """Human-readable progress line for the presentation layer."""
        return self._status

    @property
    def loading(self) -> bool:
        """True from submission until the job settles."""
        return self._loading

    @property
    def last_error(self) -> Optional[RenderClientError]:
        return self._last_error

    @property
    def base_url(self) -> str:
        return self._client.base_url

    @property
    def poller(self) -> StatusPoller:
        return self._poller

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Job state listener failed")

    def _alert(self, title: str, message: str) -> None:
        if not self._closed:
            self._notifier.notify(title, message)

    # Lifecycle

    def _handle_transition(self, job: Job) -> None:
        if self._closed:
            return

        previous = self._job
        self._job = job

        if job.phase is JobPhase.SUBMITTING:
            self._status = STATUS_SUBMITTING
            self._loading = True
            self._last_error = None
            self._settled.clear()

        elif job.phase is JobPhase.QUEUED and previous is not None and previous.phase is JobPhase.SUBMITTING:
            self._status = f"Render queued (Job ID: {job.id})"

        elif job.phase in (JobPhase.QUEUED, JobPhase.PROCESSING):
            self._status = f"Status: {job.server_state or 'unknown'}"

        elif job.phase is JobPhase.COMPLETED:
            self._status = STATUS_COMPLETED

        elif job.phase is JobPhase.FAILED:
            self._status = f"Render failed: {job.error_message}"
            self._last_error = JobFailedError(job.id, job.error_message)

        elif job.phase is JobPhase.TRANSPORT_ERROR:
            self._status = f"Status error: {job.error_message}"
            self._last_error = TransportError(job.error_message, job_id=job.id)

        if not job.is_active:
            self._loading = False
            self._settled.set()

        self._emit()

        if job.phase is JobPhase.FAILED:
            self._alert("Render Error", job.error_message)
        elif job.phase is JobPhase.TRANSPORT_ERROR:
            self._alert("Status Error", job.error_message)

    async def submit(self, request: RenderRequest) -> Optional[Job]:
        """
        Submit a render request, superseding any active job.

        Returns:
            Job: The queued job (polling has started)
            None: If the submission failed or was superseded; see ``last_error``

        Raises:
            RuntimeError: If the controller has been closed
        """
        if self._closed:
            raise RuntimeError("JobController is closed")

        try:
            return await self._submitter.submit(request)
        except SubmissionError as e:
            logger.error(f"[SUBMIT] Submission failed: {e.message}")
            if self._closed:
                return None
            self._last_error = e
            self._status = f"Error: {e.message}"
            self._loading = False
            self._settled.set()
            self._emit()
            self._alert("Error", e.message)
            return None

    def cancel(self) -> None:
        """Stop the active job without an error. Safe to call repeatedly."""
        self._submitter.cancel()

        job = self._job
        if job is None or not job.is_active:
            return

        self._job = job.cancel()
        self._status = STATUS_CANCELLED
        self._loading = False
        self._settled.set()
        logger.info(f"Render cancelled: job_id={job.id}")
        self._emit()

    async def wait(self, timeout: Optional[float] = None) -> Optional[Job]:
        """
        Wait until the current job settles.

        Returns:
            Job: The completed (or cancelled) job, None if nothing was submitted

        Raises:
            SubmissionError: If the last submission failed
            JobFailedError: If the render failed
            TransportError: If status polling failed
            asyncio.TimeoutError: If ``timeout`` elapses first
        """
        await asyncio.wait_for(self._settled.wait(), timeout)
        if self._last_error is not None:
            raise self._last_error
        return self._job

    async def close(self) -> None:
        """Cancel everything and release the timer and HTTP resources."""
        if self._closed:
            return

        self.cancel()
        self._poller.shutdown()
        self._closed = True
        self._listeners.clear()
        self._settled.set()

        if self._owns_client:
            await self._client.aclose()
        # let the scheduler process its deferred shutdown
        await asyncio.sleep(0)
        logger.debug("Job controller closed")
