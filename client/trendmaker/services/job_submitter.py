"""
Job submitter: sends a render request and hands the new job to the poller.

Lifecycle: idle -> submitting -> queued (polling starts), or back to idle
with a SubmissionError. Submission failures never start polling.
"""

import logging
from typing import Callable, Optional

from trendmaker.exceptions import SubmissionError
from trendmaker.models import Job, RenderRequest

from .render_client import RenderServiceClient
from .status_poller import StatusPoller

logger = logging.getLogger(__name__)

DEFAULT_SUBMISSION_ERROR = "Could not start render"


class JobSubmitter:
    """
    Submits render requests, one active job at a time.

    A generation counter tags every submission; a response that arrives
    after a newer submission (or a cancel) is discarded.
    """

    def __init__(
        self,
        client: RenderServiceClient,
        poller: StatusPoller,
        on_transition: Callable[[Job], None],
    ):
        self._client = client
        self._poller = poller
        self._on_transition = on_transition
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def cancel(self) -> None:
        """Invalidate any in-flight submission and stop polling."""
        self._generation += 1
        self._poller.cancel()

    async def submit(self, request: RenderRequest) -> Optional[Job]:
        """
        Submit a render request.

        Args:
            request: Normalized render request

        Returns:
            Job: The queued job, already being polled
            None: If the submission was superseded while in flight

        Raises:
            SubmissionError: On HTTP failure, ok=false, a missing job id or
                any unexpected client error
        """
        self.cancel()
        generation = self._generation

        job = Job.start(request)
        self._on_transition(job)

        try:
            response = await self._client.submit_render(request)
            if not response.ok or not response.job_id:
                message = response.error or DEFAULT_SUBMISSION_ERROR
                logger.warning(f"[SUBMIT] Render request rejected: {message}")
                raise SubmissionError(message)
        except SubmissionError:
            if generation != self._generation:
                logger.debug("[SUBMIT] Ignoring failure of a superseded submission")
                return None
            self._on_transition(job.cancel())
            raise
        except Exception as e:
            logger.exception(f"[SUBMIT] Unexpected error during submission: {e}")
            if generation != self._generation:
                return None
            self._on_transition(job.cancel())
            raise SubmissionError(str(e) or type(e).__name__) from e

        if generation != self._generation:
            logger.info(
                f"[SUBMIT] Discarding superseded submission result: job_id={response.job_id}"
            )
            return None

        job = job.mark_queued(response.job_id)
        logger.info(f"[SUBMIT] Render queued: job_id={job.id}")
        self._on_transition(job)
        self._poller.start(job)
        return job
