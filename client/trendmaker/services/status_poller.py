"""
Status poller for a submitted render job.

Owns the repeating poll timer (an APScheduler interval job on an
AsyncIOScheduler). Each tick fetches the job status once and either keeps
polling or moves the job into a terminal phase and releases the timer.

Every poll sequence carries an epoch. cancel() bumps the epoch, so a tick or
response from a superseded sequence is dropped instead of touching the
current job.
"""

import asyncio
import logging
from typing import Callable, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from trendmaker.config import settings
from trendmaker.exceptions import PollTimeoutError, TransportError
from trendmaker.models import Job, JobPhase
from trendmaker.models.status_response import COMPLETED_STATE, FAILED_STATE

from .render_client import RenderServiceClient

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_MESSAGE = "Render failed"
DEFAULT_STATUS_ERROR = "Could not fetch status"

TransitionCallback = Callable[[Job], None]


class StatusPoller:
    """
    Polls the render service for one job at a time.

    Args:
        client: Render service client used for status requests
        on_transition: Called with every new Job produced by a tick
        interval: Seconds between ticks (default: POLL_INTERVAL_SECONDS)
        max_attempts: Stop with a PollTimeoutError after this many ticks
                      (default: MAX_POLL_ATTEMPTS, None polls forever)
    """

    def __init__(
        self,
        client: RenderServiceClient,
        on_transition: TransitionCallback,
        interval: Optional[float] = None,
        max_attempts: Optional[int] = None,
    ):
        self._client = client
        self._on_transition = on_transition
        self.interval = interval if interval is not None else settings.POLL_INTERVAL_SECONDS
        self.max_attempts = (
            max_attempts if max_attempts is not None else settings.MAX_POLL_ATTEMPTS
        )

        self._scheduler: AsyncIOScheduler | None = None
        self._timer = None
        self._job: Job | None = None
        self._epoch = 0
        self._attempts = 0

    @property
    def active(self) -> bool:
        """True while a poll timer is scheduled."""
        return self._timer is not None

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def attempts(self) -> int:
        """Ticks issued by the current poll sequence."""
        return self._attempts

    @property
    def job(self) -> Job | None:
        return self._job

    def scheduled_timers(self) -> int:
        """Number of poll timers currently registered with the scheduler."""
        if self._scheduler is None:
            return 0
        return len(self._scheduler.get_jobs())

    def _ensure_scheduler(self) -> AsyncIOScheduler:
        if self._scheduler is None:
            self._scheduler = AsyncIOScheduler(event_loop=asyncio.get_running_loop())
        if not self._scheduler.running:
            self._scheduler.start()
            logger.debug("[POLL] Scheduler started")
        return self._scheduler

    def start(self, job: Job) -> None:
        """
        Begin polling for ``job``.

        Any previous poll sequence is cancelled first. Must be called from
        inside the running event loop.

        Raises:
            ValueError: If the job is not queued or processing
        """
        if job.phase not in (JobPhase.QUEUED, JobPhase.PROCESSING):
            raise ValueError(f"Cannot poll a job in phase '{job.phase.value}'")

        self.cancel()
        scheduler = self._ensure_scheduler()

        epoch = self._epoch
        self._job = job
        self._attempts = 0
        self._timer = scheduler.add_job(
            self._tick,
            "interval",
            seconds=self.interval,
            args=[epoch],
            id=f"status-poll-{epoch}",
            name=f"Status poll for job {job.id}",
            max_instances=1,
            coalesce=True,
            misfire_grace_time=None,
        )
        logger.info(
            f"[POLL] Polling started: job_id={job.id}, epoch={epoch}, "
            f"interval={self.interval}s"
        )

    def cancel(self) -> None:
        """Release the poll timer. Safe to call repeatedly."""
        self._epoch += 1
        if self._timer is None:
            return

        try:
            self._timer.remove()
        except JobLookupError:
            logger.debug(f"[POLL] Timer already removed: {self._timer.id}")
        self._timer = None
        logger.info(f"[POLL] Polling stopped: job_id={self._job.id if self._job else None}")

    def shutdown(self) -> None:
        """Cancel polling and stop the scheduler (host teardown)."""
        self.cancel()
        self._job = None
        if self._scheduler is not None and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.debug("[POLL] Scheduler stopped")
        self._scheduler = None

    def _is_current(self, epoch: int) -> bool:
        return epoch == self._epoch and self._timer is not None

    def _finish(self, job: Job) -> None:
        self.cancel()
        self._job = job
        self._on_transition(job)

    async def _tick(self, epoch: int) -> None:
        """One scheduled status check."""
        if not self._is_current(epoch):
            return

        job = self._job
        self._attempts += 1

        try:
            status = await self._client.get_status(job.id)
        except TransportError as e:
            if not self._is_current(epoch):
                logger.debug(f"[POLL] Dropping stale error for job {job.id}")
                return
            self._finish(job.mark_transport_error(e.message))
            return
        except Exception as e:
            logger.exception(f"[POLL] Status check error for job {job.id}")
            if self._is_current(epoch):
                self._finish(job.mark_transport_error(str(e) or type(e).__name__))
            return

        if not self._is_current(epoch):
            logger.debug(f"[POLL] Dropping stale status for job {job.id}: {status.state}")
            return

        if not status.ok:
            message = status.error or DEFAULT_STATUS_ERROR
            logger.error(f"[POLL] Status lookup rejected for job {job.id}: {message}")
            self._finish(job.mark_transport_error(message))

        elif status.state == COMPLETED_STATE and status.url:
            result_url = self._client.result_url(status.url)
            logger.info(f"[POLL] Job complete: {job.id} -> {result_url}")
            self._finish(job.mark_completed(result_url, state=status.state))

        elif status.state == FAILED_STATE:
            message = status.error or DEFAULT_FAILURE_MESSAGE
            logger.error(f"[POLL] Job failed: {job.id} - {message}")
            self._finish(job.mark_failed(message, state=status.state))

        else:
            logger.debug(f"[POLL] Job {job.id} state: {status.state}")
            self._job = job.mark_progress(status.state)
            self._on_transition(self._job)

            if (
                self.max_attempts is not None
                and self._attempts >= self.max_attempts
                and self._is_current(epoch)
            ):
                error = PollTimeoutError(job.id, self._attempts)
                logger.warning(f"[POLL] Giving up on job {job.id}: {error.message}")
                self._finish(self._job.mark_transport_error(error.message))
