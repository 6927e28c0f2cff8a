"""
Mock automontage render service.

In-memory FastAPI implementation of the render service contract, used for
local development and integration tests. No video is produced: jobs advance
one step per status poll, queued -> processing -> completed | failed.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, Optional

from fastapi import APIRouter, FastAPI, HTTPException
from pydantic import BaseModel, Field

from trendmaker.config import settings
from trendmaker.models import StatusResponse, SubmitResponse
from trendmaker.models.status_response import (
    COMPLETED_STATE,
    FAILED_STATE,
    PROCESSING_STATE,
    QUEUED_STATE,
)

from .error_handler import register_error_handlers

logger = logging.getLogger(__name__)


class RenderSubmission(BaseModel):
    """Request body accepted by the mock render endpoint."""

    title: str = Field(..., description="Text rendered into the video")
    duration: int = Field(..., gt=0, description="Clip length in seconds")
    format: str = Field("mp4", description="Output container")


class MockRenderService:
    """
    In-memory render service with scripted job progress.

    Args:
        polls_to_complete: Status polls before a job finishes
                           (default: MOCK_POLLS_TO_COMPLETE)
        failure_message: When set, jobs finish as failed with this error
        reject_message: When set, every submission is rejected with ok=false
    """

    def __init__(
        self,
        polls_to_complete: Optional[int] = None,
        failure_message: Optional[str] = None,
        reject_message: Optional[str] = None,
    ):
        if polls_to_complete is None:
            polls_to_complete = settings.MOCK_POLLS_TO_COMPLETE
        if polls_to_complete < 1:
            raise ValueError(f"polls_to_complete must be at least 1, got {polls_to_complete}")
        self.polls_to_complete = polls_to_complete
        self.failure_message = failure_message
        self.reject_message = reject_message
        self.jobs: Dict[str, Dict] = {}
        self.app = self._create_app()
        logger.info(
            f"[MOCK-RENDER] Service initialized: polls_to_complete={self.polls_to_complete}"
        )

    def create_job(self, submission: RenderSubmission) -> str:
        job_id = uuid.uuid4().hex[:12]
        self.jobs[job_id] = {
            "job_id": job_id,
            "title": submission.title,
            "duration": submission.duration,
            "format": submission.format,
            "state": QUEUED_STATE,
            "polls": 0,
            "url": None,
            "error": None,
            "queued_at": datetime.now(timezone.utc).isoformat(),
            "completed_at": None,
        }
        logger.info(
            f"[MOCK-RENDER] Job queued: {job_id}, title={submission.title!r}, "
            f"duration={submission.duration}s"
        )
        return job_id

    def advance(self, job_id: str) -> Dict:
        """
        Move a job one step forward and return it.

        Raises:
            KeyError: If job_id is unknown
        """
        job = self.jobs[job_id]
        if job["state"] in (COMPLETED_STATE, FAILED_STATE):
            return job

        job["polls"] += 1
        if job["polls"] >= self.polls_to_complete:
            job["completed_at"] = datetime.now(timezone.utc).isoformat()
            if self.failure_message:
                job["state"] = FAILED_STATE
                job["error"] = self.failure_message
                logger.info(f"[MOCK-RENDER] Job failed: {job_id} - {self.failure_message}")
            else:
                job["state"] = COMPLETED_STATE
                job["url"] = f"/files/{job_id}.{job['format']}"
                logger.info(f"[MOCK-RENDER] Job complete: {job_id}")
        else:
            job["state"] = PROCESSING_STATE

        return job

    def _create_app(self) -> FastAPI:
        app = FastAPI(
            title="Mock Automontage Render API",
            description="In-memory stand-in for the automontage render service",
            version="1.0.0",
        )
        register_error_handlers(app)

        router = APIRouter(prefix="/v1/automontage", tags=["Automontage"])

        @router.post(
            "/render",
            response_model=SubmitResponse,
            response_model_exclude_none=True,
            summary="Submit Render Job",
        )
        async def submit_render(submission: RenderSubmission) -> SubmitResponse:
            if self.reject_message:
                logger.info(f"[MOCK-RENDER] Rejecting submission: {self.reject_message}")
                return SubmitResponse(ok=False, error=self.reject_message)
            return SubmitResponse(ok=True, job_id=self.create_job(submission))

        @router.get(
            "/status/{job_id}",
            response_model=StatusResponse,
            response_model_exclude_none=True,
            summary="Get Job Status",
            responses={404: {"description": "Job not found"}},
        )
        async def get_status(job_id: str) -> StatusResponse:
            try:
                job = self.advance(job_id)
            except KeyError:
                logger.warning(f"[MOCK-RENDER] Job not found: {job_id}")
                raise HTTPException(status_code=404, detail=f"Job not found: {job_id}")

            return StatusResponse(
                ok=True,
                state=job["state"],
                url=job["url"],
                error=job["error"],
            )

        @app.get("/health")
        async def health_check():
            """Liveness check."""
            return {
                "status": "healthy",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "jobs": len(self.jobs),
            }

        app.include_router(router)
        return app


def create_app(**kwargs) -> FastAPI:
    """Build the mock service application (uvicorn factory entry point)."""
    return MockRenderService(**kwargs).app
