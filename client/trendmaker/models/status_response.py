"""Pydantic model for render job status response."""

from typing import Optional

from pydantic import BaseModel, Field

COMPLETED_STATE = "completed"
FAILED_STATE = "failed"
QUEUED_STATE = "queued"
PROCESSING_STATE = "processing"


class StatusResponse(BaseModel):
    """
    Response body for GET /v1/automontage/status/{jobId}.

    Attributes:
        ok: Whether the status lookup itself succeeded
        state: Server job state: queued, processing, completed, failed, ...
        url: Location of the produced video, usually server-relative
        error: Error text for ok=false or state=failed
    """

    ok: bool = Field(
        default=False,
        description="Whether the status lookup succeeded",
    )
    state: Optional[str] = Field(
        None,
        description="Current job state: queued, processing, completed, failed",
    )
    url: Optional[str] = Field(
        None,
        description="Produced video location when state is completed",
    )
    error: Optional[str] = Field(
        None,
        description="Error details",
    )

    model_config = {
        "extra": "ignore",
        "json_schema_extra": {
            "examples": [
                {"ok": True, "state": "processing"},
                {"ok": True, "state": "completed", "url": "/files/abc123.mp4"},
            ]
        },
    }
