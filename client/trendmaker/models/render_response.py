"""Pydantic model for the render submission response."""

from typing import Optional

from pydantic import BaseModel, Field


class SubmitResponse(BaseModel):
    """
    Response body for POST /v1/automontage/render.

    A missing ``ok`` flag is read as a rejection.

    Attributes:
        ok: Whether the server accepted the render request
        job_id: Server-assigned job identifier (present when accepted)
        error: Server error text (present when rejected)
    """

    ok: bool = Field(
        default=False,
        description="Whether the render request was accepted",
    )
    job_id: Optional[str] = Field(
        None,
        alias="jobId",
        description="Opaque job identifier for status polling",
    )
    error: Optional[str] = Field(
        None,
        description="Error text when ok is false",
    )

    model_config = {
        "populate_by_name": True,
        "coerce_numbers_to_str": True,
        "extra": "ignore",
        "json_schema_extra": {
            "examples": [
                {"ok": True, "jobId": "abc123"},
                {"ok": False, "error": "title too long"},
            ]
        },
    }
