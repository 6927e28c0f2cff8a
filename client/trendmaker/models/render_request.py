"""Pydantic model for the render submission request."""

import math
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from trendmaker.config import settings


def normalize_duration(value: Any, default: Optional[int] = None) -> int:
    """
    Coerce raw form input into a positive whole number of seconds.

    Empty, non-numeric, non-finite and non-positive values fall back to
    ``default`` (DEFAULT_DURATION_SECONDS when omitted). Fractions are
    truncated, so "2.9" becomes 2 and "0.5" falls back.
    """
    fallback = default if default is not None else settings.DEFAULT_DURATION_SECONDS

    if isinstance(value, bool):
        return fallback

    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return fallback
        try:
            number = float(text)
        except ValueError:
            return fallback
    else:
        return fallback

    if isinstance(number, float) and not math.isfinite(number):
        return fallback

    seconds = int(number)
    return seconds if seconds > 0 else fallback


class RenderRequest(BaseModel):
    """
    Request body for POST /v1/automontage/render.

    Built fresh from user input for every submission and never persisted.

    Attributes:
        title: Text rendered into the video; may be empty (the server decides)
        duration_seconds: Clip length in seconds, always a positive integer
        format: Output container, fixed for this client
    """

    title: str = Field(
        default="",
        description="Text rendered into the video",
    )
    duration_seconds: int = Field(
        default_factory=lambda: settings.DEFAULT_DURATION_SECONDS,
        alias="duration",
        gt=0,
        description="Clip length in seconds",
    )
    format: str = Field(
        default_factory=lambda: settings.RENDER_FORMAT,
        description="Output container",
    )

    model_config = {
        "populate_by_name": True,
        "frozen": True,
        "json_schema_extra": {
            "examples": [{"title": "Hello TrendMaker", "duration": 5, "format": "mp4"}]
        },
    }

    @field_validator("duration_seconds", mode="before")
    @classmethod
    def _coerce_duration(cls, value: Any) -> int:
        return normalize_duration(value)

    @classmethod
    def from_form(cls, title: Optional[str], duration_text: Any) -> "RenderRequest":
        """Build a request from raw form fields."""
        return cls(title=title or "", duration=duration_text)

    def to_payload(self) -> dict:
        """JSON body sent to the render endpoint."""
        return self.model_dump(by_alias=True)
