"""In-memory mock of the automontage render service."""

from .app import MockRenderService, RenderSubmission, create_app

__all__ = ["MockRenderService", "RenderSubmission", "create_app"]
