"""Service layer: render service client and job lifecycle components."""

from .job_controller import JobController
from .job_submitter import JobSubmitter
from .notifier import ConsoleNotifier, LoggingNotifier, Notifier
from .render_client import RenderServiceClient, resolve_result_url
from .status_poller import StatusPoller

__all__ = [
    "JobController",
    "JobSubmitter",
    "StatusPoller",
    "RenderServiceClient",
    "resolve_result_url",
    "Notifier",
    "LoggingNotifier",
    "ConsoleNotifier",
]
