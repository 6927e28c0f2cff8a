"""
Async HTTP client for the automontage render service.

Wraps the two endpoints the job lifecycle depends on:
- POST {base}/v1/automontage/render
- GET  {base}/v1/automontage/status/{jobId}

Transport-level problems (network errors, non-2xx statuses, unreadable
bodies) are raised as SubmissionError / TransportError. Payload-level
classification (ok flags, job states) is left to the submitter and poller.
"""

import logging
from typing import Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from trendmaker.config import settings
from trendmaker.exceptions import SubmissionError, TransportError
from trendmaker.models import RenderRequest, StatusResponse, SubmitResponse

logger = logging.getLogger(__name__)

RENDER_PATH = "/v1/automontage/render"
STATUS_PATH = "/v1/automontage/status/{job_id}"


def resolve_result_url(base_url: str, url: str) -> str:
    """
    Turn the ``url`` of a completed status into a playable location.

    Absolute URLs are returned unchanged; server-relative paths are
    appended to the service base address.
    """
    if httpx.URL(url).is_absolute_url:
        return url
    return f"{base_url.rstrip('/')}/{url.lstrip('/')}"


def _error_text(response: httpx.Response) -> Optional[str]:
    """Best-effort server error message from a JSON error body."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("error"), str) and body["error"]:
        return body["error"]
    return None


class RenderServiceClient:
    """
    Client for the render service endpoints.

    Owns an ``httpx.AsyncClient`` unless one is injected (tests inject
    clients backed by ``httpx.MockTransport`` or ``httpx.ASGITransport``).
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = (base_url or settings.TRENDMAKER_API_BASE).rstrip("/")
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.REQUEST_TIMEOUT_SECONDS,
        )
        logger.debug(f"Render service client created for {self.base_url}")

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def submit_render(self, request: RenderRequest) -> SubmitResponse:
        """
        Send a render request.

        Args:
            request: Normalized render request

        Returns:
            SubmitResponse: Parsed body of a 2xx response (ok may still be false)

        Raises:
            SubmissionError: On network errors, non-2xx statuses or unreadable bodies
        """
        payload = request.to_payload()
        logger.info(
            f"[SUBMIT] POST {RENDER_PATH} title={request.title!r}, "
            f"duration={request.duration_seconds}, format={request.format}"
        )

        try:
            response = await self._http.post(self._url(RENDER_PATH), json=payload)
        except httpx.HTTPError as e:
            logger.error(f"[SUBMIT] Request failed: {e}")
            raise SubmissionError(str(e) or type(e).__name__) from e

        if not response.is_success:
            message = _error_text(response) or f"HTTP {response.status_code}"
            logger.error(f"[SUBMIT] Rejected with HTTP {response.status_code}: {message}")
            raise SubmissionError(message, status_code=response.status_code)

        try:
            return SubmitResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"[SUBMIT] Unreadable response body: {e}")
            raise SubmissionError(
                "Invalid response from render service",
                status_code=response.status_code,
            ) from e

    async def get_status(self, job_id: str) -> StatusResponse:
        """
        Fetch the current status of a render job.

        Args:
            job_id: Identifier returned by submit_render()

        Returns:
            StatusResponse: Parsed body of a 2xx response (ok may still be false)

        Raises:
            TransportError: On network errors, non-2xx statuses or unreadable bodies
        """
        path = STATUS_PATH.format(job_id=quote(job_id, safe=""))

        try:
            response = await self._http.get(self._url(path))
        except httpx.HTTPError as e:
            logger.error(f"[POLL] Status request failed for {job_id}: {e}")
            raise TransportError(str(e) or type(e).__name__, job_id=job_id) from e

        if not response.is_success:
            logger.error(f"[POLL] Status HTTP {response.status_code} for {job_id}")
            raise TransportError(
                f"Status HTTP {response.status_code}",
                job_id=job_id,
                status_code=response.status_code,
            )

        try:
            return StatusResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"[POLL] Unreadable status body for {job_id}: {e}")
            raise TransportError(
                "Invalid status response",
                job_id=job_id,
                status_code=response.status_code,
            ) from e

    def result_url(self, url: str) -> str:
        return resolve_result_url(self.base_url, url)

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._http.aclose()
