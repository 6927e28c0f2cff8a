"""
Pytest configuration and fixtures
"""

import asyncio
import json
from collections import defaultdict
from urllib.parse import unquote

import httpx
import pytest

from trendmaker.services import Notifier, RenderServiceClient

BASE_URL = "https://render.test"
FAST_INTERVAL = 0.01

RENDER_PATH = "/v1/automontage/render"
STATUS_PREFIX = "/v1/automontage/status/"


class ScriptedRenderService:
    """
    Scripted render service for httpx.MockTransport.

    Replies are (status_code, body) tuples, exceptions to raise, or callables
    taking the call number (1-based) and returning either. For status
    replies the last entry of a job's list repeats forever.
    """

    def __init__(self):
        self.submit_reply = (200, {"ok": True, "jobId": "abc123"})
        self.status_replies = defaultdict(list)
        self.default_status = (200, {"ok": True, "state": "processing"})
        self.submit_gate: asyncio.Event | None = None
        self.status_gates: dict[str, asyncio.Event] = {}
        self.submissions: list[dict] = []
        self.status_calls: list[str] = []

    def status_count(self, job_id: str) -> int:
        return self.status_calls.count(job_id)

    @staticmethod
    def _respond(reply, call_number: int) -> httpx.Response:
        if callable(reply):
            reply = reply(call_number)
        if isinstance(reply, Exception):
            raise reply
        status_code, body = reply
        if isinstance(body, str):
            return httpx.Response(status_code, text=body)
        return httpx.Response(status_code, json=body)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.raw_path.decode().split("?")[0]

        if request.method == "POST" and path == RENDER_PATH:
            self.submissions.append(json.loads(request.content))
            if self.submit_gate is not None:
                await self.submit_gate.wait()
            return self._respond(self.submit_reply, len(self.submissions))

        if request.method == "GET" and path.startswith(STATUS_PREFIX):
            job_id = unquote(path[len(STATUS_PREFIX):])
            self.status_calls.append(job_id)
            gate = self.status_gates.get(job_id)
            if gate is not None:
                await gate.wait()
            replies = self.status_replies.get(job_id) or [self.default_status]
            reply = replies.pop(0) if len(replies) > 1 else replies[0]
            return self._respond(reply, self.status_count(job_id))

        return httpx.Response(404, json={"ok": False, "error": "Not found"})


class RecordingNotifier(Notifier):
    """Notifier that keeps every alert for assertions."""

    def __init__(self):
        self.alerts: list[tuple[str, str]] = []

    def notify(self, title: str, message: str) -> None:
        self.alerts.append((title, message))


@pytest.fixture
def service():
    """Scripted render service"""
    return ScriptedRenderService()


@pytest.fixture
def render_client(service):
    """Render service client wired to the scripted service"""
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(service.handler))
    return RenderServiceClient(base_url=BASE_URL, http_client=http_client)


@pytest.fixture
def notifier():
    """Recording notifier"""
    return RecordingNotifier()


@pytest.fixture
def wait_until():
    """Async helper that waits for a condition to become true"""

    async def _wait_until(predicate, timeout: float = 2.0, interval: float = 0.005):
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                raise AssertionError("Condition not met before timeout")
            await asyncio.sleep(interval)

    return _wait_until
