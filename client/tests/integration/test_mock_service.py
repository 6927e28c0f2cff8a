"""
Integration tests for the mock render service endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from trendmaker.mock_service import MockRenderService, create_app


@pytest.fixture
def mock_service():
    return MockRenderService(polls_to_complete=2)


@pytest.fixture
def client(mock_service):
    """FastAPI test client fixture"""
    return TestClient(mock_service.app)


def submit(client, **overrides):
    body = {"title": "Hello", "duration": 5, "format": "mp4"}
    body.update(overrides)
    return client.post("/v1/automontage/render", json=body)


class TestRenderEndpoint:
    """Tests for POST /v1/automontage/render."""

    def test_submit_returns_job_id(self, client, mock_service):
        """Test that a valid submission returns a stored job id."""
        response = submit(client)

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["jobId"] in mock_service.jobs
        assert "error" not in data

    def test_invalid_duration_is_rejected(self, client):
        """Test that a non-positive duration gets a 422 envelope."""
        response = submit(client, duration=0)

        assert response.status_code == 422
        data = response.json()
        assert data["ok"] is False
        assert "duration" in data["error"]

    def test_zero_polls_rejected(self):
        """Test that a job must take at least one poll to finish."""
        with pytest.raises(ValueError, match="at least 1"):
            MockRenderService(polls_to_complete=0)

    def test_reject_message(self):
        """Test that a configured rejection answers ok=false."""
        client = TestClient(MockRenderService(reject_message="quota exceeded").app)

        response = submit(client)

        assert response.status_code == 200
        assert response.json() == {"ok": False, "error": "quota exceeded"}


class TestStatusEndpoint:
    """Tests for GET /v1/automontage/status/{job_id}."""

    def test_job_progresses_to_completed(self, client):
        """Test that a job moves through processing to completed."""
        job_id = submit(client).json()["jobId"]

        first = client.get(f"/v1/automontage/status/{job_id}").json()
        second = client.get(f"/v1/automontage/status/{job_id}").json()
        third = client.get(f"/v1/automontage/status/{job_id}").json()

        assert first == {"ok": True, "state": "processing"}
        assert second == {"ok": True, "state": "completed", "url": f"/files/{job_id}.mp4"}
        assert third == second

    def test_job_can_fail(self):
        """Test that a configured failure finishes the job as failed."""
        client = TestClient(MockRenderService(polls_to_complete=1, failure_message="encode error").app)
        job_id = submit(client).json()["jobId"]

        data = client.get(f"/v1/automontage/status/{job_id}").json()

        assert data == {"ok": True, "state": "failed", "error": "encode error"}

    def test_unknown_job_is_404(self, client):
        """Test that an unknown job id returns 404."""
        response = client.get("/v1/automontage/status/missing")

        assert response.status_code == 404
        assert response.json() == {"ok": False, "error": "Job not found: missing"}


def test_health_check_endpoint(client):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "timestamp" in data


def test_create_app_factory():
    """Test the app factory with custom poll count."""
    client = TestClient(create_app(polls_to_complete=1))
    job_id = submit(client).json()["jobId"]

    data = client.get(f"/v1/automontage/status/{job_id}").json()

    assert data["state"] == "completed"


def test_docs_accessible(client):
    """Test that API documentation is accessible"""
    response = client.get("/docs")
    assert response.status_code == 200
