"""
Unit tests for JobDiscoveryService.
"""

import asyncio
import json

import pytest

from jobflow.services.discovery import JobDiscoveryService
from jobflow.utils.forms import FormValidationError
from jobflow.utils.http_client import HttpError, RequestTimeoutError, ResponseFormatError
from jobflow.utils.local_storage import DISCOVERED_JOBS_KEY

JOBS = [
    {
        "id": "j1",
        "title": "Data Engineer",
        "company": "Globex",
        "location": "Remote",
        "url": "https://jobs.example/j1",
        "source": "LinkedIn",
        "postedDate": "2025-01-10",
        "salary": "$120k",
    },
    {"id": 2, "title": "ML Engineer", "company": "Initech", "url": "https://jobs.example/2"},
]


@pytest.fixture
def discovery(api, storage):
    return JobDiscoveryService(api, storage)


class TestDiscover:
    @pytest.mark.asyncio
    async def test_missing_title_blocks_before_network(self, discovery, backend):
        with pytest.raises(FormValidationError) as exc_info:
            await discovery.discover({"title": " ", "location": "Berlin"})
        assert exc_info.value.field_errors["title"] == "Job title is required"
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_stores_results_for_listings(self, discovery, backend, storage):
        # Arrange
        backend.on("POST", "/api/jobs/discover", json={"jobs": JOBS, "count": 2})

        # Act
        result = await discovery.discover(
            {"title": "Engineer", "location": "Berlin", "posted_after": "3", "remote": True}
        )

        # Assert
        assert result.count == 2
        assert json.loads(backend.requests[0].content) == {
            "title": "Engineer",
            "location": "Berlin",
            "postedAfter": "3",
            "remote": True,
        }
        stored = storage.get_json(DISCOVERED_JOBS_KEY)
        assert [job["id"] for job in stored] == ["j1", "2"]
        assert stored[0]["postedDate"] == "2025-01-10"
        assert [j.title for j in discovery.discovered_jobs()] == ["Data Engineer", "ML Engineer"]

    @pytest.mark.asyncio
    async def test_malformed_jobs_skipped(self, discovery, backend):
        # Arrange
        backend.on("POST", "/api/jobs/discover", json={"jobs": [JOBS[0], {"id": "x"}]})

        # Act
        result = await discovery.discover({"title": "Engineer", "location": "Berlin"})

        # Assert
        assert [j.id for j in result.jobs] == ["j1"]

    @pytest.mark.asyncio
    async def test_failure_removes_previous_results(self, discovery, backend, storage):
        # Arrange
        storage.set_json(DISCOVERED_JOBS_KEY, JOBS)
        backend.on("POST", "/api/jobs/discover", status=502, text="Bad Gateway")

        # Act
        with pytest.raises(HttpError):
            await discovery.discover({"title": "Engineer", "location": "Berlin"})

        # Assert
        assert storage.get_item(DISCOVERED_JOBS_KEY) is None
        assert discovery.discovered_jobs() == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "reply",
        [
            {"text": "<html>maintenance</html>"},
            {"json": [{"id": "j1"}]},
            {"json": {"jobs": "none today"}},
        ],
    )
    async def test_unexpected_reply_removes_previous_results(
        self, discovery, backend, storage, reply
    ):
        """Non-JSON, non-object or non-list replies raise a typed error."""
        # Arrange
        storage.set_json(DISCOVERED_JOBS_KEY, JOBS)
        backend.on("POST", "/api/jobs/discover", **reply)

        # Act
        with pytest.raises(ResponseFormatError):
            await discovery.discover({"title": "Engineer", "location": "Berlin"})

        # Assert
        assert storage.get_item(DISCOVERED_JOBS_KEY) is None

    @pytest.mark.asyncio
    async def test_timeout_removes_previous_results(self, api, storage, mocker):
        # Arrange
        storage.set_json(DISCOVERED_JOBS_KEY, JOBS)
        discovery = JobDiscoveryService(api, storage, timeout=0.01)

        async def never_answers(*args, **kwargs):
            await asyncio.sleep(10)

        mocker.patch.object(api, "request", side_effect=never_answers)

        # Act
        with pytest.raises(RequestTimeoutError):
            await discovery.discover({"title": "Engineer", "location": "Berlin"})

        # Assert
        assert storage.get_item(DISCOVERED_JOBS_KEY) is None

    def test_invalid_posted_after(self):
        from jobflow.models.job import JobSearchCriteria

        with pytest.raises(ValueError):
            JobSearchCriteria(title="a", location="b", posted_after="2")
