"""Job discovery: run a search and hand the results to the listings view."""

import asyncio
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ValidationError

from jobflow.models.job import JobListing, JobSearchCriteria
from jobflow.services import keys
from jobflow.utils.forms import validate_form
from jobflow.utils.http_client import (
    ApiClient,
    RequestTimeoutError,
    ResponseFormatError,
    decode_json,
    expect_object,
)
from jobflow.utils.local_storage import DISCOVERED_JOBS_KEY, LocalStorage
from jobflow.utils.logger import get_logger


class DiscoveryResult(BaseModel):
    """Jobs returned by one search."""

    jobs: list[JobListing]
    count: int


class JobDiscoveryService:
    """Calls /api/jobs/discover and stores the results under "discoveredJobs".

    A failed or timed-out search removes any previously stored results so the
    listings view shows its empty state instead of an old search.
    """

    def __init__(
        self,
        api: ApiClient,
        storage: LocalStorage,
        timeout: float = 30.0,
        correlation_id: Optional[str] = None,
    ):
        self.api = api
        self.storage = storage
        self.timeout = timeout
        self.logger: Any = get_logger(
            correlation_id=correlation_id, view="search", component="job_discovery"
        )

    async def discover(self, values: Mapping[str, Any]) -> DiscoveryResult:
        """Search external job sources.

        Args:
            values: Search form input (title, location, posted_after, remote)

        Raises:
            FormValidationError: Invalid criteria; nothing is sent
            RequestTimeoutError: No answer within the timeout
            ResponseFormatError: The reply is not a job list
            HttpError, NetworkError: The request failed
        """
        criteria = validate_form(JobSearchCriteria, values, "job search form")
        self.logger.info("Searching for jobs", title=criteria.title, location=criteria.location)

        try:
            response = await asyncio.wait_for(
                self.api.request(
                    "POST", keys.JOBS_DISCOVER, criteria.to_wire(), timeout=self.timeout
                ),
                timeout=self.timeout,
            )
            payload = expect_object(decode_json(response), keys.JOBS_DISCOVER)
            items = payload.get("jobs") or []
            if not isinstance(items, list):
                raise ResponseFormatError(f"Expected a job list from {keys.JOBS_DISCOVER}")
        except asyncio.TimeoutError as e:
            self.storage.remove_item(DISCOVERED_JOBS_KEY)
            self.logger.warning("Job search timed out", timeout=self.timeout)
            raise RequestTimeoutError("Job search timed out") from e
        except Exception:
            self.storage.remove_item(DISCOVERED_JOBS_KEY)
            raise

        jobs: list[JobListing] = []
        for item in items:
            try:
                jobs.append(JobListing.model_validate(item))
            except ValidationError as e:
                self.logger.warning("Skipping malformed job", error_count=e.error_count())

        self.storage.set_json(DISCOVERED_JOBS_KEY, [job.to_wire() for job in jobs])
        count = payload.get("count")
        if not isinstance(count, int):
            count = len(jobs)
        self.logger.info("Jobs discovered", count=count, stored=len(jobs))
        return DiscoveryResult(jobs=jobs, count=count)

    def discovered_jobs(self) -> list[JobListing]:
        """Results of the last successful search (empty if none)."""
        stored = self.storage.get_json(DISCOVERED_JOBS_KEY, default=[])
        jobs: list[JobListing] = []
        for item in stored if isinstance(stored, list) else []:
            try:
                jobs.append(JobListing.model_validate(item))
            except ValidationError:
                continue
        return jobs
