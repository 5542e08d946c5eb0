"""Job URL collection: list, add, delete."""

from typing import Any, Mapping, Optional

from jobflow.models.job import JobUrl, JobUrlCreate
from jobflow.services import keys
from jobflow.utils.forms import validate_form
from jobflow.utils.http_client import ApiClient, decode_json, parse_model, parse_models
from jobflow.utils.logger import get_logger
from jobflow.utils.query_client import QueryClient


class JobUrlService:
    """Reads and mutations for /api/job-urls.

    Adding or deleting a URL changes both the list and the dashboard
    counters, so both cache keys are invalidated.
    """

    def __init__(
        self,
        api: ApiClient,
        queries: QueryClient,
        correlation_id: Optional[str] = None,
    ):
        self.api = api
        self.queries = queries
        self.logger: Any = get_logger(
            correlation_id=correlation_id, view="job_urls", component="job_url_service"
        )

    async def list(self) -> list[JobUrl]:
        data = await self.queries.fetch_query(keys.JOB_URLS)
        return parse_models(JobUrl, data, keys.JOB_URLS)

    async def add(self, values: Mapping[str, Any], refetch: bool = False) -> Optional[JobUrl]:
        """Validate the add-URL form and create the job URL.

        Args:
            values: Form input (url, company, position, location, status)
            refetch: Re-fetch the invalidated list and stats immediately

        Returns:
            The created record, or None if the backend returned no record

        Raises:
            FormValidationError: Invalid input; nothing is sent
            HttpError, NetworkError: The request failed
        """
        form = validate_form(JobUrlCreate, values, "job URL form")

        async def create() -> Any:
            response = await self.api.request("POST", keys.JOB_URLS, form.to_wire())
            return decode_json(response) if response.content else None

        created = await self.queries.mutate(
            create, invalidates=[keys.JOB_URLS, keys.STATS], refetch=refetch
        )
        self.logger.info("Job URL added", url=form.url)
        if isinstance(created, dict) and "id" in created:
            return parse_model(JobUrl, created, keys.JOB_URLS)
        return None

    async def delete(self, job_url_id: str, refetch: bool = False) -> None:
        async def remove() -> None:
            await self.api.request("DELETE", keys.job_url_path(job_url_id))

        await self.queries.mutate(
            remove, invalidates=[keys.JOB_URLS, keys.STATS], refetch=refetch
        )
        self.logger.info("Job URL deleted", job_url_id=job_url_id)
