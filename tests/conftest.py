"""
Shared test fixtures.

The backend is faked with httpx.MockTransport: tests register a response (or
a handler) per method and path on ``backend`` and inspect ``backend.requests``
afterwards.
"""

from typing import Any, Callable, Optional

import httpx
import pytest
import pytest_asyncio

from jobflow.models.config import ClientSettings, QueryDefaults
from jobflow.utils.http_client import ApiClient
from jobflow.utils.local_storage import LocalStorage
from jobflow.utils.query_client import QueryClient
from jobflow.utils.token_store import TokenStore

API_BASE = "https://api.test"

Handler = Callable[[httpx.Request], httpx.Response]


class FakeBackend:
    """Route table for httpx.MockTransport that records every request."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []

    def on(
        self,
        method: str,
        path: str,
        status: int = 200,
        json: Any = None,
        text: Optional[str] = None,
        handler: Optional[Handler] = None,
    ) -> None:
        """Register the response for ``method path`` (path without host)."""
        if handler is None:

            def handler(request: httpx.Request) -> httpx.Response:
                if json is not None:
                    return httpx.Response(status, json=json)
                return httpx.Response(status, text=text or "")

        self.routes[(method.upper(), path)] = handler

    def calls(self, method: str, path: str) -> int:
        return sum(
            1
            for r in self.requests
            if r.method == method.upper() and r.url.path == path
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, text="Not Found")
        return handler(request)


@pytest.fixture
def settings(tmp_path) -> ClientSettings:
    """Settings pointing at the fake backend, with no retry backoff."""
    return ClientSettings(
        api_base_url=API_BASE,
        data_dir=tmp_path / "data",
        log_file=str(tmp_path / "logs" / "jobflow.log"),
        query=QueryDefaults(retry_base_delay=0, retry_max_delay=0),
    )


@pytest.fixture
def storage(settings) -> LocalStorage:
    return LocalStorage(settings.local_storage_path)


@pytest.fixture
def tokens(storage) -> TokenStore:
    return TokenStore(storage)


@pytest.fixture
def logged_in(tokens) -> TokenStore:
    """Token store holding a valid-looking token."""
    tokens.set("test-jwt-token", "alice@example.com")
    return tokens


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest_asyncio.fixture
async def api(settings, tokens, backend):
    client = ApiClient(settings, tokens, transport=httpx.MockTransport(backend))
    yield client
    await client.aclose()


@pytest.fixture
def queries(api, settings) -> QueryClient:
    return QueryClient(api, settings.query)
