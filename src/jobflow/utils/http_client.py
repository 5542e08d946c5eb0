"""HTTP client wrapper for the job-tracking backend.

Every request goes through ``ApiClient.request`` so auth and error handling
are the same for all callers: URL resolution against the configured base
URL, a bearer token read fresh from the credential provider, JSON bodies,
and ``HttpError`` on any non-2xx status.
"""

import json
import ssl
from typing import Any, Literal, Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from jobflow.models.config import ClientSettings
from jobflow.utils.logger import get_logger
from jobflow.utils.token_store import CredentialProvider

UnauthorizedBehavior = Literal["throw", "return_null"]

ABSOLUTE_URL_SCHEMES = ("http://", "https://")
NETWORK_ERROR_MESSAGE = (
    "Network connection issue. Please check your internet connection and try again."
)
TLS_ERROR_MESSAGE = "SSL/TLS connection issue. Please try again or contact support."


class HttpError(Exception):
    """Non-2xx response from the backend.

    Callers branch on ``status`` (notably 401), never on the message text.
    """

    def __init__(self, status: int, message: str):
        self.status = status
        self.message = message
        super().__init__(f"{status}: {message}")

    @property
    def detail(self) -> str:
        """The backend's ``error``/``message`` field when the body is JSON."""
        try:
            payload = json.loads(self.message)
        except ValueError:
            return self.message
        if isinstance(payload, dict):
            for field in ("error", "message", "detail"):
                if isinstance(payload.get(field), str):
                    return payload[field]
        return self.message


class NetworkError(Exception):
    """Request never produced a response (connectivity, TLS, timeout)."""

    def __init__(self, message: str = NETWORK_ERROR_MESSAGE):
        self.message = message
        super().__init__(message)


class RequestTimeoutError(NetworkError):
    """Request exceeded its timeout."""

    def __init__(self, message: str = "Request timed out"):
        super().__init__(message)


class ResponseFormatError(HttpError):
    """2xx response whose body is not the JSON shape the caller expects.

    Views render it like any other HttpError.
    """

    def __init__(self, message: str, status: int = 200):
        super().__init__(status, message)


ModelT = TypeVar("ModelT", bound=BaseModel)


def decode_json(response: httpx.Response) -> Any:
    """Decode a 2xx body, raising ResponseFormatError if it is not JSON."""
    try:
        return response.json()
    except ValueError as e:
        raise ResponseFormatError(
            "Invalid response from server: expected JSON",
            response.status_code,
        ) from e


def parse_model(model: type[ModelT], data: Any, source: str) -> ModelT:
    """Validate one decoded record; shape errors become ResponseFormatError."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ResponseFormatError(
            f"Unexpected {model.__name__} data from {source} ({e.error_count()} invalid fields)"
        ) from e


def parse_models(model: type[ModelT], data: Any, source: str) -> list[ModelT]:
    """Validate a decoded list; None means an empty collection."""
    if data is None:
        return []
    if not isinstance(data, list):
        raise ResponseFormatError(f"Expected a list from {source}, got {type(data).__name__}")
    return [parse_model(model, item, source) for item in data]


def expect_object(data: Any, source: str) -> dict[str, Any]:
    """Require a decoded JSON object."""
    if not isinstance(data, dict):
        raise ResponseFormatError(f"Expected an object from {source}, got {type(data).__name__}")
    return data


def resolve_url(base_url: str, path: str) -> str:
    """Return ``path`` unchanged if absolute, else ``base_url + path``."""
    if path.startswith(ABSOLUTE_URL_SCHEMES):
        return path
    return f"{base_url}{path}"


def _translate_transport_error(exc: httpx.TransportError) -> NetworkError:
    if isinstance(exc, httpx.TimeoutException):
        return RequestTimeoutError()
    text = str(exc)
    if isinstance(exc.__cause__, ssl.SSLError) or "SSL" in text or "TLS" in text:
        return NetworkError(TLS_ERROR_MESSAGE)
    return NetworkError()


async def raise_for_status(response: httpx.Response) -> None:
    """Raise HttpError carrying the body text (or reason phrase) on non-2xx."""
    if response.is_success:
        return
    await response.aread()
    text = response.text or response.reason_phrase
    raise HttpError(response.status_code, text)


class ApiClient:
    """Authenticated JSON client for the backend API."""

    def __init__(
        self,
        settings: ClientSettings,
        credentials: CredentialProvider,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        correlation_id: Optional[str] = None,
    ):
        """Initialize API client.

        Args:
            settings: Client settings; the base URL is resolved once here
            credentials: Credential provider queried on every request
            transport: Optional httpx transport (tests use httpx.MockTransport)
            correlation_id: Correlation ID for request tracing
        """
        self.base_url = settings.api_base_url
        self.credentials = credentials
        self.timeout = settings.timeouts.request
        self.logger: Any = get_logger(
            correlation_id=correlation_id,
            view="http",
            component="api_client",
        )
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            transport=transport,
            follow_redirects=True,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def resolve_url(self, path: str) -> str:
        return resolve_url(self.base_url, path)

    def _auth_headers(self) -> dict[str, str]:
        token = self.credentials.get()
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    async def _send(
        self,
        method: str,
        url: str,
        timeout: Optional[float] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        self.logger.debug("Making request", method=method, url=url)
        try:
            response = await self._client.request(
                method,
                url,
                timeout=timeout if timeout is not None else self.timeout,
                **kwargs,
            )
        except httpx.TransportError as e:
            error = _translate_transport_error(e)
            self.logger.warning(
                "Request failed before response",
                method=method,
                url=url,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise error from e

        try:
            await raise_for_status(response)
        except HttpError as e:
            self.logger.warning(
                "Request returned error status",
                method=method,
                url=url,
                status_code=e.status,
            )
            raise
        return response

    async def request(
        self,
        method: str,
        path: str,
        data: Any = None,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        """Send a request and return the raw response on 2xx.

        Args:
            method: HTTP method
            path: Absolute URL or root-relative path
            data: Optional JSON-serializable body
            timeout: Per-request timeout override in seconds

        Returns:
            httpx.Response for any 2xx status

        Raises:
            HttpError: For any non-2xx status
            NetworkError: If no response was received
        """
        method = method.upper()
        headers = self._auth_headers()
        kwargs: dict[str, Any] = {}
        if data is not None:
            headers["Content-Type"] = "application/json"
            if method not in ("GET", "HEAD"):
                kwargs["json"] = data

        return await self._send(
            method, self.resolve_url(path), timeout=timeout, headers=headers, **kwargs
        )

    async def query(
        self, path: str, on_401: UnauthorizedBehavior = "throw"
    ) -> Any:
        """GET ``path`` and decode JSON; the cache layer's read function.

        Args:
            path: Cache key, which is itself a request path
            on_401: "return_null" returns None on 401 instead of raising

        Returns:
            Decoded JSON body, or None on 401 with on_401="return_null"

        Raises:
            ResponseFormatError: The 2xx body is not JSON
        """
        try:
            response = await self.request("GET", path)
        except HttpError as e:
            if e.status == 401 and on_401 == "return_null":
                self.logger.info("Unauthorized read returned empty", url=path)
                return None
            raise
        return decode_json(response)

    async def upload(
        self,
        path: str,
        files: dict[str, tuple[str, bytes, str]],
        fields: Optional[dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        """Multipart POST with the same auth and error semantics as request()."""
        return await self._send(
            "POST",
            self.resolve_url(path),
            timeout=timeout,
            headers=self._auth_headers(),
            files=files,
            data=fields or {},
        )

    async def put_direct(
        self,
        url: str,
        content: bytes,
        content_type: str,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        """PUT raw bytes to a presigned storage URL.

        The bearer token is not sent: the URL itself carries authorization.
        """
        return await self._send(
            "PUT",
            url,
            timeout=timeout,
            headers={"Content-Type": content_type},
            content=content,
        )
