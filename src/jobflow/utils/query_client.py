"""In-memory request cache shared by all services.

Reads are keyed by request path. A cached result is served while it is
fresh (five minutes by default) and has not been invalidated; otherwise one
fetch runs and every concurrent caller for the same key awaits it.

Retry policy is a decision table keyed by error class, applied with tenacity:

    4xx      -> never retried
    5xx      -> retried
    network  -> retried
    other    -> retried

Reads are retried at most ``max_retries`` times (two by default). Mutations
are never retried; a successful mutation invalidates the keys it names. A
read issued after an invalidation never joins a fetch that started before it.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Optional

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    stop_after_attempt,
    wait_exponential,
)

from jobflow.models.config import QueryDefaults
from jobflow.utils.http_client import ApiClient, HttpError, NetworkError
from jobflow.utils.logger import get_logger

Fetcher = Callable[[], Awaitable[Any]]

RETRY_DECISIONS: dict[str, bool] = {
    "4xx": False,
    "5xx": True,
    "network": True,
    "other": True,
}


def classify_error(exc: BaseException) -> str:
    """Map an exception to its row in RETRY_DECISIONS."""
    if isinstance(exc, HttpError):
        if 400 <= exc.status < 500:
            return "4xx"
        if 500 <= exc.status < 600:
            return "5xx"
        # 2xx bodies that failed to decode (ResponseFormatError) land here
        return "other"
    if isinstance(exc, NetworkError):
        return "network"
    return "other"


def should_retry(failure_count: int, exc: BaseException, max_retries: int = 2) -> bool:
    """Decide whether a failed read is retried.

    Args:
        failure_count: Retries already performed for this fetch
        exc: The exception raised by the latest attempt
        max_retries: Retry budget per fetch

    Returns:
        True if another attempt should be made
    """
    # Cancellation and interpreter exits are never retried
    if not isinstance(exc, Exception):
        return False
    if not RETRY_DECISIONS[classify_error(exc)]:
        return False
    return failure_count < max_retries


def key_matches(prefix: str, key: str) -> bool:
    """True if ``key`` equals ``prefix`` or lies below it (``prefix/...``, ``prefix?...``)."""
    if key == prefix:
        return True
    base = prefix.rstrip("/")
    return key.startswith(base + "/") or key.startswith(prefix + "?")


@dataclass
class QueryState:
    """Cached result and bookkeeping for one key."""

    data: Any = None
    error: Optional[BaseException] = None
    status: str = "idle"
    updated_at: Optional[float] = None
    invalidated: bool = False
    generation: int = 0
    fetcher: Optional[Fetcher] = field(default=None, repr=False)


@dataclass
class _InFlight:
    task: "asyncio.Future[Any]"
    generation: int
    waiters: int = 0


class QueryClient:
    """Request cache with freshness, de-duplication, retry and invalidation."""

    def __init__(
        self,
        api: ApiClient,
        defaults: Optional[QueryDefaults] = None,
        clock: Callable[[], float] = time.monotonic,
        correlation_id: Optional[str] = None,
    ):
        """
        Initialize QueryClient.

        Args:
            api: Client used by the default fetcher (GET on the key)
            defaults: Stale time, retry budget/backoff and 401 behavior
            clock: Monotonic clock in seconds (injectable for tests)
            correlation_id: Correlation ID for logging
        """
        self.api = api
        self.defaults = defaults or QueryDefaults()
        self.clock = clock
        self.logger: Any = get_logger(
            correlation_id=correlation_id,
            view="cache",
            component="query_client",
        )
        self._queries: dict[str, QueryState] = {}
        self._inflight: dict[str, _InFlight] = {}

    def _default_fetcher(self, key: str) -> Fetcher:
        async def fetch() -> Any:
            return await self.api.query(key, on_401=self.defaults.on_401)  # type: ignore[arg-type]

        return fetch

    def _is_fresh(self, state: QueryState, stale_time: float) -> bool:
        if state.status != "success" or state.invalidated or state.updated_at is None:
            return False
        return (self.clock() - state.updated_at) < stale_time

    def _retry_predicate(self, retry_state: RetryCallState) -> bool:
        if retry_state.outcome is None or not retry_state.outcome.failed:
            return False
        exc = retry_state.outcome.exception()
        return should_retry(
            retry_state.attempt_number - 1, exc, self.defaults.max_retries
        )

    def _log_retry(self, key: str) -> Callable[[RetryCallState], None]:
        def before_sleep(retry_state: RetryCallState) -> None:
            exc = retry_state.outcome.exception() if retry_state.outcome else None
            self.logger.warning(
                "Query failed, retrying",
                key=key,
                attempt=retry_state.attempt_number,
                error=str(exc),
            )

        return before_sleep

    async def _fetch_with_retry(self, key: str, fetcher: Fetcher) -> Any:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.defaults.max_retries + 1),
            wait=wait_exponential(
                multiplier=self.defaults.retry_base_delay,
                max=self.defaults.retry_max_delay,
            ),
            retry=self._retry_predicate,
            before_sleep=self._log_retry(key),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await fetcher()

    def _owns_state(self, key: str, state: QueryState, generation: int) -> bool:
        """True if a fetch started at ``generation`` may still write ``state``.

        An outdated fetch with no newer fetch running only puts the status
        back; the data stays invalidated.
        """
        if state.generation == generation:
            return True
        current = self._inflight.get(key)
        if current is None or current.generation == generation:
            state.status = "success" if state.updated_at is not None else "idle"
        return False

    async def _run_fetch(
        self, key: str, state: QueryState, fetcher: Fetcher, generation: int
    ) -> Any:
        state.status = "loading"
        try:
            data = await self._fetch_with_retry(key, fetcher)
        except asyncio.CancelledError:
            if self._owns_state(key, state, generation):
                state.status = "success" if state.updated_at is not None else "idle"
            raise
        except Exception as e:
            self.logger.error("Query failed", key=key, error=str(e))
            if self._owns_state(key, state, generation):
                state.error = e
                state.status = "error"
            raise

        if not self._owns_state(key, state, generation):
            # Callers already waiting get this result; the cache does not
            self.logger.debug("Discarding outdated query result", key=key)
            return data

        state.data = data
        state.error = None
        state.status = "success"
        state.updated_at = self.clock()
        state.invalidated = False
        self.logger.debug("Query fetched", key=key)
        return data

    async def fetch_query(
        self,
        key: str,
        fetcher: Optional[Fetcher] = None,
        stale_time: Optional[float] = None,
    ) -> Any:
        """Return fresh cached data for ``key`` or fetch it.

        Args:
            key: Cache key (a request path)
            fetcher: Coroutine function producing the data; defaults to a GET on ``key``
            stale_time: Freshness window override in seconds

        Returns:
            The cached or freshly fetched data

        Raises:
            HttpError, NetworkError: When the fetch fails after retries
            asyncio.CancelledError: If this caller or the fetch is cancelled
        """
        stale = self.defaults.stale_time if stale_time is None else stale_time
        state = self._queries.get(key)
        if state is not None and self._is_fresh(state, stale):
            self.logger.debug("Cache hit", key=key)
            return state.data

        if state is None:
            state = QueryState()
            self._queries[key] = state
        if fetcher is not None:
            state.fetcher = fetcher
        fetch_fn = state.fetcher or self._default_fetcher(key)

        inflight = self._inflight.get(key)
        if inflight is not None and inflight.generation != state.generation:
            # Started before an invalidation; a read issued now must not join it
            self.logger.debug("Superseding outdated in-flight query", key=key)
            inflight = None
        if inflight is None:
            task = asyncio.ensure_future(
                self._run_fetch(key, state, fetch_fn, state.generation)
            )
            inflight = _InFlight(task=task, generation=state.generation)
            self._inflight[key] = inflight

            def _release(_: "asyncio.Future[Any]", key: str = key, entry: _InFlight = inflight) -> None:
                if self._inflight.get(key) is entry:
                    del self._inflight[key]

            task.add_done_callback(_release)
        else:
            self.logger.debug("Joining in-flight query", key=key)

        inflight.waiters += 1
        try:
            return await asyncio.shield(inflight.task)
        finally:
            inflight.waiters -= 1
            if inflight.waiters == 0 and not inflight.task.done():
                # Nobody is waiting any more: stop the request
                inflight.task.cancel()

    async def mutate(
        self,
        fn: Fetcher,
        invalidates: Iterable[str] = (),
        refetch: bool = False,
    ) -> Any:
        """Run a mutation once and invalidate the affected keys on success.

        Args:
            fn: Coroutine function performing the mutation
            invalidates: Keys whose cached reads become stale on success
            refetch: Re-fetch invalidated keys that were loaded before

        Returns:
            Whatever ``fn`` returns
        """
        result = await fn()
        for key in invalidates:
            await self.invalidate_queries(key, refetch=refetch)
        return result

    async def invalidate_queries(
        self, key: Optional[str] = None, refetch: bool = False
    ) -> list[str]:
        """Mark matching keys stale (all keys when ``key`` is None).

        Returns:
            The keys that were invalidated
        """
        matched = [k for k in self._queries if key is None or key_matches(key, k)]
        for k in matched:
            state = self._queries[k]
            state.invalidated = True
            state.generation += 1
        if matched:
            self.logger.debug("Queries invalidated", key=key, matched=matched)

        if refetch:
            to_refetch = [
                k for k in matched if self._queries[k].updated_at is not None
            ]
            results = await asyncio.gather(
                *(self.fetch_query(k) for k in to_refetch), return_exceptions=True
            )
            for k, result in zip(to_refetch, results):
                if isinstance(result, BaseException):
                    self.logger.warning("Refetch after invalidation failed", key=k, error=str(result))
        return matched

    def cancel_queries(self, key: Optional[str] = None) -> int:
        """Cancel in-flight fetches for matching keys; returns how many."""
        cancelled = 0
        for k, inflight in list(self._inflight.items()):
            if key is None or key_matches(key, k):
                if not inflight.task.done():
                    inflight.task.cancel()
                    cancelled += 1
        return cancelled

    def get_query_data(self, key: str) -> Any:
        state = self._queries.get(key)
        return state.data if state is not None else None

    def get_query_state(self, key: str) -> Optional[QueryState]:
        return self._queries.get(key)

    def set_query_data(self, key: str, data: Any) -> None:
        state = self._queries.setdefault(key, QueryState())
        state.data = data
        state.error = None
        state.status = "success"
        state.updated_at = self.clock()
        state.invalidated = False

    def remove_queries(self, key: Optional[str] = None) -> None:
        for k in [k for k in self._queries if key is None or key_matches(key, k)]:
            del self._queries[k]

    def clear(self) -> None:
        """Drop every cached result and cancel in-flight fetches."""
        self.cancel_queries()
        self._queries.clear()
