"""
Dashboard Coordinator Module

Builds the object graph for one session: configuration, logging, local
storage, the HTTP client and request cache, every service and every view.
The CLI creates one coordinator per invocation.
"""

import uuid
from pathlib import Path
from typing import Any, Optional

import httpx
from rich.console import Console

from jobflow.models.config import ClientSettings
from jobflow.router import RouteDecision, RouteGuard
from jobflow.services.applications import ApplicationService, StatsService
from jobflow.services.auth import AuthService
from jobflow.services.discovery import JobDiscoveryService
from jobflow.services.job_urls import JobUrlService
from jobflow.services.profile import PreferencesService, ProfileService
from jobflow.services.settings import SettingsStore
from jobflow.services.uploads import UploadService
from jobflow.utils.extension_bridge import ExtensionBridge
from jobflow.utils.http_client import ApiClient
from jobflow.utils.local_storage import LocalStorage
from jobflow.utils.logger import configure_logging, get_logger
from jobflow.utils.notifier import Notifier
from jobflow.utils.query_client import QueryClient
from jobflow.utils.rate_limiter import TabOpener
from jobflow.utils.token_store import TokenStore
from jobflow.views.applications import ApplicationsView
from jobflow.views.dashboard import DashboardView
from jobflow.views.job_urls import JobUrlsView
from jobflow.views.listings import ListingsView
from jobflow.views.profile import PreferencesView, ProfileView
from jobflow.views.settings import SettingsView


class DashboardCoordinator:
    """
    Composition root for the dashboard client.

    Use as an async context manager so the pooled HTTP connection is closed:

        async with DashboardCoordinator() as app:
            await app.job_urls_view.show()
    """

    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        config_path: Optional[Path | str] = None,
        correlation_id: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        console: Optional[Console] = None,
        opener: Optional[TabOpener] = None,
        setup_logging: bool = True,
    ):
        """
        Initialize the coordinator.

        Args:
            settings: Pre-built settings (skips loading from file and env)
            config_path: Settings file for ClientSettings.load
            correlation_id: Correlation ID for logging (auto-generated if None)
            transport: httpx transport override (tests use httpx.MockTransport)
            console: rich Console for all output
            opener: Link opener for open-selected and auto-apply
            setup_logging: Reconfigure logging from the loaded settings

        Raises:
            FileNotFoundError: If config_path is given but doesn't exist
            pydantic.ValidationError: If the settings are invalid
        """
        self.settings = settings or ClientSettings.load(config_path)
        if setup_logging:
            configure_logging(
                log_file=self.settings.log_file, log_level=self.settings.log_level
            )

        if correlation_id is None:
            correlation_id = str(uuid.uuid4())
        self.correlation_id = correlation_id
        self.logger: Any = get_logger(
            correlation_id=correlation_id, view="shell", component="coordinator"
        )

        self.storage = LocalStorage(self.settings.local_storage_path)
        self.tokens = TokenStore(self.storage)
        self.api = ApiClient(
            self.settings, self.tokens, transport=transport, correlation_id=correlation_id
        )
        self.queries = QueryClient(
            self.api, self.settings.query, correlation_id=correlation_id
        )
        self.notifier = Notifier(console)
        self.bridge = ExtensionBridge(self.settings.extension_outbox_path)
        self.guard = RouteGuard(self.tokens)
        self.settings_store = SettingsStore(self.storage, correlation_id)
        self.opener = opener or TabOpener(interval=1.0)

        self.auth = AuthService(self.api, self.tokens, self.queries, correlation_id)
        self.job_urls = JobUrlService(self.api, self.queries, correlation_id)
        self.applications = ApplicationService(self.queries, correlation_id)
        self.stats = StatsService(self.queries)
        self.preferences = PreferencesService(self.api, self.queries, correlation_id)
        self.profile = ProfileService(self.api, self.queries, self.tokens, correlation_id)
        self.discovery = JobDiscoveryService(
            self.api,
            self.storage,
            timeout=self.settings.timeouts.job_discovery,
            correlation_id=correlation_id,
        )
        self.uploads = UploadService(
            self.api,
            self.tokens,
            self.settings.uploads,
            timeout=self.settings.timeouts.upload,
            correlation_id=correlation_id,
        )

        self.dashboard_view = DashboardView(
            self.stats,
            self.applications,
            self.preferences,
            self.notifier,
            correlation_id=correlation_id,
        )
        self.job_urls_view = JobUrlsView(
            self.job_urls, self.notifier, self.opener, correlation_id
        )
        self.applications_view = ApplicationsView(
            self.applications, self.notifier, correlation_id
        )
        self.listings_view = ListingsView(
            self.discovery,
            self.storage,
            self.bridge,
            self.notifier,
            self.opener,
            correlation_id,
        )
        self.profile_view = ProfileView(self.profile, self.notifier, correlation_id)
        self.preferences_view = PreferencesView(self.preferences, self.notifier)
        self.settings_view = SettingsView(
            self.settings_store,
            self.job_urls,
            self.applications,
            self.notifier,
            correlation_id,
        )

        self.logger.info(
            "Coordinator initialized",
            api_base_url=self.settings.api_base_url,
            environment=self.settings.environment,
            storage_path=str(self.settings.local_storage_path),
        )

    def navigate(self, path: str) -> RouteDecision:
        """Resolve a route; protected routes without a token redirect to /auth."""
        return self.guard.resolve(path)

    async def aclose(self) -> None:
        self.queries.cancel_queries()
        await self.api.aclose()

    async def __aenter__(self) -> "DashboardCoordinator":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
