"""
Unit tests for the command line and the coordinator behind it.
"""

import httpx
import pytest
import pytest_asyncio
from pydantic import ValidationError
from rich.console import Console

from jobflow.cli import (
    EXIT_FAILURE,
    EXIT_LOGIN_REQUIRED,
    EXIT_OK,
    build_parser,
    dispatch,
    main,
    parse_setting_pairs,
)
from jobflow.coordinator import DashboardCoordinator
from jobflow.models.job import JobUrl
from jobflow.utils.rate_limiter import TabOpener


@pytest.fixture
def console():
    return Console(record=True, width=120, color_system=None)


@pytest_asyncio.fixture
async def app(settings, backend, console):
    coordinator = DashboardCoordinator(
        settings=settings,
        transport=httpx.MockTransport(backend),
        console=console,
        opener=TabOpener(interval=0.01, open_url=lambda url: None),
        setup_logging=False,
    )
    yield coordinator
    await coordinator.aclose()


def parse(*argv):
    return build_parser().parse_args(list(argv))


class TestParser:
    def test_usage_error_exits_2(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["urls", "frobnicate"])
        assert exc_info.value.code == 2

    def test_search_defaults(self):
        args = parse("search", "--title", "Engineer", "--location", "Berlin")
        assert args.posted_after == "7"
        assert args.remote is False

    def test_setting_pairs_parsed_as_json(self):
        assert parse_setting_pairs(["actionDelay=5", "autoSubmit=true", "apiEndpoint=https://x.example"]) == {
            "actionDelay": 5,
            "autoSubmit": True,
            "apiEndpoint": "https://x.example",
        }

    def test_setting_pair_without_equals(self):
        with pytest.raises(ValueError):
            parse_setting_pairs(["actionDelay"])


class TestDispatch:
    @pytest.mark.asyncio
    async def test_protected_command_without_token(self, app, backend, console):
        """Redirected to login: exit 3 and no request made."""
        # Act
        code = await dispatch(app, parse("urls", "list"))

        # Assert
        assert code == EXIT_LOGIN_REQUIRED
        assert backend.requests == []
        assert "Not logged in" in console.export_text()

    @pytest.mark.asyncio
    async def test_login_with_flags(self, app, backend):
        # Arrange
        backend.on("POST", "/api/auth/login", json={"token": "jwt", "user": {"email": "a@b.co"}})

        # Act
        code = await dispatch(app, parse("login", "--email", "a@b.co", "--password", "pw"))

        # Assert
        assert code == EXIT_OK
        assert app.tokens.get() == "jwt"

    @pytest.mark.asyncio
    async def test_login_with_empty_password_fails_locally(self, app, backend):
        code = await dispatch(app, parse("login", "--email", "a@b.co", "--password", ""))
        assert code == EXIT_FAILURE
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_list_failure_exit_code(self, app, backend, logged_in, console):
        # Arrange
        backend.on("GET", "/api/job-urls", status=500, text="db unavailable")

        # Act
        code = await dispatch(app, parse("urls", "list"))

        # Assert
        assert code == EXIT_FAILURE
        assert "db unavailable" in console.export_text()

    @pytest.mark.asyncio
    async def test_add_url(self, app, backend, logged_in):
        # Arrange
        backend.on("POST", "/api/job-urls", status=201, json={"id": 5, "url": "https://jobs.example/5"})

        # Act
        code = await dispatch(app, parse("urls", "add", "https://jobs.example/5", "--company", "Acme"))

        # Assert
        assert code == EXIT_OK
        assert backend.calls("POST", "/api/job-urls") == 1

    @pytest.mark.asyncio
    async def test_whoami_and_logout(self, app, logged_in, console):
        # Act
        whoami = await dispatch(app, parse("whoami"))
        logout = await dispatch(app, parse("logout"))
        after = await dispatch(app, parse("whoami"))

        # Assert
        assert (whoami, logout, after) == (EXIT_OK, EXIT_OK, EXIT_LOGIN_REQUIRED)
        assert "alice@example.com" in console.export_text()

    @pytest.mark.asyncio
    async def test_settings_set_and_clear(self, app, logged_in):
        # Act
        set_code = await dispatch(app, parse("settings", "set", "actionDelay=7"))
        clear_code = await dispatch(app, parse("settings", "clear-data", "--yes"))

        # Assert
        assert set_code == EXIT_OK
        assert clear_code == EXIT_OK
        assert app.tokens.get() is None


class TestCoordinator:
    @pytest.mark.asyncio
    async def test_navigate_uses_guard(self, app, logged_in):
        assert app.navigate("/listings").should_render
        assert app.navigate("/missing").action == "not-found"

    @pytest.mark.asyncio
    async def test_services_share_one_cache(self, app):
        assert app.job_urls.queries is app.applications.queries is app.profile.queries


class TestMain:
    def test_missing_config_file(self, tmp_path):
        code = main(["--config", str(tmp_path / "missing.json"), "whoami"])
        assert code == EXIT_FAILURE

    def test_response_validation_not_reported_as_config_error(self, settings, mocker):
        """Only loading settings is treated as a configuration problem."""
        # Arrange
        with pytest.raises(ValidationError) as invalid:
            JobUrl.model_validate({})
        mocker.patch("jobflow.cli.ClientSettings.load", return_value=settings)
        mocker.patch("jobflow.cli.run", side_effect=invalid.value)

        # Act & Assert
        with pytest.raises(ValidationError):
            main(["whoami"])
