"""
Unit tests for AuthService.
"""

import json

import pytest

from jobflow.services.auth import AuthError, AuthService
from jobflow.utils.forms import FormValidationError
from jobflow.utils.http_client import HttpError


@pytest.fixture
def auth(api, tokens, queries):
    return AuthService(api, tokens, queries)


class TestLogin:
    """Test cases for login and signup."""

    @pytest.mark.asyncio
    async def test_empty_password_blocks_before_network(self, auth, backend):
        """Validation fails and no request is made."""
        # Act
        with pytest.raises(FormValidationError) as exc_info:
            await auth.login("alice@example.com", "")

        # Assert
        assert exc_info.value.field_errors == {"password": "Password is required"}
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_invalid_email_blocks_before_network(self, auth, backend):
        with pytest.raises(FormValidationError) as exc_info:
            await auth.login("not-an-email", "secret")
        assert exc_info.value.field_errors["email"] == "Valid email is required"
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_login_stores_token_and_user_email(self, auth, backend, tokens):
        # Arrange
        backend.on(
            "POST",
            "/api/auth/login",
            json={"token": "jwt-123", "user": {"email": "Alice@Example.com"}},
        )

        # Act
        result = await auth.login("alice@example.com", "secret")

        # Assert
        assert result.token == "jwt-123"
        assert tokens.get() == "jwt-123"
        assert tokens.get_email() == "Alice@Example.com"
        assert json.loads(backend.requests[0].content) == {
            "email": "alice@example.com",
            "password": "secret",
        }

    @pytest.mark.asyncio
    async def test_email_falls_back_to_submitted(self, auth, backend, tokens):
        # Arrange
        backend.on("POST", "/api/auth/signup", json={"token": "jwt-new"})

        # Act
        result = await auth.signup("bob@example.com", "pw")

        # Assert
        assert result.email == "bob@example.com"
        assert auth.current_email() == "bob@example.com"

    @pytest.mark.asyncio
    async def test_missing_token_is_an_error(self, auth, backend, tokens):
        # Arrange
        backend.on("POST", "/api/auth/login", json={"user": {"email": "a@b.co"}})

        # Act
        with pytest.raises(AuthError, match="No token received"):
            await auth.login("a@b.co", "pw")

        # Assert
        assert tokens.get() is None

    @pytest.mark.asyncio
    async def test_rejected_credentials(self, auth, backend):
        backend.on("POST", "/api/auth/login", status=401, json={"error": "Invalid credentials"})
        with pytest.raises(HttpError) as exc_info:
            await auth.login("a@b.co", "wrong")
        assert exc_info.value.status == 401

    @pytest.mark.asyncio
    async def test_login_clears_previous_users_cache(self, auth, backend, queries):
        # Arrange
        queries.set_query_data("/api/job-urls", [{"id": "old"}])
        backend.on("POST", "/api/auth/login", json={"token": "t"})

        # Act
        await auth.login("a@b.co", "pw")

        # Assert
        assert queries.get_query_data("/api/job-urls") is None


class TestLogout:
    @pytest.mark.asyncio
    async def test_logout_clears_token_and_cache(self, auth, logged_in, queries):
        # Arrange
        queries.set_query_data("/api/stats", {"interviews": 3})

        # Act
        auth.logout()

        # Assert
        assert not auth.is_logged_in()
        assert auth.current_email() is None
        assert queries.get_query_data("/api/stats") is None
