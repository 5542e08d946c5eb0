"""Login, signup and logout against the token-issuing endpoints."""

from typing import Any, Optional

from jobflow.models.auth import AuthResult, LoginForm
from jobflow.services import keys
from jobflow.utils.forms import validate_form
from jobflow.utils.http_client import ApiClient
from jobflow.utils.logger import get_logger
from jobflow.utils.query_client import QueryClient
from jobflow.utils.token_store import TokenStore


class AuthError(Exception):
    """Authentication did not produce a usable token."""

    pass


class AuthService:
    """Obtains and discards the bearer token."""

    def __init__(
        self,
        api: ApiClient,
        tokens: TokenStore,
        queries: Optional[QueryClient] = None,
        correlation_id: Optional[str] = None,
    ):
        self.api = api
        self.tokens = tokens
        self.queries = queries
        self.logger: Any = get_logger(
            correlation_id=correlation_id, view="auth", component="auth_service"
        )

    async def login(self, email: str, password: str) -> AuthResult:
        """Log in and store the token.

        Raises:
            FormValidationError: Empty password or invalid email; nothing is sent
            HttpError: Backend rejected the credentials
            AuthError: Response carried no token
        """
        form = validate_form(LoginForm, {"email": email, "password": password}, "login form")
        return await self._authenticate(keys.AUTH_LOGIN, form)

    async def signup(self, email: str, password: str) -> AuthResult:
        """Create an account; the user is logged in afterwards."""
        form = validate_form(LoginForm, {"email": email, "password": password}, "signup form")
        return await self._authenticate(keys.AUTH_SIGNUP, form)

    async def _authenticate(self, path: str, form: LoginForm) -> AuthResult:
        response = await self.api.request(
            "POST", path, {"email": form.email, "password": form.password}
        )
        try:
            data = response.json()
        except ValueError as e:
            raise AuthError("Invalid response from server") from e

        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            self.logger.error("Authentication response without token", path=path)
            raise AuthError("No token received")

        user = data.get("user")
        email = (user.get("email") if isinstance(user, dict) else None) or str(form.email)
        self.tokens.set(token, email)

        # Cached reads belonged to whoever was logged in before
        if self.queries is not None:
            self.queries.clear()

        self.logger.info("Authenticated", path=path, email=email)
        return AuthResult(token=token, email=email)

    def logout(self) -> None:
        self.tokens.clear()
        if self.queries is not None:
            self.queries.clear()
        self.logger.info("Logged out")

    def current_email(self) -> Optional[str]:
        return self.tokens.get_email() if self.tokens.has_token() else None

    def is_logged_in(self) -> bool:
        return self.tokens.has_token()
