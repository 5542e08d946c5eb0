"""User profile and free-text preferences."""

from typing import Any, Mapping, Optional

import httpx

from jobflow.models.profile import UserPreferences, UserProfile, UserProfileForm
from jobflow.services import keys
from jobflow.services.auth import AuthError
from jobflow.utils.forms import validate_form
from jobflow.utils.http_client import (
    ApiClient,
    HttpError,
    decode_json,
    expect_object,
    parse_model,
)
from jobflow.utils.logger import get_logger
from jobflow.utils.query_client import QueryClient
from jobflow.utils.token_store import TokenStore


def _unwrap_profile(response: httpx.Response) -> Optional[dict[str, Any]]:
    """The backend wraps the record: ``{"profile": {...}}``."""
    payload = expect_object(decode_json(response), keys.USER_PROFILE)
    return payload.get("profile")


class ProfileService:
    """Reads and saves /api/user/profile.

    The backend wraps the record: ``{"profile": {...}}``. A 404 means no
    profile has been saved yet.
    """

    def __init__(
        self,
        api: ApiClient,
        queries: QueryClient,
        tokens: TokenStore,
        correlation_id: Optional[str] = None,
    ):
        self.api = api
        self.queries = queries
        self.tokens = tokens
        self.logger: Any = get_logger(
            correlation_id=correlation_id, view="profile", component="profile_service"
        )

    async def _fetch_profile(self) -> Optional[dict[str, Any]]:
        try:
            response = await self.api.request("GET", keys.USER_PROFILE)
        except HttpError as e:
            if e.status == 404:
                return None
            raise
        return _unwrap_profile(response)

    async def get(self) -> Optional[UserProfile]:
        """Return the saved profile, or None if there is none yet."""
        data = await self.queries.fetch_query(keys.USER_PROFILE, self._fetch_profile)
        if data is None:
            return None
        return parse_model(UserProfile, data, keys.USER_PROFILE)

    async def save(self, values: Mapping[str, Any] | UserProfileForm) -> UserProfile:
        """Validate and save the profile.

        Raises:
            FormValidationError: Invalid input; nothing is sent
            AuthError: No stored token
            HttpError, NetworkError: The request failed
        """
        if isinstance(values, UserProfileForm):
            form = values
        else:
            form = validate_form(UserProfileForm, values, "profile form")
        if not self.tokens.has_token():
            raise AuthError("Please log in to save your profile.")

        payload = form.model_dump(mode="json")

        async def post() -> Any:
            response = await self.api.request("POST", keys.USER_PROFILE, payload)
            return _unwrap_profile(response) if response.content else None

        saved = await self.queries.mutate(post, invalidates=[keys.USER_PROFILE])
        profile = parse_model(UserProfile, saved or payload, keys.USER_PROFILE)
        self.queries.set_query_data(keys.USER_PROFILE, profile.model_dump(mode="json"))
        self.logger.info("Profile saved")
        return profile

    async def get_for_ai(self) -> Optional[UserProfile]:
        """Profile variant prepared by the backend for AI form filling.

        Returns:
            The profile, or None when logged out or the backend has none
        """
        if not self.tokens.has_token():
            return None
        try:
            response = await self.api.request("GET", keys.USER_PROFILE_AI)
        except HttpError as e:
            self.logger.error("Failed to get AI profile", status=e.status)
            return None
        data = _unwrap_profile(response)
        return parse_model(UserProfile, data, keys.USER_PROFILE_AI) if data else None


class PreferencesService:
    """Reads and saves /api/user-preferences."""

    def __init__(
        self,
        api: ApiClient,
        queries: QueryClient,
        correlation_id: Optional[str] = None,
    ):
        self.api = api
        self.queries = queries
        self.logger: Any = get_logger(
            correlation_id=correlation_id,
            view="preferences",
            component="preferences_service",
        )

    async def get(self) -> UserPreferences:
        data = await self.queries.fetch_query(keys.USER_PREFERENCES)
        return parse_model(UserPreferences, data or {}, keys.USER_PREFERENCES)

    async def save(self, values: Mapping[str, Any]) -> UserPreferences:
        form = validate_form(UserPreferences, values, "preferences form")

        async def put() -> Any:
            response = await self.api.request("PUT", keys.USER_PREFERENCES, form.to_wire())
            return decode_json(response) if response.content else None

        saved = await self.queries.mutate(put, invalidates=[keys.USER_PREFERENCES])
        self.logger.info("Preferences saved")
        if isinstance(saved, dict):
            return parse_model(UserPreferences, saved, keys.USER_PREFERENCES)
        return form
