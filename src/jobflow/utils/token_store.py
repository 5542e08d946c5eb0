"""
Token Store Module
Holds the bearer token and logged-in email in local storage.
"""

from typing import Optional, Protocol

import structlog

from jobflow.utils.local_storage import TOKEN_KEY, USER_EMAIL_KEY, LocalStorage

logger = structlog.get_logger(__name__)


class CredentialProvider(Protocol):
    """Source of the bearer token attached to outgoing requests."""

    def get(self) -> Optional[str]: ...

    def set(self, token: str, email: Optional[str] = None) -> None: ...

    def clear(self) -> None: ...


class TokenStore:
    """Credential provider backed by LocalStorage.

    The token is read from storage on every ``get()`` call and never cached
    in memory, so a logout in another process takes effect immediately.
    """

    def __init__(self, storage: LocalStorage):
        """
        Initialize token store.

        Args:
            storage: Persistent key-value store holding the credentials
        """
        self.storage = storage

    def get(self) -> Optional[str]:
        """Return the stored bearer token, or None when logged out."""
        token = self.storage.get_item(TOKEN_KEY)
        return token or None

    def set(self, token: str, email: Optional[str] = None) -> None:
        """
        Store a bearer token and, optionally, the user's email.

        Raises:
            ValueError: If token is empty
        """
        if not token:
            raise ValueError("Token must not be empty")
        self.storage.set_item(TOKEN_KEY, token)
        if email:
            self.storage.set_item(USER_EMAIL_KEY, email)
        logger.info(
            "credentials_saved",
            preview=self.mask_credential(token),
            email=email,
        )

    def clear(self) -> None:
        """Remove the token and email."""
        self.storage.remove_item(TOKEN_KEY)
        self.storage.remove_item(USER_EMAIL_KEY)
        logger.info("credentials_cleared")

    def get_email(self) -> Optional[str]:
        return self.storage.get_item(USER_EMAIL_KEY)

    def has_token(self) -> bool:
        return self.get() is not None

    @staticmethod
    def mask_credential(value: str, show_chars: int = 3) -> str:
        """
        Mask credential for display in logs.

        Args:
            value: Credential value to mask
            show_chars: Number of characters to show at start

        Returns:
            Masked credential (e.g., "eyJ***")
        """
        if not value or len(value) <= show_chars:
            return "***"
        return f"{value[:show_chars]}{'*' * (len(value) - show_chars)}"
