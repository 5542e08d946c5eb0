"""
Unit tests for LocalStorage and TokenStore.
"""

import json
import os

import pytest

from jobflow.utils.local_storage import (
    DISCOVERED_JOBS_KEY,
    TOKEN_KEY,
    USER_EMAIL_KEY,
    LocalStorage,
)
from jobflow.utils.token_store import TokenStore


class TestLocalStorage:
    """Test cases for the file-backed key-value store."""

    def test_missing_file_reads_as_empty(self, tmp_path):
        """Nothing stored yet -> every key is absent."""
        # Arrange
        storage = LocalStorage(tmp_path / "nope.json")

        # Act & Assert
        assert storage.get_item("jwt_token") is None
        assert storage.keys() == []

    def test_set_get_remove(self, tmp_path):
        """Values persist across instances and can be removed."""
        # Arrange
        path = tmp_path / "store" / "local_storage.json"
        LocalStorage(path).set_item("a", "1")

        # Act
        storage = LocalStorage(path)
        value = storage.get_item("a")
        storage.remove_item("a")

        # Assert
        assert value == "1"
        assert LocalStorage(path).get_item("a") is None

    def test_json_helpers(self, tmp_path):
        """set_json/get_json round the value through a JSON string."""
        # Arrange
        storage = LocalStorage(tmp_path / "s.json")
        jobs = [{"id": "1", "title": "Engineer"}]

        # Act
        storage.set_json(DISCOVERED_JOBS_KEY, jobs)

        # Assert
        assert isinstance(storage.get_item(DISCOVERED_JOBS_KEY), str)
        assert storage.get_json(DISCOVERED_JOBS_KEY) == jobs

    def test_invalid_json_value_returns_default(self, tmp_path):
        """A non-JSON string under a key yields the default."""
        # Arrange
        storage = LocalStorage(tmp_path / "s.json")
        storage.set_item("jobflow-settings", "{not json")

        # Act & Assert
        assert storage.get_json("jobflow-settings", default={}) == {}

    def test_corrupted_file_behaves_as_empty(self, tmp_path):
        """A corrupted storage file does not crash reads."""
        # Arrange
        path = tmp_path / "s.json"
        path.write_text("garbage")

        # Act & Assert
        assert LocalStorage(path).get_item("jwt_token") is None

    def test_clear_removes_everything(self, tmp_path):
        """clear() empties the store but keeps the file."""
        # Arrange
        path = tmp_path / "s.json"
        storage = LocalStorage(path)
        storage.set_item("a", "1")
        storage.set_item("b", "2")

        # Act
        storage.clear()

        # Assert
        assert storage.keys() == []
        assert json.loads(path.read_text()) == {}

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
    def test_file_is_private(self, tmp_path):
        """The store holds the token, so only the owner may read it."""
        # Arrange
        path = tmp_path / "s.json"

        # Act
        LocalStorage(path).set_item(TOKEN_KEY, "secret")

        # Assert
        assert oct(path.stat().st_mode & 0o777) == "0o600"


class TestTokenStore:
    """Test cases for TokenStore."""

    def test_set_stores_token_and_email(self, storage):
        """Token and email land under their fixed keys."""
        # Arrange
        tokens = TokenStore(storage)

        # Act
        tokens.set("jwt", "alice@example.com")

        # Assert
        assert storage.get_item(TOKEN_KEY) == "jwt"
        assert storage.get_item(USER_EMAIL_KEY) == "alice@example.com"
        assert tokens.has_token()

    def test_reads_fresh_from_storage(self, storage):
        """A token written by someone else is seen on the next get()."""
        # Arrange
        tokens = TokenStore(storage)
        assert tokens.get() is None

        # Act
        storage.set_item(TOKEN_KEY, "from-elsewhere")

        # Assert
        assert tokens.get() == "from-elsewhere"

    def test_clear_logs_out(self, logged_in):
        """clear() removes both token and email."""
        # Act
        logged_in.clear()

        # Assert
        assert logged_in.get() is None
        assert logged_in.get_email() is None

    def test_empty_token_rejected(self, tokens):
        """An empty token is never stored."""
        # Act & Assert
        with pytest.raises(ValueError):
            tokens.set("")

    @pytest.mark.parametrize(
        "value,expected",
        [("eyJhbGci", "eyJ*****"), ("ab", "***"), ("", "***")],
    )
    def test_mask_credential(self, value, expected):
        """Only the first three characters are shown."""
        assert TokenStore.mask_credential(value) == expected
