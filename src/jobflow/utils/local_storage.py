"""
Local Storage Module

Persistent key-value store backing the dashboard's client-side state: the
bearer token, the logged-in email, the settings blob and the job lists handed
from the search form to the listings view. Values are JSON documents kept in
one file; every write replaces the file atomically.

Example Usage:
    from jobflow.utils.local_storage import LocalStorage

    storage = LocalStorage(Path("~/.jobflow/local_storage.json").expanduser())
    storage.set_item("jwt_token", "eyJhbGci...")
    storage.get_item("jwt_token")
    storage.set_json("discoveredJobs", [job.model_dump(by_alias=True) for job in jobs])
    storage.remove_item("discoveredJobs")
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

# Fixed keys shared with the companion browser extension
TOKEN_KEY = "jwt_token"
USER_EMAIL_KEY = "user_email"
SETTINGS_KEY = "jobflow-settings"
DISCOVERED_JOBS_KEY = "discoveredJobs"
AUTO_APPLY_JOBS_KEY = "autoApplyJobs"


class StorageError(IOError):
    """Raised when the storage file cannot be read or written."""

    pass


class LocalStorage:
    """String-valued key-value store persisted to a JSON file."""

    def __init__(self, path: Path | str):
        """
        Initialize LocalStorage.

        Args:
            path: Location of the storage file (created on first write)
        """
        self.path = Path(path)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError:
            # A corrupted store behaves like an empty one
            return {}
        except OSError as e:
            raise StorageError(f"Failed to read storage file {self.path}: {e}") from e
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _write(self, data: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=".storage-", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, self.path)
        except OSError as e:
            raise StorageError(f"Failed to write storage file {self.path}: {e}") from e

        if os.name != "nt":
            try:
                os.chmod(self.path, 0o600)
            except OSError:
                pass

    def get_item(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def clear(self) -> None:
        self._write({})

    def keys(self) -> list[str]:
        return list(self._read().keys())

    def get_json(self, key: str, default: Any = None) -> Any:
        """
        Read a JSON-encoded value.

        Returns:
            Decoded value, or default if the key is missing or not valid JSON
        """
        raw = self.get_item(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return default

    def set_json(self, key: str, value: Any) -> None:
        self.set_item(key, json.dumps(value))
