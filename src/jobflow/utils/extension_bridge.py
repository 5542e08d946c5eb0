"""
Extension Bridge Module

Hands selected jobs to the companion browser extension. Messages are
appended as JSON lines to an outbox file the extension's native host reads.

Example Usage:
    bridge = ExtensionBridge(Path("~/.jobflow/extension_outbox.jsonl").expanduser())
    bridge.send_message("autoApplyJobs", {"jobs": [...]})
    bridge.read_messages()
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import jsonlines

from jobflow.utils.logger import get_logger


class ExtensionBridge:
    """Append-only message channel to the browser extension."""

    def __init__(self, outbox_path: Path | str):
        """
        Initialize ExtensionBridge.

        Args:
            outbox_path: JSONL file the extension reads messages from
        """
        self.outbox_path = Path(outbox_path)
        self.logger = get_logger(view="listings", component="extension_bridge")

    def send_message(self, action: str, payload: dict[str, Any]) -> None:
        """
        Post one message to the extension.

        Args:
            action: Message type the extension dispatches on (e.g., "autoApplyJobs")
            payload: Message body merged next to the action

        Raises:
            IOError: If the outbox cannot be written
        """
        message = {
            "action": action,
            "sentAt": datetime.now(timezone.utc).isoformat(),
            **payload,
        }
        try:
            self.outbox_path.parent.mkdir(parents=True, exist_ok=True)
            with jsonlines.open(self.outbox_path, mode="a") as writer:
                writer.write(message)
        except OSError as e:
            raise IOError(f"Failed to write extension message {action}: {e}") from e

        self.logger.info("Extension message sent", action=action)

    def read_messages(self) -> list[dict[str, Any]]:
        """Return every message posted so far (oldest first)."""
        if not self.outbox_path.exists():
            return []
        with jsonlines.open(self.outbox_path) as reader:
            return list(reader)
