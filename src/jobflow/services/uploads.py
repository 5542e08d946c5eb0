"""CV upload.

Two flows exist. The proxy flow posts the file to the backend, which stores
it. If that fails, the presigned flow asks the backend for a time-limited
storage URL, PUTs the file there directly, and confirms the upload.
"""

import mimetypes
from pathlib import Path
from typing import Any, Optional

from jobflow.models.auth import PresignedUpload, UploadResult
from jobflow.models.config import UploadLimits
from jobflow.services import keys
from jobflow.utils.http_client import (
    ApiClient,
    HttpError,
    NetworkError,
    decode_json,
    parse_model,
)
from jobflow.utils.logger import get_logger
from jobflow.utils.token_store import TokenStore

CONTENT_TYPES_BY_SUFFIX = {
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


class UploadError(Exception):
    """Upload rejected or failed; the message is shown to the user."""

    pass


def guess_content_type(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix in CONTENT_TYPES_BY_SUFFIX:
        return CONTENT_TYPES_BY_SUFFIX[suffix]
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or "application/octet-stream"


class UploadService:
    """Validates and uploads CV files."""

    def __init__(
        self,
        api: ApiClient,
        tokens: TokenStore,
        limits: Optional[UploadLimits] = None,
        timeout: float = 120.0,
        correlation_id: Optional[str] = None,
    ):
        self.api = api
        self.tokens = tokens
        self.limits = limits or UploadLimits()
        self.timeout = timeout
        self.logger: Any = get_logger(
            correlation_id=correlation_id, view="upload", component="upload_service"
        )

    def validate(self, size: int, content_type: str) -> None:
        """Client-side checks run before any request.

        Raises:
            UploadError: File too large or of an unsupported type
        """
        if size > self.limits.max_size_bytes:
            raise UploadError(
                f"File size must be less than {self.limits.max_size_mb:g}MB"
            )
        if content_type not in self.limits.allowed_types:
            raise UploadError("Only PDF and Word documents are allowed")

    async def upload(self, path: Path | str) -> UploadResult:
        """Upload a CV, falling back from the proxy flow to the presigned flow.

        Raises:
            UploadError: Validation failed, not logged in, or both flows failed
            HttpError: The presign or confirm request was rejected
        """
        path = Path(path)
        if not path.is_file():
            raise UploadError(f"File not found: {path}")

        content_type = guess_content_type(path)
        size = path.stat().st_size
        self.validate(size, content_type)

        if not self.tokens.has_token():
            raise UploadError("User not authenticated. Please log in again.")

        content = path.read_bytes()
        self.logger.info(
            "Starting file upload", file_name=path.name, content_type=content_type, size=size
        )

        try:
            return await self._proxy_upload(path.name, content, content_type)
        except (HttpError, NetworkError) as e:
            self.logger.warning(
                "Proxy upload failed, trying presigned URL", error=str(e)
            )

        return await self._presigned_upload(path.name, content, content_type)

    async def _proxy_upload(
        self, file_name: str, content: bytes, content_type: str
    ) -> UploadResult:
        response = await self.api.upload(
            keys.UPLOAD_PROXY,
            files={"file": (file_name, content, content_type)},
            fields={"fileName": file_name, "fileType": content_type},
            timeout=self.timeout,
        )
        result = parse_model(UploadResult, decode_json(response), keys.UPLOAD_PROXY)
        self.logger.info("Proxy upload successful", file_id=result.file_id)
        return result

    async def _presigned_upload(
        self, file_name: str, content: bytes, content_type: str
    ) -> UploadResult:
        response = await self.api.request(
            "POST",
            keys.UPLOAD_PRESIGN,
            {"fileName": file_name, "fileType": content_type, "fileSize": len(content)},
        )
        presigned = parse_model(PresignedUpload, decode_json(response), keys.UPLOAD_PRESIGN)

        try:
            await self.api.put_direct(
                presigned.upload_url, content, content_type, timeout=self.timeout
            )
        except NetworkError as e:
            raise UploadError(e.message) from e
        except HttpError as e:
            raise UploadError(f"Upload failed: Direct upload failed: {e.status}") from e

        await self.api.request(
            "POST",
            keys.UPLOAD_CONFIRM,
            {"fileId": presigned.file_id, "fileName": file_name},
        )
        self.logger.info("Presigned upload successful", file_id=presigned.file_id)
        return UploadResult(
            file_url=presigned.file_url,
            file_id=presigned.file_id,
            file_name=file_name,
        )
