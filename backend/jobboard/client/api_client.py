"""
HTTP client for the resume API
"""
import mimetypes
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union
import httpx
import structlog

from jobboard.client.config import PollerSettings

logger = structlog.get_logger()

RESUMES_PATH = "/api/v1/resumes"

MIME_BY_EXTENSION = {
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}
DEFAULT_MAX_UPLOAD_SIZE_MB = 5


class ResumeClientError(Exception):
    """Request rejected by the API or not delivered at all"""

    def __init__(self, message: str, status_code: Optional[int] = None, error_type: Optional[str] = None):
        self.message = message
        self.status_code = status_code
        self.error_type = error_type
        super().__init__(message)

    @property
    def is_transport_error(self) -> bool:
        return self.status_code is None


def guess_mime_type(file_name: str) -> str:
    extension = Path(file_name).suffix.lower()
    if extension in MIME_BY_EXTENSION:
        return MIME_BY_EXTENSION[extension]
    return mimetypes.guess_type(file_name)[0] or "application/octet-stream"


def validate_file(
    file_name: str,
    size: int,
    mime_type: str,
    max_size_mb: int = DEFAULT_MAX_UPLOAD_SIZE_MB,
    allowed_mime_types: Optional[Iterable[str]] = None,
):
    """Same checks the server applies, run before uploading; limits mirror the server settings"""
    allowed = {m.lower() for m in (allowed_mime_types or MIME_BY_EXTENSION.values())}
    if (mime_type or "").lower() not in allowed:
        raise ResumeClientError("Invalid file type. Only PDF and DOC/DOCX files are allowed.")
    if size > max_size_mb * 1024 * 1024:
        raise ResumeClientError(f"File too large. Maximum size is {max_size_mb}MB.")
    if size == 0:
        raise ResumeClientError(f"File is empty: {file_name}")


class ResumeApiClient:
    """Synchronous client for the /api/v1/resumes routes"""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
        max_upload_size_mb: int = DEFAULT_MAX_UPLOAD_SIZE_MB,
        allowed_mime_types: Optional[Iterable[str]] = None,
    ):
        self.max_upload_size_mb = max_upload_size_mb
        self.allowed_mime_types = list(allowed_mime_types) if allowed_mime_types else None
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self.client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Optional[PollerSettings] = None, **kwargs) -> "ResumeApiClient":
        settings = settings or PollerSettings()
        return cls(
            settings.API_URL,
            token=settings.API_TOKEN,
            timeout=settings.REQUEST_TIMEOUT_SECONDS,
            max_upload_size_mb=settings.MAX_UPLOAD_SIZE_MB,
            allowed_mime_types=settings.ALLOWED_MIME_TYPES,
            **kwargs,
        )

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self):
        self.client.close()

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        try:
            response = self.client.request(method, f"{RESUMES_PATH}{path}", **kwargs)
        except httpx.HTTPError as e:
            logger.warning("resume_api_unreachable", method=method, path=path, error=str(e))
            raise ResumeClientError(f"Request failed: {e}") from e

        if response.is_error:
            message, error_type = self._error_details(response)
            raise ResumeClientError(message, status_code=response.status_code, error_type=error_type)
        return response.json()

    def _error_details(self, response: httpx.Response):
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason_phrase, None
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict):
            return error.get("message") or response.reason_phrase, error.get("type")
        if isinstance(body, dict) and "detail" in body:
            return str(body["detail"]), None
        return response.reason_phrase, None

    def upload(self, file: Union[str, Path], mime_type: Optional[str] = None) -> Dict[str, Any]:
        """Upload a resume file; the record comes back in processing"""
        path = Path(file)
        content = path.read_bytes()
        mime_type = mime_type or guess_mime_type(path.name)
        validate_file(
            path.name,
            len(content),
            mime_type,
            max_size_mb=self.max_upload_size_mb,
            allowed_mime_types=self.allowed_mime_types,
        )

        result = self._request("POST", "/upload", files={"file": (path.name, content, mime_type)})
        logger.info("resume_upload_accepted", resume_id=result.get("id"), file_name=path.name)
        return result

    def get_status(self, resume_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/{resume_id}/status")

    def get_active(self) -> Dict[str, Any]:
        return self._request("GET", "/active")

    def get(self, resume_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/{resume_id}")

    def list(self, skip: int = 0, limit: int = 100) -> Dict[str, Any]:
        return self._request("GET", "/", params={"skip": skip, "limit": limit})

    def reprocess(self, resume_id: int) -> Dict[str, Any]:
        return self._request("POST", f"/{resume_id}/reprocess")

    def delete(self, resume_id: int) -> Dict[str, Any]:
        return self._request("DELETE", f"/{resume_id}")
