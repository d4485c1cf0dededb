"""
Client-side settings for talking to the resume API
"""
from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class PollerSettings(BaseSettings):
    """Loaded from JOBBOARD_* environment variables; no server secrets needed"""

    API_URL: str = "http://localhost:8000"
    API_TOKEN: Optional[str] = None
    POLL_INTERVAL_SECONDS: float = Field(default=2.0, ge=0)
    POLL_MAX_ATTEMPTS: int = Field(default=30, ge=1)
    REQUEST_TIMEOUT_SECONDS: float = 30.0

    # Pre-upload checks; keep in line with the server's MAX_UPLOAD_SIZE_MB / ALLOWED_MIME_TYPES
    MAX_UPLOAD_SIZE_MB: int = Field(default=5, ge=1)
    ALLOWED_MIME_TYPES: List[str] = [
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ]

    class Config:
        env_prefix = "JOBBOARD_"
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"
