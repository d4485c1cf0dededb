"""
Authentication dependencies for FastAPI routes
"""
from dataclasses import dataclass
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import structlog

from jobboard.auth.service import decode_access_token
from jobboard.core.exceptions import AuthenticationError

logger = structlog.get_logger()

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class CurrentUser:
    id: int
    email: Optional[str] = None


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    """
    Get current authenticated user from JWT token
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authenticated")

    payload = decode_access_token(credentials.credentials)
    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        logger.warning("invalid_token_subject", subject=subject)
        raise AuthenticationError("Invalid token")

    structlog.contextvars.bind_contextvars(user_id=user_id)
    return CurrentUser(id=user_id, email=payload.get("email"))
