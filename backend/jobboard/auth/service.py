"""
Bearer token issuing and verification

Users and sessions belong to the account service; this module only needs
to agree with it on the token format: HS256 JWT, user id in "sub".
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt

from jobboard.core.config import settings
from jobboard.core.exceptions import AuthenticationError


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token"""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_user_token(user_id: int, email: Optional[str] = None, expires_delta: Optional[timedelta] = None) -> str:
    """Access token for a user id, as issued by the account service"""
    data = {"sub": str(user_id)}
    if email:
        data["email"] = email
    return create_access_token(data, expires_delta)


def decode_access_token(token: str) -> dict:
    """Verify signature, expiry and token type"""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise AuthenticationError("Invalid token")

    if payload.get("type") != "access":
        raise AuthenticationError("Invalid token type")
    return payload
