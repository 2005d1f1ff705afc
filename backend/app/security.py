"""
DevCamper Backend — Bearer Token Helpers
==========================================

What:  Encode/decode the HS256 JWTs that identify API callers.
Who:   app.dependencies decodes; operators and tests encode.

Claims:
    sub   user id (UUID string)
    role  user | publisher | admin
    iat / exp  issued-at and expiry (seconds since epoch)
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from app.config import settings
from app.exceptions import AuthenticationError

ROLES = ("user", "publisher", "admin")


def create_access_token(
    user_id: uuid.UUID,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    now = datetime.now(timezone.utc)
    expires = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    payload = {
        "sub": str(user_id),
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int(expires.timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify signature and expiry and return the claims.

    Raises:
        AuthenticationError: bad signature, expired, or malformed token
    """
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise AuthenticationError(context={"reason": type(e).__name__})
