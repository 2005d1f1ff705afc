"""
DevCamper Backend — Shared FastAPI Dependencies
=================================================

What:  Caller identity, role gates and the geocoder handle.
Why:   Routes declare what they need (`Depends(require_role("publisher",
       "admin"))`) and stay free of token parsing. Tests swap the geocoder
       with `app.dependency_overrides[get_geocoder]`.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.exceptions import AuthenticationError, ForbiddenError
from app.security import ROLES, decode_access_token
from app.services.geocoder_base import Geocoder
from app.services.geocoding_service import geocoder

logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Actor:
    """The authenticated caller of a request."""

    id: uuid.UUID
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def get_current_actor(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> Actor:
    """
    Resolve the bearer token into an Actor.

    Raises:
        AuthenticationError: no token, invalid token, or claims that do not
            name a user id and a known role
    """
    if creds is None:
        raise AuthenticationError()

    claims = decode_access_token(creds.credentials)
    role = claims.get("role")
    try:
        user_id = uuid.UUID(str(claims.get("sub")))
    except ValueError:
        raise AuthenticationError(context={"reason": "invalid subject"})
    if role not in ROLES:
        raise AuthenticationError(context={"reason": "invalid role"})
    return Actor(id=user_id, role=role)


def require_role(*roles: str) -> Callable[..., Actor]:
    """Dependency factory: the caller must hold one of `roles`."""

    def _inner(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in roles:
            logger.info("Role %s denied, requires one of %s", actor.role, roles)
            raise ForbiddenError(
                message=f"User role {actor.role} is not authorized to access this route",
                context={"role": actor.role, "allowed": list(roles)},
            )
        return actor

    return _inner


def get_geocoder() -> Geocoder:
    return geocoder
