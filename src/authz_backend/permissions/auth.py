"""
Principal extraction from signed access tokens.

Tokens are issued elsewhere; this module only verifies them. The token is read
from the ``token`` cookie or an ``Authorization: Bearer`` header and its
``sub`` claim must name an existing user.
"""

import datetime
import logging
from typing import Optional
from fastapi import Depends, Request
from fastapi.security.utils import get_authorization_scheme_param
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from authz_backend.api.exceptions import UnauthorizedException
from authz_backend.database import get_db
from authz_backend.permissions.principal import Principal
from authz_backend.repositories.user import UserRepository
from authz_backend.settings import settings

logger = logging.getLogger(__name__)

TOKEN_COOKIE = "token"


def create_access_token(user_id: str, expires_in: Optional[int] = None) -> str:
    """Sign a token for ``user_id``. Intended for development and tests."""
    now = datetime.datetime.now(datetime.timezone.utc)
    claims = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + datetime.timedelta(seconds=expires_in or settings.AUTH_TOKEN_TTL),
    }
    return jwt.encode(claims, settings.AUTH_SECRET, algorithm=settings.AUTH_ALGORITHM)


def parse_authorization_header(request: Request) -> Optional[str]:
    token = request.cookies.get(TOKEN_COOKIE)
    if token:
        return token

    scheme, param = get_authorization_scheme_param(request.headers.get("Authorization"))
    if scheme.lower() == "bearer" and param:
        return param
    return None


def verify_access_token(token: str) -> str:
    """Return the subject of a valid token."""
    try:
        claims = jwt.decode(token, settings.AUTH_SECRET, algorithms=[settings.AUTH_ALGORITHM])
    except JWTError as e:
        logger.warning(f"Rejected access token: {e}")
        raise UnauthorizedException("Invalid or expired token")

    subject = claims.get("sub")
    if not subject:
        logger.warning("Rejected access token without subject")
        raise UnauthorizedException("Invalid token")
    return subject


def get_current_principal(request: Request, db: Session = Depends(get_db)) -> Principal:

    token = parse_authorization_header(request)
    if token is None:
        raise UnauthorizedException()

    user_id = verify_access_token(token)

    if not UserRepository(db).exists(user_id):
        logger.warning(f"Token subject {user_id} does not exist")
        raise UnauthorizedException("Unknown user")

    return Principal(user_id=user_id)
