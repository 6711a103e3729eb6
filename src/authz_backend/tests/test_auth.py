import pytest
from starlette.requests import Request

from authz_backend.api.exceptions import UnauthorizedException
from authz_backend.permissions.auth import (
    create_access_token,
    get_current_principal,
    parse_authorization_header,
    verify_access_token,
)
from authz_backend.settings import settings
from jose import jwt


def make_request(headers=None):
    raw = [(key.lower().encode(), value.encode()) for key, value in (headers or {}).items()]
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw, "query_string": b""})


def test_token_round_trip():
    assert verify_access_token(create_access_token("user-1")) == "user-1"


def test_expired_token():
    with pytest.raises(UnauthorizedException):
        verify_access_token(create_access_token("user-1", expires_in=-60))


def test_foreign_signature():
    token = jwt.encode({"sub": "user-1"}, "not-the-secret", algorithm=settings.AUTH_ALGORITHM)
    with pytest.raises(UnauthorizedException):
        verify_access_token(token)


def test_token_without_subject():
    token = jwt.encode({"scope": "x"}, settings.AUTH_SECRET, algorithm=settings.AUTH_ALGORITHM)
    with pytest.raises(UnauthorizedException):
        verify_access_token(token)


def test_cookie_is_preferred():
    request = make_request({"Cookie": "token=from-cookie", "Authorization": "Bearer from-header"})
    assert parse_authorization_header(request) == "from-cookie"


def test_bearer_header():
    assert parse_authorization_header(make_request({"Authorization": "Bearer abc"})) == "abc"
    assert parse_authorization_header(make_request({"Authorization": "Basic abc"})) is None
    assert parse_authorization_header(make_request()) is None


def test_principal_requires_existing_user(db, make_user):
    user = make_user("ivan")

    principal = get_current_principal(make_request({"Authorization": f"Bearer {create_access_token(user.id)}"}), db)
    assert principal.user_id == user.id

    with pytest.raises(UnauthorizedException):
        get_current_principal(make_request({"Authorization": f"Bearer {create_access_token('ghost')}"}), db)
    with pytest.raises(UnauthorizedException):
        get_current_principal(make_request(), db)
