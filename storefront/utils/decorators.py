# ------- storefront/utils/decorators.py -------
from functools import wraps

import structlog
from flask import g, request

from ..errors import AuthenticationError, AuthorizationError, InvalidToken
from ..extensions import db
from ..model import User, parse_guid
from ..services import token_service

logger = structlog.get_logger(__name__)

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


def _bearer_token():
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return None


def _identity_from_access_token():
    token = request.cookies.get(ACCESS_COOKIE) or _bearer_token()
    if not token:
        return None
    try:
        return token_service.verify_access_token(token)["sub"]
    except InvalidToken:
        return None


def _identity_from_refresh_token():
    token = request.cookies.get(REFRESH_COOKIE)
    if not token:
        raise AuthenticationError("Unauthorized - No access token")
    claims = token_service.verify_refresh_token(token)
    # after_request hook in create_app turns this into a fresh accessToken cookie
    g.renewed_access_token = token_service.issue_access_token(claims["sub"])
    return claims["sub"]


def _load_user(user_id):
    uid = parse_guid(user_id)
    user = db.session.get(User, uid) if uid else None
    if not user:
        raise AuthenticationError("Unauthorized - User not found")
    return user


def current_user():
    return g.get("current_user")


def protect_route(fn):
    """Resolve the caller from the short-lived access token, falling back to
    the refresh token (with its revocation check) when the access token is
    missing or expired."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        user_id = _identity_from_access_token()
        if user_id is None:
            user_id = _identity_from_refresh_token()
        g.current_user = _load_user(user_id)
        return fn(*args, **kwargs)
    return wrapper


def admin_route(fn):
    # must sit below @protect_route
    @wraps(fn)
    def wrapper(*args, **kwargs):
        user = current_user()
        if user is None:
            raise AuthenticationError()
        if not user.is_admin:
            logger.info("admin_route_denied", user_id=str(user.id))
            raise AuthorizationError()
        return fn(*args, **kwargs)
    return wrapper
