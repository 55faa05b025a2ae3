"""Access/refresh token issuance, verification and server-side revocation.

Access tokens are minted by Flask-JWT-Extended (its ``JWT_SECRET_KEY`` is the
access secret). Refresh tokens are signed with PyJWT under a separate secret,
and the one currently valid per user is kept in the cache under
``refresh_token:<userId>``. Deleting that record revokes the token even while
its signature and expiry are still good.
"""
import hmac
import uuid
from datetime import datetime, timezone

import jwt
import structlog
from flask import current_app
from flask_jwt_extended import create_access_token

from ..errors import InvalidToken
from ..extensions import cache

logger = structlog.get_logger(__name__)

ALGORITHM = "HS256"


def refresh_key(user_id):
    return f"refresh_token:{user_id}"


def issue_access_token(user_id):
    return create_access_token(
        identity=str(user_id),
        expires_delta=current_app.config["ACCESS_TOKEN_EXPIRES"],
    )


def issue_refresh_token(user_id):
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "type": "refresh",
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + current_app.config["REFRESH_TOKEN_EXPIRES"],
    }
    return jwt.encode(payload, current_app.config["REFRESH_TOKEN_SECRET"], algorithm=ALGORITHM)


def issue_token_pair(user_id):
    return issue_access_token(user_id), issue_refresh_token(user_id)


def persist_refresh_token(user_id, refresh_token):
    ttl = int(current_app.config["REFRESH_TOKEN_EXPIRES"].total_seconds())
    cache.set(refresh_key(user_id), refresh_token, ttl=ttl)


def revoke_refresh_token(user_id):
    cache.delete(refresh_key(user_id))


def verify(token, secret, token_type=None):
    """Check signature and expiry; return the claims or raise ``InvalidToken``."""
    if not token:
        raise InvalidToken("Unauthorized - No token provided")
    try:
        claims = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise InvalidToken("Unauthorized - Token expired") from e
    except jwt.InvalidTokenError as e:
        raise InvalidToken("Unauthorized - Invalid token") from e
    if token_type and claims.get("type") != token_type:
        raise InvalidToken("Unauthorized - Wrong token type")
    if not claims.get("sub"):
        raise InvalidToken("Unauthorized - Invalid token payload")
    return claims


def verify_access_token(token):
    return verify(token, current_app.config["ACCESS_TOKEN_SECRET"], "access")


def verify_refresh_token(token):
    """Signature/expiry check plus the revocation check against the cache."""
    claims = verify(token, current_app.config["REFRESH_TOKEN_SECRET"], "refresh")
    stored = cache.get(refresh_key(claims["sub"]))
    if stored is None or not hmac.compare_digest(stored, token):
        logger.info("refresh_token_rejected", user_id=claims["sub"], reason="revoked_or_rotated")
        raise InvalidToken("Unauthorized - Refresh token revoked")
    return claims
