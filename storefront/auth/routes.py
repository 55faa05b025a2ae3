import re

import structlog
from flask import current_app, request
from sqlalchemy.exc import IntegrityError
from flask_jwt_extended import set_access_cookies, set_refresh_cookies, unset_jwt_cookies

from . import bp
from ..errors import ConflictError, InvalidCredential, InvalidToken, ValidationError
from ..extensions import db
from ..model import User
from ..services import token_service
from ..utils.api import ok
from ..utils.decorators import REFRESH_COOKIE, current_user, protect_route
from ..utils.validation import json_body, str_field

logger = structlog.get_logger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD = 6


# --- helper: set both session cookies on a response ---
def _set_session_cookies(resp, access_token, refresh_token):
    cfg = current_app.config
    set_access_cookies(resp, access_token, max_age=int(cfg["ACCESS_TOKEN_EXPIRES"].total_seconds()))
    set_refresh_cookies(resp, refresh_token, max_age=int(cfg["REFRESH_TOKEN_EXPIRES"].total_seconds()))
    return resp


def _start_session(user, message, status):
    access_token, refresh_token = token_service.issue_token_pair(user.id)
    token_service.persist_refresh_token(user.id, refresh_token)
    resp = ok(message, user.as_dict(), status=status)
    return _set_session_cookies(resp, access_token, refresh_token)


@bp.post("/signup")
def signup():
    data = json_body()
    name = str_field(data, "name")
    email = str_field(data, "email").lower()
    password = str_field(data, "password", strip=False)

    if not name:
        raise ValidationError("Name is required")
    if not email or not EMAIL_RE.match(email):
        raise ValidationError("A valid email is required")
    if len(password) < MIN_PASSWORD:
        raise ValidationError(f"Password required, min {MIN_PASSWORD} chars")
    if User.query.filter_by(email=email).first():
        raise ConflictError("User already exists")

    user = User(name=name, email=email)
    user.set_password(password)
    try:
        db.session.add(user)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("User already exists")
    logger.info("user_signed_up", user_id=str(user.id))

    return _start_session(user, "Account created successfully", 201)


@bp.post("/login")
def login():
    data = json_body()
    email = str_field(data, "email").lower()
    password = str_field(data, "password", strip=False)
    if not email or not password:
        raise ValidationError("Email and password are required")

    user = User.query.filter_by(email=email).first()
    if not user or not user.check_password(password):
        raise InvalidCredential()

    logger.info("user_logged_in", user_id=str(user.id))
    return _start_session(user, "You've logged in successfully", 200)


@bp.post("/logout")
def logout():
    token = request.cookies.get(REFRESH_COOKIE)
    if token:
        try:
            claims = token_service.verify(token, current_app.config["REFRESH_TOKEN_SECRET"], "refresh")
        except InvalidToken as e:
            logger.warning("logout_with_invalid_refresh_token", reason=e.message)
        else:
            token_service.revoke_refresh_token(claims["sub"])
            logger.info("user_logged_out", user_id=claims["sub"])

    resp = ok("Logout successful")
    unset_jwt_cookies(resp)
    return resp


@bp.post("/refresh")
def refresh():
    token = request.cookies.get(REFRESH_COOKIE)
    if not token:
        raise InvalidToken("No refresh token provided")

    claims = token_service.verify_refresh_token(token)
    # access token only; the refresh token keeps its original expiry
    access_token = token_service.issue_access_token(claims["sub"])

    resp = ok("Token refreshed successfully")
    set_access_cookies(
        resp, access_token, max_age=int(current_app.config["ACCESS_TOKEN_EXPIRES"].total_seconds())
    )
    return resp


@bp.get("/profile")
@protect_route
def profile():
    return ok("Profile", current_user().as_dict())
