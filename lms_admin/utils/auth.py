"""
Utility: access tokens and route guards
verify_jwt authenticates, authorize_roles authorizes; both short-circuit
before the view runs
"""
import datetime
import logging
from functools import wraps

import jwt
from flask import current_app, g, request

from ..db import db
from ..models import User
from .responses import ApiError

logger = logging.getLogger(__name__)


def create_access_token(user):
    """Signs a token carrying the user id and role"""
    now = datetime.datetime.now(datetime.timezone.utc)
    payload = {
        "id": user.id,
        "role": user.role.value,
        "employeeId": user.employee_id,
        "iat": now,
        "exp": now + datetime.timedelta(days=current_app.config["JWT_EXPIRY_DAYS"]),
    }
    return jwt.encode(
        payload,
        current_app.config["JWT_SECRET"],
        algorithm=current_app.config["JWT_ALGORITHM"],
    )


def decode_access_token(token):
    return jwt.decode(
        token,
        current_app.config["JWT_SECRET"],
        algorithms=[current_app.config["JWT_ALGORITHM"]],
    )


def _extract_token():
    # Cookie first (browser panel), then Bearer header (scripts)
    token = request.cookies.get(current_app.config["ACCESS_TOKEN_COOKIE"])
    if token:
        return token

    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1].strip() or None
    return None


def verify_jwt(view):
    """Rejects requests without a valid token; sets g.current_user"""

    @wraps(view)
    def wrapper(*args, **kwargs):
        token = _extract_token()
        if not token:
            raise ApiError(401, "Unauthorized request")

        try:
            payload = decode_access_token(token)
        except jwt.ExpiredSignatureError:
            raise ApiError(401, "Access token expired")
        except jwt.InvalidTokenError:
            raise ApiError(401, "Invalid access token")

        try:
            user_id = int(payload.get("id"))
        except (TypeError, ValueError):
            raise ApiError(401, "Invalid access token")

        user = db.session.get(User, user_id)
        if user is None:
            raise ApiError(401, "Invalid access token")
        if not user.is_active:
            raise ApiError(403, f"Account is {user.status.value.lower()}")

        g.current_user = user
        return view(*args, **kwargs)

    return wrapper


def authorize_roles(*roles):
    """Allows the view only for the given roles; use after verify_jwt"""
    allowed = {getattr(role, "value", role) for role in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            user = g.get("current_user")
            if user is None:
                raise ApiError(401, "Unauthorized request")

            if user.role.value not in allowed:
                logger.info("Role %s denied on %s %s", user.role.value, request.method, request.path)
                raise ApiError(403, f"Role {user.role.value} is not allowed to access this resource")

            return view(*args, **kwargs)

        return wrapper

    return decorator
