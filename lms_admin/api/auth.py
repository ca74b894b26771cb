"""
API: Authentication
Login with username (or employee id) and password; the token travels in the
accessToken cookie
"""
import logging
import re
from flask import Blueprint, current_app, g, request
from sqlalchemy import func, or_
from ..constants import AVAILABLE_USER_ROLES, UserRole
from ..db import db
from ..models import User
from ..permissions import require
from ..utils.auth import create_access_token, verify_jwt
from ..utils.responses import ApiError, api_response, json_object

logger = logging.getLogger(__name__)

bp = Blueprint("auth", __name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6


def _text(data, field):
    value = data.get(field)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ApiError(400, f"{field} must be a string")
    return value.strip()


def _cookie_options():
    is_prod = current_app.config.get("FLASK_ENV") == "production"
    return {
        "httponly": True,
        "secure": is_prod,
        "samesite": "None" if is_prod else "Lax",
    }


@bp.route("/login", methods=["POST"])
def login():
    """Checks credentials and sets the access token cookie"""
    data = json_object()
    username = _text(data, "username")
    password = data.get("password") or ""
    if not isinstance(password, str):
        raise ApiError(400, "password must be a string")

    if not username or not password:
        raise ApiError(400, "Username and password are required")

    # Username first, employee id as fallback for older accounts
    user = User.query.filter(User.username == username.lower()).first()
    if user is None:
        user = User.query.filter(User.employee_id == username.upper()).first()

    if user is None or not user.check_password(password):
        logger.info("Failed login for %s", username)
        raise ApiError(401, "Invalid username or password")

    if not user.is_active:
        raise ApiError(403, f"Account is {user.status.value.lower()}")

    token = create_access_token(user)
    body, status = api_response({"user": user.to_dict(), "accessToken": token}, "Login successful")
    body.set_cookie(
        current_app.config["ACCESS_TOKEN_COOKIE"],
        token,
        max_age=current_app.config["JWT_EXPIRY_DAYS"] * 24 * 60 * 60,
        **_cookie_options(),
    )

    logger.info("User %s logged in", user.username)
    return body, status


@bp.route("/logout", methods=["POST"])
@verify_jwt
def logout():
    """Clears the access token cookie"""
    body, status = api_response(None, "Logout successful")
    body.delete_cookie(current_app.config["ACCESS_TOKEN_COOKIE"], **_cookie_options())
    return body, status


@bp.route("/me", methods=["GET"])
@verify_jwt
def me():
    """Current user"""
    return api_response(g.current_user.to_dict(), "Current user fetched successfully")


@bp.route("/register", methods=["POST"])
@verify_jwt
@require("users:manage")
def register():
    """Creates a panel user"""
    data = json_object()

    full_name = _text(data, "fullName")
    email = _text(data, "email").lower()
    employee_id = _text(data, "employeeId").upper()
    username = (_text(data, "username") or employee_id).lower()
    password = data.get("password") or ""
    if not isinstance(password, str):
        raise ApiError(400, "password must be a string")
    role = data.get("role") or UserRole.EMPLOYEE.value

    errors = []
    if len(full_name) < 3:
        errors.append({"field": "fullName", "message": "Full name must be at least 3 characters"})
    if not EMAIL_RE.match(email):
        errors.append({"field": "email", "message": "A valid email is required"})
    if not employee_id:
        errors.append({"field": "employeeId", "message": "Employee ID is required"})
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append({"field": "password", "message": f"Password must be at least {MIN_PASSWORD_LENGTH} characters"})
    if role not in AVAILABLE_USER_ROLES:
        errors.append({"field": "role", "message": f"Role must be one of {', '.join(AVAILABLE_USER_ROLES)}"})
    if errors:
        raise ApiError(400, "Validation failed", errors=errors)

    existing = User.query.filter(
        or_(User.email == email, User.username == username, User.employee_id == employee_id)
    ).first()
    if existing:
        raise ApiError(409, "User already exists with given email, username or employee ID")

    user = User(
        full_name=full_name,
        email=email,
        username=username,
        employee_id=employee_id,
        phone_number=data.get("phoneNumber"),
        role=UserRole(role),
    )
    user.set_password(password)
    db.session.add(user)
    db.session.commit()

    logger.info("User %s registered by %s", user.username, g.current_user.username)
    return api_response(user.to_dict(), "User registered successfully", 201)


@bp.route("/users", methods=["GET"])
@verify_jwt
@require("users:manage")
def list_users():
    """Paginated user list with optional ?search="""
    try:
        page = max(int(request.args.get("page", 1)), 1)
        limit = min(max(int(request.args.get("limit", 20)), 1), 100)
    except ValueError:
        raise ApiError(400, "page and limit must be integers")

    query = User.query
    search = (request.args.get("search") or "").strip()
    if search:
        pattern = f"%{search.lower()}%"
        query = query.filter(
            or_(
                func.lower(User.full_name).like(pattern),
                func.lower(User.email).like(pattern),
                func.lower(User.employee_id).like(pattern),
            )
        )

    total = query.count()
    users = query.order_by(User.created_at.desc(), User.id.desc()).offset((page - 1) * limit).limit(limit).all()

    return api_response(
        {"users": [u.to_dict() for u in users], "total": total, "page": page, "limit": limit},
        "Users fetched successfully",
    )
