"""
Seed data: first administrator account
"""
import logging
from flask import current_app
from sqlalchemy import or_
from .constants import UserRole, UserStatus
from .db import db
from .models import User

logger = logging.getLogger(__name__)


def ensure_admin(email=None, username=None, employee_id=None, password=None, full_name="Administrator"):
    """
    Creates the admin account unless a user with the same email, username or
    employee id exists. Must run inside an app context.

    Returns:
        tuple: (user, created)
    """
    config = current_app.config
    email = (email or config["ADMIN_EMAIL"]).lower()
    username = (username or config["ADMIN_USERNAME"]).lower()
    employee_id = (employee_id or config["ADMIN_EMPLOYEE_ID"]).upper()

    existing = User.query.filter(
        or_(User.email == email, User.username == username, User.employee_id == employee_id)
    ).first()
    if existing:
        return existing, False

    user = User(
        full_name=full_name,
        email=email,
        username=username,
        employee_id=employee_id,
        role=UserRole.ADMIN,
        status=UserStatus.ACTIVE,
    )
    user.set_password(password or config["ADMIN_PASSWORD"])
    db.session.add(user)
    db.session.commit()

    logger.info("Admin account %s created", user.username)
    return user, True
