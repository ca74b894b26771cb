"""
Shared enums: user roles and account status
"""
from enum import Enum


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    EMPLOYEE = "EMPLOYEE"


AVAILABLE_USER_ROLES = [role.value for role in UserRole]


class UserStatus(str, Enum):
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    PENDING = "PENDING"
    BANNED = "BANNED"


AVAILABLE_USER_STATUS = [status.value for status in UserStatus]
