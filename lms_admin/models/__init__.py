"""
Database models
"""
from .category import Category
from .unit import Unit
from .user import User

__all__ = [
    "Category",
    "Unit",
    "User",
]
