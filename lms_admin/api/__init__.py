"""
REST APIs
"""
from .auth import bp as auth_bp
from .categories import bp as categories_bp
from .units import bp as units_bp
from .uploads import bp as uploads_bp
from .images import bp as images_bp

__all__ = [
    "auth_bp",
    "categories_bp",
    "units_bp",
    "uploads_bp",
    "images_bp",
]
