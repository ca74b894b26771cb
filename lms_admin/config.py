"""
Application configuration
"""
import os
from pathlib import Path
from dotenv import load_dotenv

# Project root directory
BASE_DIR = Path(__file__).resolve().parent.parent

# Load .env from the project directory
load_dotenv(BASE_DIR / '.env')


class Config:
    """Base configuration"""

    # Flask
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key-change-in-production")
    FLASK_ENV = os.getenv("FLASK_ENV", "development")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Database (single backend, absolute sqlite path as fallback)
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL") or f"sqlite:///{BASE_DIR}/instance/lms_admin.db"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False

    # CORS: comma separated list, "*" allows everything
    ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:5173")

    # Access tokens
    JWT_SECRET = os.getenv("JWT_SECRET") or SECRET_KEY
    JWT_ALGORITHM = "HS256"
    JWT_EXPIRY_DAYS = int(os.getenv("JWT_EXPIRY_DAYS", "7"))
    ACCESS_TOKEN_COOKIE = "accessToken"

    # Seed admin (development bootstrap and scripts/create_admin.py)
    ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com")
    ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
    ADMIN_EMPLOYEE_ID = os.getenv("ADMIN_EMPLOYEE_ID", "ADM001")
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "change-me-now")
    SEED_ADMIN = os.getenv("SEED_ADMIN", "true").lower() == "true"

    # Google Cloud Storage
    GCS_BUCKET_NAME = os.getenv("GCS_BUCKET_NAME", "lms-admin-media")
    GOOGLE_APPLICATION_CREDENTIALS = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "lms-admin")

    # Upload limits
    UPLOAD_MAX_FILE_SIZE = 5 * 1024 * 1024  # 5MB per file
    UPLOAD_MAX_FILES = 3  # files per request
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 16MB per request
    ALLOWED_IMAGE_MIMETYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    SQLALCHEMY_ECHO = False


class TestingConfig(Config):
    """Configuration used by the test suite"""
    TESTING = True
    FLASK_ENV = "testing"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_SECRET = "test-jwt-secret"
    GCS_BUCKET_NAME = "test-bucket"
    LOG_LEVEL = "WARNING"


# Environment name -> configuration
config_by_name = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}


def get_config():
    """Returns the configuration for the current environment"""
    env = os.getenv("FLASK_ENV", "development")
    return config_by_name.get(env, DevelopmentConfig)
