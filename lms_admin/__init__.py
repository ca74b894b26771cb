"""
LMS Admin API
Categories, units, image uploads and role-based access for the admin panel
"""
import os
from flask import Flask
from flask_cors import CORS
from .config import get_config
from .db import db
from .logging_utils import configure_logging
from .utils.responses import api_response, register_error_handlers


def create_app(config_object=None):
    """Flask application factory"""
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config_object or get_config())
    configure_logging(app.config.get("LOG_LEVEL", "INFO"))
    app.logger.info("Database URI: %s", app.config["SQLALCHEMY_DATABASE_URI"])

    # CORS: the panel sends the accessToken cookie, so credentials need explicit origins
    allowed_origins = [o.strip() for o in app.config["ALLOWED_ORIGINS"].split(",") if o.strip()]
    if "*" in allowed_origins:
        CORS(app, resources={r"/api/*": {
            "origins": "*",
            "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"],
        }})
    else:
        CORS(app, resources={r"/api/*": {
            "origins": allowed_origins,
            "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"],
            "supports_credentials": True,
        }})

    db.init_app(app)
    register_error_handlers(app)

    with app.app_context():
        from . import models  # noqa: F401

        if app.config["SQLALCHEMY_DATABASE_URI"].startswith("sqlite:///"):
            os.makedirs(os.path.join(os.path.dirname(os.path.dirname(__file__)), "instance"), exist_ok=True)

        db.create_all()

        if app.config["FLASK_ENV"] == "development" and app.config.get("SEED_ADMIN", True):
            from .seed import ensure_admin
            ensure_admin()

    from .api import auth_bp, categories_bp, images_bp, units_bp, uploads_bp

    app.register_blueprint(auth_bp, url_prefix="/api/v1/auth")
    app.register_blueprint(categories_bp, url_prefix="/api/categories")
    app.register_blueprint(units_bp, url_prefix="/api/units")
    app.register_blueprint(uploads_bp, url_prefix="/api/upload")
    app.register_blueprint(images_bp, url_prefix="/api/images")

    @app.route("/health")
    def health():
        return api_response({"status": "ok"}, "LMS Admin API is running")

    return app
