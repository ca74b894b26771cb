"""
LMS Admin API - WSGI entry point
"""
from lms_admin import create_app

# App instance for gunicorn
app = create_app()

if __name__ == "__main__":
    app.run(debug=app.config.get("DEBUG", False), host="0.0.0.0", port=5000)
