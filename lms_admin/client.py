"""
Client: HTTP client for the admin API
Same settings as the panel's HTTP instance (base URL, cookies, 10 s timeout),
built explicitly and passed to whoever needs it.
"""
import logging
import os
import requests

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:5000"
DEFAULT_TIMEOUT = 10  # seconds


class ApiClientError(Exception):
    """The API answered with an error envelope (or not with JSON at all)"""

    def __init__(self, status_code, message, errors=None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.errors = errors or []


class AdminApiClient:
    """
    Thin wrapper over the REST API.

    The requests.Session keeps the accessToken cookie set by login(), the
    equivalent of sending credentials with every browser request.
    """

    def __init__(self, base_url=None, timeout=DEFAULT_TIMEOUT, session=None):
        self.base_url = (base_url or os.getenv("VITE_SERVER_URL") or DEFAULT_BASE_URL).rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault("Accept", "application/json")

    def _request(self, method, path, **kwargs):
        url = f"{self.base_url}{path}"
        kwargs.setdefault("timeout", self.timeout)
        response = self.session.request(method, url, **kwargs)

        try:
            body = response.json()
        except ValueError:
            raise ApiClientError(response.status_code, response.text or response.reason)

        if not response.ok:
            logger.debug("%s %s -> %s", method, path, response.status_code)
            raise ApiClientError(
                body.get("statusCode", response.status_code),
                body.get("message", response.reason),
                body.get("errors"),
            )
        return body.get("data")

    # Auth
    def login(self, username, password):
        return self._request("POST", "/api/v1/auth/login", json={"username": username, "password": password})

    def logout(self):
        return self._request("POST", "/api/v1/auth/logout")

    def me(self):
        return self._request("GET", "/api/v1/auth/me")

    # Categories
    def list_categories(self):
        return self._request("GET", "/api/categories")

    def get_category(self, category_id):
        return self._request("GET", f"/api/categories/{category_id}")

    def create_category(self, name, description=None):
        return self._request("POST", "/api/categories", json={"name": name, "description": description})

    def update_category(self, category_id, **fields):
        return self._request("PUT", f"/api/categories/{category_id}", json=fields)

    def delete_category(self, category_id):
        return self._request("DELETE", f"/api/categories/{category_id}")

    # Units
    def list_units(self, category_id=None, active=None):
        params = {}
        if category_id is not None:
            params["categoryId"] = category_id
        if active is not None:
            params["active"] = "true" if active else "false"
        return self._request("GET", "/api/units", params=params)

    def create_unit(self, name, **fields):
        return self._request("POST", "/api/units", json={"name": name, **fields})

    def update_unit(self, unit_id, **fields):
        return self._request("PUT", f"/api/units/{unit_id}", json=fields)

    def delete_unit(self, unit_id):
        return self._request("DELETE", f"/api/units/{unit_id}")

    def reorder_units(self, ids=None, units=None):
        payload = {"units": units} if units is not None else {"ids": list(ids or [])}
        return self._request("POST", "/api/units/reorder", json=payload)

    # Uploads
    def upload_image(self, filename, content, content_type="image/jpeg"):
        files = {"photo": (filename, content, content_type)}
        return self._request("POST", "/api/upload/image", files=files)

    def upload_images(self, images):
        """images: iterable of (filename, content, content_type)"""
        files = [("photos", image) for image in images]
        return self._request("POST", "/api/upload/images", files=files)

    def delete_image(self, public_id):
        return self._request("DELETE", f"/api/upload/{public_id}")

    def image_info(self, public_id):
        return self._request("GET", f"/api/upload/{public_id}/info")
