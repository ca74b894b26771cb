from __future__ import annotations

import sys
from pathlib import Path

import pytest
from google.api_core import exceptions as gcs_exceptions

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from lms_admin import create_app
from lms_admin.config import TestingConfig
from lms_admin.constants import UserRole, UserStatus
from lms_admin.db import db
from lms_admin.models import User
from lms_admin.utils import cloud_storage
from lms_admin.utils.auth import create_access_token


class FakeBlob:
    def __init__(self, bucket: "FakeBucket", name: str) -> None:
        self.bucket = bucket
        self.name = name

    @property
    def content_type(self):
        stored = self.bucket.objects.get(self.name)
        return stored[1] if stored else None

    def upload_from_file(self, stream, content_type=None) -> None:
        if self.bucket.fail_uploads or len(self.bucket.objects) >= self.bucket.capacity:
            raise self.bucket.upload_error or gcs_exceptions.ServiceUnavailable("storage down")
        self.bucket.objects[self.name] = (stream.read(), content_type)

    def exists(self) -> bool:
        return self.name in self.bucket.objects

    def download_as_bytes(self) -> bytes:
        if self.name not in self.bucket.objects:
            raise gcs_exceptions.NotFound("missing")
        return self.bucket.objects[self.name][0]

    def delete(self) -> None:
        if self.bucket.fail_deletes:
            raise gcs_exceptions.InternalServerError("storage error")
        if self.name not in self.bucket.objects:
            raise gcs_exceptions.NotFound("missing")
        del self.bucket.objects[self.name]


class FakeBucket:
    def __init__(self, name: str) -> None:
        self.name = name
        self.objects: dict[str, tuple[bytes, str | None]] = {}
        self.fail_uploads = False
        self.upload_error: Exception | None = None
        self.capacity = float("inf")
        self.fail_deletes = False

    def blob(self, name: str) -> FakeBlob:
        return FakeBlob(self, name)


class FakeStorageClient:
    def __init__(self) -> None:
        self.buckets: dict[str, FakeBucket] = {}

    def bucket(self, name: str) -> FakeBucket:
        return self.buckets.setdefault(name, FakeBucket(name))


@pytest.fixture()
def app():
    app = create_app(TestingConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def storage(monkeypatch: pytest.MonkeyPatch) -> FakeBucket:
    fake = FakeStorageClient()
    monkeypatch.setattr(cloud_storage, "get_storage_client", lambda: fake)
    return fake.bucket(TestingConfig.GCS_BUCKET_NAME)


@pytest.fixture()
def make_user(app):
    counter = {"n": 0}

    def _make(
        role: UserRole = UserRole.ADMIN,
        status: UserStatus = UserStatus.ACTIVE,
        username: str | None = None,
        password: str = "secret123",
    ) -> int:
        counter["n"] += 1
        username = username or f"{role.value.lower()}{counter['n']}"
        with app.app_context():
            user = User(
                full_name=f"{role.value.title()} User",
                email=f"{username}@example.com",
                username=username,
                employee_id=f"EMP{counter['n']:03d}",
                role=role,
                status=status,
            )
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            return user.id

    return _make


@pytest.fixture()
def token_for(app):
    def _token(user_id: int) -> str:
        with app.app_context():
            return create_access_token(db.session.get(User, user_id))

    return _token


@pytest.fixture()
def login_as(client, make_user, token_for):
    """Puts an accessToken cookie for a fresh user of the given role on the client."""

    def _login(role: UserRole = UserRole.ADMIN):
        user_id = make_user(role)
        client.set_cookie("accessToken", token_for(user_id))
        return user_id

    return _login
