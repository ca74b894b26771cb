"""
Utility: Google Cloud Storage adapter
Upload, delete, download and URL synthesis for image assets.
The service only keeps references (URL, public id); the bytes live in the bucket.
"""
import json
import logging
import os
import uuid
from dataclasses import dataclass
from urllib.parse import quote, urlencode

import requests
from flask import current_app
from google.api_core import exceptions as gcs_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import storage
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)

PUBLIC_HOST = "https://storage.googleapis.com"
THUMBNAIL_SIZE = (200, 200)

# API, credential and transport failures of the client library
PROVIDER_ERRORS = (
    gcs_exceptions.GoogleAPIError,
    auth_exceptions.GoogleAuthError,
    requests.exceptions.RequestException,
)


class StorageError(Exception):
    """The storage provider failed or is not configured"""


class StorageNotFound(StorageError):
    """The requested object does not exist in the bucket"""


@dataclass
class StoredObject:
    url: str
    public_id: str
    original_name: str
    size: int
    content_type: str


def get_storage_client():
    """
    Builds the Cloud Storage client.

    GOOGLE_APPLICATION_CREDENTIALS may hold the service-account JSON itself
    (hosted deployments) or a path to the key file (local development).
    Without it, ambient credentials are used.
    """
    creds = (current_app.config.get("GOOGLE_APPLICATION_CREDENTIALS") or "").strip()

    try:
        if creds.startswith("{"):
            # Keep the library from reading the env var as a file path
            original_creds = os.environ.pop("GOOGLE_APPLICATION_CREDENTIALS", None)
            try:
                client = storage.Client.from_service_account_info(json.loads(creds))
            finally:
                if original_creds:
                    os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = original_creds
            logger.info("Cloud Storage client created from JSON credentials")
            return client

        if creds:
            if not os.path.exists(creds):
                raise StorageError("GOOGLE_APPLICATION_CREDENTIALS is neither JSON nor an existing file")
            return storage.Client.from_service_account_json(creds)

        return storage.Client()
    except StorageError:
        raise
    except json.JSONDecodeError as e:
        raise StorageError(f"GOOGLE_APPLICATION_CREDENTIALS is not valid JSON: {e}") from e
    except Exception as e:
        logger.error("Could not initialise Cloud Storage: %s", e)
        raise StorageError("Cloud storage is not configured") from e


def _bucket():
    bucket_name = current_app.config.get("GCS_BUCKET_NAME")
    if not bucket_name:
        raise StorageError("GCS_BUCKET_NAME is not configured")
    return get_storage_client().bucket(bucket_name)


def public_url(public_id):
    """Direct URL of an object, built from the bucket name and the public id"""
    bucket_name = current_app.config.get("GCS_BUCKET_NAME")
    return f"{PUBLIC_HOST}/{bucket_name}/{quote(public_id)}"


def thumbnail_url(public_id, width=THUMBNAIL_SIZE[0], height=THUMBNAIL_SIZE[1]):
    """Thumbnail URL; resized on the fly by the /api/images proxy"""
    query = urlencode({"w": width, "h": height, "fit": "fill"})
    return f"/api/images/{quote(public_id)}?{query}"


def upload_file(file, folder=None, size=None):
    """
    Uploads an image to Cloud Storage

    Args:
        file: Flask FileStorage
        folder: destination prefix inside the bucket
        size: byte size already measured by the upload middleware

    Returns:
        StoredObject describing the stored asset
    """
    folder = folder or current_app.config.get("UPLOAD_FOLDER", "uploads")
    filename = secure_filename(file.filename or "") or "image"
    public_id = f"{folder}/{uuid.uuid4()}_{filename}"

    try:
        blob = _bucket().blob(public_id)
        file.stream.seek(0)
        blob.upload_from_file(file.stream, content_type=file.mimetype)
    except StorageError:
        raise
    except PROVIDER_ERRORS as e:
        logger.error("Upload of %s failed: %s", public_id, e)
        raise StorageError("Failed to upload image") from e

    logger.info("Uploaded %s to Cloud Storage", public_id)
    return StoredObject(
        url=public_url(public_id),
        public_id=public_id,
        original_name=file.filename,
        size=size if size is not None else 0,
        content_type=file.mimetype,
    )


def get_file_content(public_id):
    """
    Downloads an object

    Returns:
        tuple: (content, content_type) or (None, None) when it does not exist
    """
    try:
        blob = _bucket().blob(public_id)
        if not blob.exists():
            return None, None

        content = blob.download_as_bytes()
    except gcs_exceptions.NotFound:
        return None, None
    except PROVIDER_ERRORS as e:
        logger.error("Download of %s failed: %s", public_id, e)
        raise StorageError("Failed to read image") from e

    return content, blob.content_type or "application/octet-stream"


def delete_file(public_id):
    """Deletes an object; raises StorageNotFound when it is already gone"""
    try:
        _bucket().blob(public_id).delete()
    except gcs_exceptions.NotFound as e:
        raise StorageNotFound(public_id) from e
    except PROVIDER_ERRORS as e:
        logger.error("Delete of %s failed: %s", public_id, e)
        raise StorageError("Failed to delete image") from e

    logger.info("Deleted %s from Cloud Storage", public_id)
