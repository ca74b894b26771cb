"""
Utility: image upload guards
Validates multipart files (type, size, count, field names) before anything
reaches the storage provider or the view, then stores them.
"""
import logging
import os
from functools import wraps

from flask import current_app, g, request

from .cloud_storage import StorageError, delete_file, upload_file
from .responses import ApiError

logger = logging.getLogger(__name__)

TYPE_ERROR = "Only image files (JPEG, JPG, PNG, WebP) are allowed"
UNEXPECTED_FIELD_ERROR = "Unexpected field name or too many files"

# Fixed field layout for audit forms
AUDIT_PHOTO_FIELDS = {"auditPhotos": 10}


def _file_size(file):
    stream = file.stream
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


def _size_error():
    limit_mb = current_app.config["UPLOAD_MAX_FILE_SIZE"] // (1024 * 1024)
    return ApiError(400, f"File size too large. Maximum size is {limit_mb}MB")


def _collect(fields, too_many_message):
    """
    Validates request.files against {field: max_count}

    Returns:
        dict: field -> list of (FileStorage, size)
    """
    max_files = current_app.config["UPLOAD_MAX_FILES"]
    max_size = current_app.config["UPLOAD_MAX_FILE_SIZE"]
    allowed_types = current_app.config["ALLOWED_IMAGE_MIMETYPES"]

    # Empty parts come from file inputs left blank
    received = [(name, f) for name, f in request.files.items(multi=True) if f and f.filename]

    if len(received) > max_files:
        raise ApiError(400, too_many_message(max_files))

    collected = {}
    for name, file in received:
        if name not in fields:
            raise ApiError(400, UNEXPECTED_FIELD_ERROR)

        bucket = collected.setdefault(name, [])
        if len(bucket) >= fields[name]:
            raise ApiError(400, too_many_message(min(fields[name], max_files)))

        if file.mimetype not in allowed_types:
            raise ApiError(400, TYPE_ERROR)

        size = _file_size(file)
        if size > max_size:
            raise _size_error()

        bucket.append((file, size))

    return collected


def _store(collected):
    """Uploads every validated file; rolls back what was stored on failure"""
    stored = {}
    done = []
    try:
        for name, files in collected.items():
            for file, size in files:
                obj = upload_file(file, size=size)
                done.append(obj)
                stored.setdefault(name, []).append(obj)
    except StorageError as e:
        for obj in done:
            try:
                delete_file(obj.public_id)
            except StorageError:
                logger.warning("Could not clean up %s after a failed upload", obj.public_id)
        raise ApiError(502, f"Upload error: {e}") from e
    return stored


def upload_single(field="photo"):
    """Accepts at most one image on `field`; sets g.uploaded_file"""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            collected = _collect({field: 1}, lambda limit: UNEXPECTED_FIELD_ERROR)
            stored = _store(collected)
            g.uploaded_file = stored[field][0] if field in stored else None
            return view(*args, **kwargs)

        return wrapper

    return decorator


def upload_multiple(field="photos", max_count=5):
    """Accepts up to `max_count` images on `field`; sets g.uploaded_files"""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            collected = _collect(
                {field: max_count},
                lambda limit: f"Too many files. Maximum {limit} files allowed",
            )
            g.uploaded_files = _store(collected).get(field, [])
            return view(*args, **kwargs)

        return wrapper

    return decorator


def upload_fields(fields=None):
    """Accepts several named fields, each with its own cap; sets g.uploaded_files"""
    fields = dict(fields or AUDIT_PHOTO_FIELDS)

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            collected = _collect(
                fields,
                lambda limit: f"Too many files. Maximum {limit} files allowed",
            )
            g.uploaded_files = _store(collected)
            return view(*args, **kwargs)

        return wrapper

    return decorator
