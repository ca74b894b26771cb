"""
API: Uploads
Image upload, delete and info on top of Google Cloud Storage
"""
import logging
from datetime import datetime
from flask import Blueprint, g
from ..permissions import require
from ..utils.auth import verify_jwt
from ..utils.cloud_storage import (
    StorageError,
    StorageNotFound,
    delete_file,
    public_url,
    thumbnail_url,
)
from ..utils.responses import ApiError, api_response
from ..utils.upload import AUDIT_PHOTO_FIELDS, upload_fields, upload_multiple, upload_single

logger = logging.getLogger(__name__)

bp = Blueprint("uploads", __name__)


def _image_data(obj, uploaded_at, legacy_aliases=False):
    data = {
        "url": obj.url,
        "publicId": obj.public_id,
        "originalName": obj.original_name,
        "size": obj.size,
        "uploadedAt": uploaded_at,
    }
    if legacy_aliases:
        # Older clients read the provider's snake_case names
        data["secure_url"] = obj.url
        data["public_id"] = obj.public_id
    return data


@bp.route("/image", methods=["POST"])
@verify_jwt
@require("uploads:write")
@upload_single("photo")
def upload_image():
    """Single image on field `photo`"""
    if g.uploaded_file is None:
        raise ApiError(400, "No image file provided")

    data = _image_data(g.uploaded_file, datetime.utcnow().isoformat())
    return api_response(data, "Image uploaded successfully", 201)


@bp.route("/images", methods=["POST"])
@verify_jwt
@require("uploads:write")
@upload_multiple("photos", max_count=5)
def upload_images():
    """Several images on field `photos`"""
    if not g.uploaded_files:
        raise ApiError(400, "No image files provided")

    uploaded_at = datetime.utcnow().isoformat()
    data = [_image_data(obj, uploaded_at, legacy_aliases=True) for obj in g.uploaded_files]
    return api_response(data, "Images uploaded successfully", 201)


@bp.route("/audit-photos", methods=["POST"])
@verify_jwt
@require("uploads:write")
@upload_fields(AUDIT_PHOTO_FIELDS)
def upload_audit_photos():
    """Audit form photos, grouped by field name"""
    if not g.uploaded_files:
        raise ApiError(400, "No image files provided")

    uploaded_at = datetime.utcnow().isoformat()
    data = {
        field: [_image_data(obj, uploaded_at, legacy_aliases=True) for obj in objs]
        for field, objs in g.uploaded_files.items()
    }
    return api_response(data, "Images uploaded successfully", 201)


@bp.route("/<path:public_id>", methods=["DELETE"])
@verify_jwt
@require("uploads:delete")
def delete_image(public_id):
    """Deletes an image from the bucket"""
    public_id = public_id.strip()
    if not public_id:
        raise ApiError(400, "Public ID is required")

    try:
        delete_file(public_id)
    except StorageNotFound:
        raise ApiError(404, "Image not found or already deleted")
    except StorageError as e:
        logger.error("Error deleting image %s: %s", public_id, e)
        raise ApiError(500, "Failed to delete image")

    return api_response(None, "Image deleted successfully")


@bp.route("/<path:public_id>/info", methods=["GET"])
@verify_jwt
@require("uploads:read")
def get_image_info(public_id):
    """URLs for an image; the object is not looked up"""
    public_id = public_id.strip()
    if not public_id:
        raise ApiError(400, "Public ID is required")

    data = {
        "publicId": public_id,
        "url": public_url(public_id),
        "thumbnailUrl": thumbnail_url(public_id),
    }
    return api_response(data, "Image info retrieved")
