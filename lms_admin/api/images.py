"""
API: Images
Serves images from Google Cloud Storage, optionally as a thumbnail
"""
import io
import logging
from flask import Blueprint, Response, request
from PIL import Image, ImageOps, UnidentifiedImageError
from ..utils.cloud_storage import StorageError, get_file_content
from ..utils.responses import ApiError

logger = logging.getLogger(__name__)

bp = Blueprint("images", __name__)

MAX_THUMBNAIL_SIDE = 2000
_FORMATS = {"image/png": "PNG", "image/webp": "WEBP"}


def _dimension(name):
    value = request.args.get(name)
    if value is None:
        return None
    if not value.isdigit() or not 0 < int(value) <= MAX_THUMBNAIL_SIDE:
        raise ApiError(400, f"{name} must be between 1 and {MAX_THUMBNAIL_SIDE}")
    return int(value)


def make_thumbnail(content, content_type, width, height, fill=True):
    """
    Resizes image bytes

    Args:
        fill: crop to exactly width x height; otherwise fit inside the box

    Returns:
        tuple: (bytes, content_type)
    """
    fmt = _FORMATS.get(content_type, "JPEG")
    with Image.open(io.BytesIO(content)) as image:
        image = ImageOps.exif_transpose(image)
        if fill:
            image = ImageOps.fit(image, (width, height))
        else:
            image.thumbnail((width, height))
        if fmt == "JPEG" and image.mode not in ("RGB", "L"):
            image = image.convert("RGB")

        buffer = io.BytesIO()
        image.save(buffer, format=fmt)

    return buffer.getvalue(), "image/jpeg" if fmt == "JPEG" else content_type


@bp.route("/<path:image_path>", methods=["GET"])
def serve_image(image_path):
    """
    Serves an image from the bucket

    Args:
        image_path: public id of the image (e.g. lms-admin/<uuid>_photo.png)

    Query:
        w, h: thumbnail size; fit=fill crops, anything else fits inside
    """
    width, height = _dimension("w"), _dimension("h")

    try:
        content, content_type = get_file_content(image_path)
    except StorageError as e:
        logger.error("Error serving image %s: %s", image_path, e)
        raise ApiError(502, "Failed to load image")

    if content is None:
        raise ApiError(404, "Image not found")

    if width or height:
        try:
            content, content_type = make_thumbnail(
                content,
                content_type,
                width or height,
                height or width,
                fill=request.args.get("fit") == "fill",
            )
        except (UnidentifiedImageError, OSError):
            raise ApiError(415, "Stored object is not a readable image")

    # Long cache: objects are immutable (unique public ids)
    response = Response(content, mimetype=content_type)
    response.headers["Cache-Control"] = "public, max-age=31536000"
    return response
