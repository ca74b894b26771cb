"""
API: Categories
Full CRUD for course categories
"""
import logging
from flask import Blueprint
from ..db import db
from ..models import Category
from ..permissions import require
from ..utils.auth import verify_jwt
from ..utils.responses import ApiError, api_response, json_object
from .units import appended_positions, renumber_group

logger = logging.getLogger(__name__)

bp = Blueprint("categories", __name__)


def _get_or_404(id):
    category = db.session.get(Category, id)
    if not category:
        raise ApiError(404, "Category not found")
    return category


def _clean(value):
    return value.strip() if isinstance(value, str) else value


@bp.route("", methods=["POST"])
@verify_jwt
@require("categories:write")
def create_category():
    """Creates a category"""
    data = json_object()
    name = _clean(data.get("name"))

    if not name or not isinstance(name, str):
        raise ApiError(400, "Category name is required")

    category = Category(name=name, description=data.get("description"))
    db.session.add(category)
    db.session.commit()

    logger.info("Category %s created (id=%s)", category.name, category.id)
    return api_response(category.to_dict(), "Category created successfully", 201)


@bp.route("", methods=["GET"])
@verify_jwt
@require("categories:read")
def get_categories():
    """Lists every category sorted by name"""
    categories = Category.query.order_by(Category.name).all()
    return api_response([c.to_dict() for c in categories], "Categories fetched successfully")


@bp.route("/<int:id>", methods=["GET"])
@verify_jwt
@require("categories:read")
def get_category(id):
    """Gets one category"""
    category = _get_or_404(id)
    return api_response(category.to_dict(), "Category fetched successfully")


@bp.route("/<int:id>", methods=["PUT"])
@verify_jwt
@require("categories:write")
def update_category(id):
    """Updates name and/or description"""
    category = _get_or_404(id)
    data = json_object()

    if "name" in data:
        name = _clean(data["name"])
        if not name or not isinstance(name, str):
            raise ApiError(400, "Category name cannot be empty")
        category.name = name
    if "description" in data:
        category.description = data["description"]

    db.session.commit()

    return api_response(category.to_dict(), "Category updated successfully")


@bp.route("/<int:id>", methods=["DELETE"])
@verify_jwt
@require("categories:write")
def delete_category(id):
    """Deletes a category; its units are kept without category"""
    category = _get_or_404(id)
    # Orphans go after the units that already had no category, in their current order
    requested = appended_positions(category.id, None)

    # The relationship nulls units.category_id on delete
    db.session.delete(category)
    db.session.flush()

    if requested:
        renumber_group(None, requested)

    db.session.commit()

    logger.info("Category %s deleted (id=%s)", category.name, id)
    return api_response(None, "Category deleted successfully")
