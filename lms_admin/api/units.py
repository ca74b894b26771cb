"""
API: Units
CRUD for course units plus an all-or-nothing reorder
"""
import logging
from flask import Blueprint, request
from ..db import db
from ..models import Category, Unit
from ..permissions import require
from ..services.unit_ordering import (
    ReorderError,
    group_requests,
    next_position,
    normalize_reorder_payload,
    plan_order,
)
from ..utils.auth import verify_jwt
from ..utils.responses import ApiError, api_response, json_object

logger = logging.getLogger(__name__)

bp = Blueprint("units", __name__)


def _group_query(category_id):
    if category_id is None:
        query = Unit.query.filter(Unit.category_id.is_(None))
    else:
        query = Unit.query.filter(Unit.category_id == category_id)
    return query.order_by(Unit.order, Unit.created_at, Unit.id)


def renumber_group(category_id, requested=None):
    """
    Rewrites `order` inside one category as 0..n-1.

    Args:
        category_id: category id, None for units without category
        requested: optional {unit_id: position} to apply first
    """
    units = _group_query(category_id).all()
    by_id = {unit.id: unit for unit in units}
    final = plan_order([unit.id for unit in units], requested or {})

    for position, unit_id in enumerate(final):
        unit = by_id[unit_id]
        if unit.order != position:
            unit.order = position
    return [by_id[unit_id] for unit_id in final]


def appended_positions(source_id, target_id):
    """{unit_id: position} placing the units of `source_id` after those of `target_id`"""
    base = _group_query(target_id).count()
    return {unit.id: base + index for index, unit in enumerate(_group_query(source_id))}


def _get_or_404(id):
    unit = db.session.get(Unit, id)
    if not unit:
        raise ApiError(404, "Unit not found")
    return unit


def _category_id_from(data):
    """Validates categoryId from a payload (None allowed)"""
    category_id = data.get("categoryId")
    if category_id is None:
        return None
    if isinstance(category_id, bool) or not isinstance(category_id, int):
        raise ApiError(400, "categoryId must be an integer")
    if not db.session.get(Category, category_id):
        raise ApiError(404, "Category not found")
    return category_id


def _position_from(data):
    order = data.get("order")
    if order is None:
        return None
    if isinstance(order, bool) or not isinstance(order, int) or order < 0:
        raise ApiError(400, "order must be a non-negative integer")
    return order


def _check_version(unit, data):
    version = data.get("version")
    if version is not None and version != unit.version:
        raise ApiError(409, f"Unit {unit.id} was modified by another request, reload and retry")


@bp.route("", methods=["POST"])
@verify_jwt
@require("units:write")
def create_unit():
    """Creates a unit at the end of its category (or at `order`)"""
    data = json_object()
    name = data.get("name")
    name = name.strip() if isinstance(name, str) else name

    if not name or not isinstance(name, str):
        raise ApiError(400, "Unit name is required")

    category_id = _category_id_from(data)
    position = _position_from(data)

    unit = Unit(
        name=name,
        description=data.get("description"),
        category_id=category_id,
        is_active=bool(data.get("isActive", True)),
        order=next_position(order for (order,) in _group_query(category_id).with_entities(Unit.order)),
    )
    db.session.add(unit)
    db.session.flush()

    if position is not None:
        renumber_group(category_id, {unit.id: position})

    db.session.commit()

    logger.info("Unit %s created (id=%s, category=%s)", unit.name, unit.id, category_id)
    return api_response(unit.to_dict(), "Unit created successfully", 201)


@bp.route("", methods=["GET"])
@verify_jwt
@require("units:read")
def get_units():
    """Lists units; optional ?categoryId= and ?active=true|false"""
    query = Unit.query

    category_id = request.args.get("categoryId")
    if category_id is not None:
        if category_id in ("", "null", "none"):
            query = query.filter(Unit.category_id.is_(None))
        elif category_id.isdigit():
            query = query.filter(Unit.category_id == int(category_id))
        else:
            raise ApiError(400, "categoryId must be an integer")

    active = request.args.get("active")
    if active is not None:
        query = query.filter(Unit.is_active == (active.lower() == "true"))

    units = query.order_by(Unit.order, Unit.created_at, Unit.id).all()
    return api_response([u.to_dict() for u in units], "Units fetched successfully")


@bp.route("/<int:id>", methods=["GET"])
@verify_jwt
@require("units:read")
def get_unit(id):
    """Gets one unit"""
    return api_response(_get_or_404(id).to_dict(), "Unit fetched successfully")


@bp.route("/<int:id>", methods=["PUT"])
@verify_jwt
@require("units:write")
def update_unit(id):
    """Partial update; moving category or order renumbers the groups involved"""
    unit = _get_or_404(id)
    data = json_object()
    _check_version(unit, data)

    if "name" in data:
        name = data["name"].strip() if isinstance(data["name"], str) else data["name"]
        if not name or not isinstance(name, str):
            raise ApiError(400, "Unit name cannot be empty")
        unit.name = name
    if "description" in data:
        unit.description = data["description"]
    if "isActive" in data:
        unit.is_active = bool(data["isActive"])

    old_category_id = unit.category_id
    if "categoryId" in data:
        unit.category_id = _category_id_from(data)
    position = _position_from(data)

    if unit.category_id != old_category_id:
        # Append to the new group unless a position was given
        db.session.flush()
        if position is None:
            position = len(_group_query(unit.category_id).all())
        renumber_group(old_category_id)

    if position is not None:
        db.session.flush()
        renumber_group(unit.category_id, {unit.id: position})

    db.session.commit()

    return api_response(unit.to_dict(), "Unit updated successfully")


@bp.route("/<int:id>", methods=["DELETE"])
@verify_jwt
@require("units:write")
def delete_unit(id):
    """Deletes a unit and closes the gap in its category"""
    unit = _get_or_404(id)
    category_id = unit.category_id

    db.session.delete(unit)
    db.session.flush()
    renumber_group(category_id)
    db.session.commit()

    logger.info("Unit %s deleted", id)
    return api_response(None, "Unit deleted successfully")


@bp.route("/reorder", methods=["POST"])
@verify_jwt
@require("units:reorder")
def reorder_units():
    """
    Persists a new order in one transaction.

    Body: {"ids": [...]} or {"units": [{"id", "order", "version"?}]}.
    Unknown ids, duplicates or stale versions abort without writing anything.
    """
    try:
        entries = normalize_reorder_payload(request.get_json(silent=True))
    except ReorderError as e:
        raise ApiError(400, str(e))

    ids = [entry.unit_id for entry in entries]
    units = {unit.id: unit for unit in Unit.query.filter(Unit.id.in_(ids)).all()}

    missing = [unit_id for unit_id in ids if unit_id not in units]
    if missing:
        raise ApiError(404, "Unit not found", errors=[{"id": unit_id} for unit_id in missing])

    stale = [
        entry.unit_id for entry in entries
        if entry.version is not None and entry.version != units[entry.unit_id].version
    ]
    if stale:
        raise ApiError(
            409,
            "Units were modified by another request, reload and retry",
            errors=[{"id": unit_id} for unit_id in stale],
        )

    try:
        grouped = group_requests(entries, {unit_id: unit.category_id for unit_id, unit in units.items()})
    except ReorderError as e:
        raise ApiError(400, str(e))

    # Single commit; a StaleDataError from a concurrent write rolls back every group
    result = []
    for category_id, requested in grouped.items():
        result.extend(renumber_group(category_id, requested))
    db.session.commit()

    logger.info("Reordered %d units across %d categories", len(entries), len(grouped))
    return api_response([u.to_dict() for u in result], "Units reordered successfully")
