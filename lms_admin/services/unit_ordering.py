"""
Service: unit ordering
Pure helpers behind POST /api/units/reorder. Positions are 0-based and
contiguous inside each category.
"""
from dataclasses import dataclass
from typing import Dict, Hashable, Iterable, List, Optional


class ReorderError(ValueError):
    """The reorder payload is malformed"""


@dataclass(frozen=True)
class ReorderEntry:
    unit_id: int
    position: int
    version: Optional[int] = None


def _as_int(value, label):
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise ReorderError(f"{label} must be an integer")
    return value


def normalize_reorder_payload(data) -> List[ReorderEntry]:
    """
    Accepts either {"ids": [3, 1, 2]} (position = index) or
    {"units": [{"id": 3, "order": 0, "version": 2}, ...]}.
    """
    if not isinstance(data, dict):
        raise ReorderError("Request body must be a JSON object")

    if "ids" in data:
        ids = data["ids"]
        if not isinstance(ids, list) or not ids:
            raise ReorderError("ids must be a non-empty list")
        entries = [ReorderEntry(_as_int(unit_id, "id"), index) for index, unit_id in enumerate(ids)]
    elif "units" in data:
        items = data["units"]
        if not isinstance(items, list) or not items:
            raise ReorderError("units must be a non-empty list")
        entries = []
        for item in items:
            if not isinstance(item, dict) or "id" not in item or "order" not in item:
                raise ReorderError("each unit needs an id and an order")
            position = _as_int(item["order"], "order")
            if position < 0:
                raise ReorderError("order must be zero or positive")
            version = item.get("version")
            entries.append(
                ReorderEntry(
                    _as_int(item["id"], "id"),
                    position,
                    _as_int(version, "version") if version is not None else None,
                )
            )
    else:
        raise ReorderError("Provide either ids or units")

    ids = [entry.unit_id for entry in entries]
    if len(set(ids)) != len(ids):
        raise ReorderError("Duplicate unit ids in reorder request")

    return entries


def group_requests(entries: Iterable[ReorderEntry], group_of: Dict[int, Hashable]) -> Dict[Hashable, Dict[int, int]]:
    """
    Splits entries by group (category) as {group: {unit_id: position}}.
    Positions must be unique inside a group.
    """
    grouped: Dict[Hashable, Dict[int, int]] = {}
    for entry in entries:
        group = grouped.setdefault(group_of[entry.unit_id], {})
        if entry.position in group.values():
            raise ReorderError("Duplicate positions in reorder request")
        group[entry.unit_id] = entry.position
    return grouped


def plan_order(current: Iterable[Hashable], requested: Dict[Hashable, int]) -> list:
    """
    Final order of a group.

    `current` is the group in its present order, `requested` maps some of its
    members to target positions. Untouched members keep their relative order
    and fill the remaining slots.
    """
    remaining = [item for item in current if item not in requested]
    for item, position in sorted(requested.items(), key=lambda pair: pair[1]):
        remaining.insert(min(position, len(remaining)), item)
    return remaining


def next_position(existing_orders: Iterable[Optional[int]]) -> int:
    """Position for a unit appended at the end of its category"""
    orders = [order for order in existing_orders if order is not None]
    return max(orders) + 1 if orders else 0
