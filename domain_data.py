"""Search, filter and sort helpers over inventory items."""

from __future__ import annotations

from typing import Any, List, Optional, Sequence

from domain_types import InventoryItem

__all__ = [
    "SORTABLE_FIELDS",
    "filter_items",
    "sort_items",
    "parse_sort_params",
]

SORTABLE_FIELDS = ("code", "name", "category", "value", "created_at")

_SEARCH_ATTRS = ("code", "name", "category", "description", "serial_number")


def filter_items(
    items: Sequence[InventoryItem],
    query: Optional[str] = None,
    category: Optional[str] = None,
    floor_id: Optional[int] = None,
    room_id: Optional[int] = None,
    status: Optional[str] = None,
) -> List[InventoryItem]:
    """Apply the free-text search and exact-match filters."""

    needle = (query or "").strip().casefold()
    category_key = (category or "").strip().casefold()
    status_key = (status or "").strip().casefold()

    filtered = []
    for item in items:
        if needle and not any(
            needle in (getattr(item, attr) or "").casefold()
            for attr in _SEARCH_ATTRS
        ):
            continue
        if category_key and item.category.casefold() != category_key:
            continue
        if floor_id is not None and item.floor_id != floor_id:
            continue
        if room_id is not None and item.room_id != room_id:
            continue
        if status_key and item.status.casefold() != status_key:
            continue
        filtered.append(item)
    return filtered


def parse_sort_params(
    sort_field: Optional[str],
    sort_direction: Optional[str],
    default_field: str = "code",
    default_direction: str = "asc",
) -> tuple[str, str]:
    """Validate the requested sort, falling back to the defaults."""

    field = sort_field if sort_field in SORTABLE_FIELDS else default_field
    direction = (sort_direction or "").lower()
    if direction not in {"asc", "desc"}:
        direction = default_direction
    return field, direction


def sort_items(
    items: Sequence[InventoryItem],
    sort_field: str = "code",
    sort_direction: str = "asc",
) -> List[InventoryItem]:
    field, direction = parse_sort_params(sort_field, sort_direction)

    def _key(item: InventoryItem) -> tuple[Any, ...]:
        if field == "value":
            # items without a value sort first
            return (item.value is not None, item.value or 0.0, item.code.casefold())
        primary = str(getattr(item, field) or "").casefold()
        return (primary, item.code.casefold())

    return sorted(items, key=_key, reverse=direction == "desc")
