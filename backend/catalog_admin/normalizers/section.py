from typing import Any, Dict, Mapping

from catalog_admin.utils.timestamps import isoformat
from .item import coerce_int, item_sort_key, map_item

# The homepage always shows exactly three products per section, whatever
# limit older rows carry.
VISIBLE_ITEM_COUNT = 3

# view model key -> persisted key
SECTION_FIELDS = {
    "id": "id",
    "title": "title",
    "subtitle": "subtitle",
    "layout_kind": "layout_type",
    "background": "bg_color",
    "cta_label": "view_all_label",
    "cta_href": "view_all_href",
    "linked_category_id": "category_id",
    "position": "sort_order",
    "active": "is_active",
    "config": "config",
    "updated_by": "updated_by",
}


def map_section(record: Mapping[str, Any], include_items=True) -> Dict[str, Any]:
    active = record.get("is_active")

    data = {
        "id": record.get("id"),
        "title": record.get("title"),
        "subtitle": record.get("subtitle") or None,
        "layout_kind": record.get("layout_type") or "grid",
        "background": record.get("bg_color") or "white",
        "visible_item_count": VISIBLE_ITEM_COUNT,
        "cta_label": record.get("view_all_label"),
        "cta_href": record.get("view_all_href"),
        "linked_category_id": record.get("category_id") or None,
        "position": coerce_int(record.get("sort_order")),
        "active": True if active is None else bool(active),
        "config": dict(record.get("config") or {}),
        "created_at": isoformat(record.get("created_at")),
        "updated_at": isoformat(record.get("updated_at")),
        "updated_by": record.get("updated_by"),
    }

    if include_items:
        items = [map_item(item) for item in record.get("items") or []]
        data["items"] = sorted(items, key=item_sort_key)

    return data


def section_payload(section: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Inverse of ``map_section`` for writes. Only keys present in ``section``
    are emitted, so partial updates stay partial; ``items`` and timestamps
    never reach the gateway.
    """
    payload = {
        persisted: section[field]
        for field, persisted in SECTION_FIELDS.items()
        if field in section
    }
    payload["item_limit"] = VISIBLE_ITEM_COUNT
    return payload
