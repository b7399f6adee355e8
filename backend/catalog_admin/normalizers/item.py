"""
Composition mapping for section items and the product summary they embed.

Records arrive from the gateway as loosely typed mappings; everything past
this module only sees the normalised shape.
"""
import math
from typing import Any, Dict, Mapping, Optional

from catalog_admin.utils.timestamps import isoformat

DEFAULT_UNIT = "unidade"

# view model key -> persisted key
ITEM_FIELDS = {
    "section_id": "section_id",
    "product_id": "product_id",
    "position": "sort_order",
    "metadata": "metadata",
    "updated_by": "updated_by",
}


def coerce_int(value, default=0):
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def coerce_price(value) -> float:
    # numeric columns can come back as Decimal or str
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        price = float(value)
    except (TypeError, ValueError):
        return 0.0
    return price if math.isfinite(price) else 0.0


def map_product_summary(record: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    if not record:
        return None

    return {
        "id": record.get("id"),
        "name": record.get("name"),
        "slug": record.get("slug"),
        "price": coerce_price(record.get("price")),
        "unit": record.get("unit") or DEFAULT_UNIT,
        "image_url": record.get("image_url") or "",
        "category": record.get("category"),
    }


def map_item(record: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "id": record.get("id"),
        "section_id": record.get("section_id"),
        "product_id": record.get("product_id"),
        "position": coerce_int(record.get("sort_order")),
        "metadata": dict(record.get("metadata") or {}),
        "product": map_product_summary(record.get("product")),
        "created_at": isoformat(record.get("created_at")),
        "updated_at": isoformat(record.get("updated_at")),
        "updated_by": record.get("updated_by"),
    }


def item_sort_key(item: Mapping[str, Any]):
    """Position first; legacy rows sharing a position fall back to creation time."""
    return (item["position"], item.get("created_at") or "")


def item_payload(item: Mapping[str, Any]) -> Dict[str, Any]:
    """Inverse of ``map_item``. Drops ``product`` and other read-only fields."""
    return {
        persisted: item[field]
        for field, persisted in ITEM_FIELDS.items()
        if field in item
    }
