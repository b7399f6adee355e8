from typing import Any, Dict, List

from flask import current_app

from catalog_admin.domain.exceptions import ConflictError, NotFoundError, ValidationError
from catalog_admin.domain.invariants.item import (
    assert_item_order,
    assert_product_linkable,
    assert_unique_products,
)
from catalog_admin.domain.ordering import Move, insert, persist_order, reorder
from catalog_admin.domain.sanitizers import sanitize_config_map
from catalog_admin.gateway.base import PersistenceGateway
from catalog_admin.normalizers.item import item_payload, item_sort_key, map_item
from catalog_admin.schemas.homepage import AddItemRequest, ItemPositionEntry, UpdateItemRequest
from catalog_admin.utils.audit import record_activity


def _require_section(gateway: PersistenceGateway, section_id: str) -> None:
    if gateway.get_section(section_id) is None:
        raise NotFoundError(f"Section {section_id} not found")


def _require_item(gateway: PersistenceGateway, section_id: str, item_id: str) -> Dict[str, Any]:
    record = gateway.get_item(section_id, item_id)
    if record is None:
        raise NotFoundError(f"Item {item_id} not found")
    return record


def _mapped_items(gateway: PersistenceGateway, section_id: str) -> List[Dict[str, Any]]:
    items = [map_item(record) for record in gateway.list_items(section_id)]
    return sorted(items, key=item_sort_key)


def _write_order(gateway: PersistenceGateway, section_id: str, order: List[str], actor_id: str) -> None:
    # only ever this section's rows
    if order:
        gateway.rewrite_item_positions(section_id, persist_order(order, actor_id))


def list_items(*, gateway: PersistenceGateway, section_id: str) -> List[Dict[str, Any]]:
    _require_section(gateway, section_id)
    return _mapped_items(gateway, section_id)


def add_item(
    *,
    gateway: PersistenceGateway,
    actor_id: str,
    section_id: str,
    data: AddItemRequest,
) -> Dict[str, Any]:
    """
    Link a product to a section at ``data.position`` (or last).

    Edge cases handled:
    - Unknown section or product
    - Product already linked to this section (order left untouched)
    - Product missing name, price or unit
    """
    _require_section(gateway, section_id)

    current = _mapped_items(gateway, section_id)
    if any(item["product_id"] == data.product_id for item in current):
        current_app.logger.warning(
            f"Product {data.product_id} is already linked to homepage section {section_id}"
        )
        raise ConflictError("This product is already part of the section")

    product = gateway.find_product_by_id(data.product_id)
    if product is None:
        raise NotFoundError(f"Product {data.product_id} not found")
    assert_product_linkable(product)

    order = [item["id"] for item in current]

    record = gateway.insert_item(section_id, item_payload({
        "product_id": data.product_id,
        "position": len(order) + 1,
        "metadata": sanitize_config_map(data.metadata),
        "updated_by": actor_id,
    }))

    target = None if data.position is None else data.position - 1
    _write_order(gateway, section_id, insert(order, record["id"], target), actor_id)

    item = map_item(_require_item(gateway, section_id, record["id"]))
    current_app.logger.info(
        f"Product {data.product_id} added to homepage section {section_id} at position {item['position']}"
    )

    record_activity(
        "homepage_section_item_created",
        "homepage_section_item",
        item["id"],
        after=item,
        actor_id=actor_id,
    )
    return item


def update_item(
    *,
    gateway: PersistenceGateway,
    actor_id: str,
    section_id: str,
    item_id: str,
    data: UpdateItemRequest,
) -> Dict[str, Any]:
    before = map_item(_require_item(gateway, section_id, item_id))

    if data.metadata is not None:
        gateway.update_item(section_id, item_id, item_payload({
            "metadata": sanitize_config_map(data.metadata),
            "updated_by": actor_id,
        }))

    if data.position is not None:
        order = [item["id"] for item in _mapped_items(gateway, section_id)]
        _write_order(gateway, section_id, insert(order, item_id, data.position - 1), actor_id)

    after = map_item(_require_item(gateway, section_id, item_id))

    record_activity(
        "homepage_section_item_updated",
        "homepage_section_item",
        item_id,
        before=before,
        after=after,
        actor_id=actor_id,
    )
    return after


def remove_item(
    *,
    gateway: PersistenceGateway,
    actor_id: str,
    section_id: str,
    item_id: str,
) -> None:
    """Unlink an item and close the gap inside its section."""
    before = map_item(_require_item(gateway, section_id, item_id))

    gateway.delete_item(section_id, item_id)

    remaining = [item["id"] for item in _mapped_items(gateway, section_id)]
    _write_order(gateway, section_id, remaining, actor_id)

    current_app.logger.info(f"Item {item_id} removed from homepage section {section_id}")
    record_activity(
        "homepage_section_item_deleted",
        "homepage_section_item",
        item_id,
        before=before,
        actor_id=actor_id,
    )


def reorder_items(
    *,
    gateway: PersistenceGateway,
    actor_id: str,
    section_id: str,
    entries: List[ItemPositionEntry],
) -> List[Dict[str, Any]]:
    """
    Reorder every item of a section.

    ``entries`` must name each current item exactly once. Submitted
    positions only need to be comparable: they are ranked first (stable for
    ties) and the ranks are fed to the ordering engine.
    """
    _require_section(gateway, section_id)

    order = [item["id"] for item in _mapped_items(gateway, section_id)]
    submitted = [entry.id for entry in entries]

    if len(submitted) != len(order) or set(submitted) != set(order):
        raise ValidationError(
            "Send every item of the section exactly once to reorder it",
            details=[{"field": "items", "message": "Item list does not match the section"}],
        )

    ranked = sorted(entries, key=lambda entry: entry.position)
    moves = [Move(entry.id, rank) for rank, entry in enumerate(ranked, start=1)]

    new_order = reorder(order, moves)
    _write_order(gateway, section_id, new_order, actor_id)

    items = _mapped_items(gateway, section_id)
    assert_item_order(items)
    assert_unique_products(items)

    record_activity(
        "homepage_section_item_reordered",
        "homepage_section_item",
        section_id,
        before={"ordered_ids": order},
        after={"ordered_ids": new_order},
        actor_id=actor_id,
    )
    return items
