from typing import Any, Dict, List

from flask import current_app

from catalog_admin.domain.exceptions import ConflictError, NotFoundError, field_error
from catalog_admin.domain.invariants.section import assert_section_id, assert_section_order
from catalog_admin.domain.ordering import Move, insert, persist_order, reorder
from catalog_admin.domain.sanitizers import (
    generate_section_id,
    sanitize_config_map,
    sanitize_href,
)
from catalog_admin.gateway.base import PersistenceGateway
from catalog_admin.normalizers.section import map_section, section_payload
from catalog_admin.schemas.homepage import CreateSectionRequest, UpdateSectionRequest
from catalog_admin.utils.audit import record_activity
from catalog_admin.utils.optimistic_lock import enforce_optimistic_lock


def _section_order(gateway: PersistenceGateway) -> List[str]:
    sections = [map_section(record, include_items=False) for record in gateway.list_sections()]
    sections.sort(key=lambda s: (s["position"], s["created_at"] or ""))
    return [section["id"] for section in sections]


def _require_section(gateway: PersistenceGateway, section_id: str) -> Dict[str, Any]:
    record = gateway.get_section(section_id)
    if record is None:
        raise NotFoundError(f"Section {section_id} not found")
    return record


def _write_order(gateway: PersistenceGateway, order: List[str], actor_id: str) -> None:
    if order:
        gateway.rewrite_section_positions(persist_order(order, actor_id))


def list_sections(*, gateway: PersistenceGateway) -> List[Dict[str, Any]]:
    sections = [map_section(record) for record in gateway.list_sections()]
    return sorted(sections, key=lambda s: s["position"])


def get_section(*, gateway: PersistenceGateway, section_id: str) -> Dict[str, Any]:
    return map_section(_require_section(gateway, section_id))


def create_section(
    *,
    gateway: PersistenceGateway,
    actor_id: str,
    data: CreateSectionRequest,
) -> Dict[str, Any]:
    """
    Create a section at the end of the homepage, or at ``data.position``.

    Edge cases handled:
    - Title with nothing sluggable (empty id)
    - Duplicate id
    - Position beyond the end (saturates to last)
    """
    section_id = generate_section_id(data.id, data.title)
    if len(section_id) < 2:
        raise field_error("id", "Could not derive an identifier, provide one explicitly")
    assert_section_id(section_id)

    if gateway.get_section(section_id) is not None:
        current_app.logger.warning(f"Rejected duplicate homepage section id {section_id}")
        raise ConflictError(f"A section with id '{section_id}' already exists")

    order = _section_order(gateway)

    payload = section_payload({
        "id": section_id,
        "title": data.title,
        "subtitle": data.subtitle,
        "layout_kind": data.layout_kind,
        "background": data.background,
        "cta_label": data.cta_label,
        "cta_href": sanitize_href(data.cta_href),
        "linked_category_id": data.linked_category_id,
        "position": len(order) + 1,
        "active": True if data.active is None else data.active,
        "config": sanitize_config_map(data.config),
        "updated_by": actor_id,
    })
    gateway.insert_section(payload)

    target = None if data.position is None else data.position - 1
    _write_order(gateway, insert(order, section_id, target), actor_id)

    section = map_section(_require_section(gateway, section_id))
    current_app.logger.info(f"Homepage section {section_id} created at position {section['position']}")

    record_activity(
        "homepage_section_created",
        "homepage_section",
        section_id,
        after=section,
        actor_id=actor_id,
    )
    return section


def update_section(
    *,
    gateway: PersistenceGateway,
    actor_id: str,
    section_id: str,
    data: UpdateSectionRequest,
    expected_updated_at=None,
) -> Dict[str, Any]:
    """
    Replace the editable fields of a section.

    A position change is applied through the ordering engine, never written
    raw, so the collection stays contiguous.
    """
    record = _require_section(gateway, section_id)
    enforce_optimistic_lock(record.get("updated_at"), expected_updated_at)

    before = map_section(record)

    gateway.update_section(section_id, section_payload({
        "title": data.title,
        "subtitle": data.subtitle,
        "layout_kind": data.layout_kind,
        "background": data.background,
        "cta_label": data.cta_label,
        "cta_href": sanitize_href(data.cta_href),
        "linked_category_id": data.linked_category_id,
        "active": before["active"] if data.active is None else data.active,
        "config": sanitize_config_map(data.config),
        "updated_by": actor_id,
    }))

    if data.position is not None and data.position != before["position"]:
        order = _section_order(gateway)
        _write_order(gateway, insert(order, section_id, data.position - 1), actor_id)

    after = map_section(_require_section(gateway, section_id))

    record_activity(
        "homepage_section_updated",
        "homepage_section",
        section_id,
        before=before,
        after=after,
        actor_id=actor_id,
    )
    return after


def delete_section(*, gateway: PersistenceGateway, actor_id: str, section_id: str) -> None:
    """Delete a section with its items and close the gap it leaves."""
    before = map_section(_require_section(gateway, section_id))

    gateway.delete_section(section_id)
    _write_order(gateway, _section_order(gateway), actor_id)

    current_app.logger.info(f"Homepage section {section_id} deleted")
    record_activity(
        "homepage_section_deleted",
        "homepage_section",
        section_id,
        before=before,
        actor_id=actor_id,
    )


def move_section(
    *,
    gateway: PersistenceGateway,
    actor_id: str,
    section_id: str,
    position: int,
) -> List[Dict[str, Any]]:
    """Move one section to the 1-based ``position`` and return the new list."""
    order = _section_order(gateway)
    if section_id not in order:
        raise NotFoundError(f"Section {section_id} not found")

    new_order = insert(order, section_id, position - 1)
    _write_order(gateway, new_order, actor_id)
    final_position = new_order.index(section_id) + 1

    sections = list_sections(gateway=gateway)
    assert_section_order(sections)

    current_app.logger.info(
        f"Homepage section {section_id} moved to position {final_position}"
    )
    record_activity(
        "homepage_section_reordered",
        "homepage_section",
        section_id,
        after={"position": final_position, "ordered_ids": new_order},
        actor_id=actor_id,
    )
    return sections


def reorder_sections(
    *,
    gateway: PersistenceGateway,
    actor_id: str,
    moves: List[Move],
) -> List[Dict[str, Any]]:
    """Apply several moves at once; see ``ordering.reorder`` for tie-breaks."""
    order = _section_order(gateway)
    new_order = reorder(order, moves)
    _write_order(gateway, new_order, actor_id)

    sections = list_sections(gateway=gateway)
    assert_section_order(sections)

    record_activity(
        "homepage_section_reordered",
        "homepage_section",
        None,
        before={"ordered_ids": order},
        after={"ordered_ids": new_order},
        actor_id=actor_id,
    )
    return sections
