# catalog_admin/api/v1/homepage_sections.py
from flask import Blueprint, request, jsonify, g
from catalog_admin.application.homepage import items as item_service
from catalog_admin.application.homepage import sections as section_service
from catalog_admin.domain.ordering import Move
from catalog_admin.extensions import homepage_cache
from catalog_admin.gateway.sqlalchemy_gateway import SqlAlchemyGateway
from catalog_admin.schemas.homepage import (
    AddItemRequest,
    CreateSectionRequest,
    MoveSectionRequest,
    ReorderItemsRequest,
    ReorderSectionsRequest,
    UpdateItemRequest,
    UpdateSectionRequest,
    parse_payload,
)
from catalog_admin.utils.decorators import editor_required
from catalog_admin.utils.optimistic_lock import if_unmodified_since

homepage_bp = Blueprint("homepage_sections", __name__)


def _gateway():
    return SqlAlchemyGateway()


def _json_body():
    return request.get_json(silent=True)


def _cache_body(view):
    return {
        "sections": view.sections,
        "is_loading": view.is_loading,
        "is_fetching": view.is_fetching,
        "error": str(view.error) if view.error else None,
    }


# ------------------------
# Cache patches
# ------------------------
def _append_section(section):
    def updater(sections):
        if sections is None:
            return None  # never loaded, the next fetch brings everything
        return [s for s in sections if s["id"] != section["id"]] + [section]
    return updater


def _replace_section(section):
    def updater(sections):
        if sections is None:
            return None
        return [section if s["id"] == section["id"] else s for s in sections]
    return updater


# ------------------------
# Sections
# ------------------------
@homepage_bp.route("/homepage-sections", methods=["GET"])
@editor_required
def list_sections():
    if request.args.get("refresh") in ("1", "true"):
        homepage_cache.refresh()
    else:
        homepage_cache.fetch()

    view = homepage_cache.view()

    if view.error and homepage_cache.state.sections is None:
        return jsonify({
            **_cache_body(view),
            "error": "GatewayError",
            "message": f"Could not load homepage sections: {view.error}",
        }), 503

    return jsonify(_cache_body(view)), 200


@homepage_bp.route("/homepage-sections", methods=["POST"])
@editor_required
def create_section():
    data = parse_payload(CreateSectionRequest, _json_body())

    section = section_service.create_section(
        gateway=_gateway(),
        actor_id=g.actor_id,
        data=data,
    )

    if data.position is None:
        homepage_cache.mutate(_append_section(section))
    else:
        homepage_cache.mutate()

    return jsonify({"section": section}), 201


@homepage_bp.route("/homepage-sections/reorder", methods=["POST"])
@editor_required
def reorder_sections():
    data = parse_payload(ReorderSectionsRequest, _json_body())

    sections = section_service.reorder_sections(
        gateway=_gateway(),
        actor_id=g.actor_id,
        moves=[Move(entry.id, entry.position) for entry in data.moves],
    )
    homepage_cache.mutate(sections)

    return jsonify({"sections": sections}), 200


@homepage_bp.route("/homepage-sections/<section_id>", methods=["GET"])
@editor_required
def get_section(section_id):
    section = section_service.get_section(gateway=_gateway(), section_id=section_id)
    return jsonify({"section": section}), 200


@homepage_bp.route("/homepage-sections/<section_id>", methods=["PUT"])
@editor_required
def update_section(section_id):
    # -----------------------
    # Optimistic Locking Check
    # -----------------------
    expected = if_unmodified_since()

    data = parse_payload(UpdateSectionRequest, _json_body())

    section = section_service.update_section(
        gateway=_gateway(),
        actor_id=g.actor_id,
        section_id=section_id,
        data=data,
        expected_updated_at=expected,
    )

    if data.position is None:
        homepage_cache.mutate(_replace_section(section))
    else:
        homepage_cache.mutate()

    return jsonify({"section": section}), 200


@homepage_bp.route("/homepage-sections/<section_id>", methods=["DELETE"])
@editor_required
def delete_section(section_id):
    section_service.delete_section(
        gateway=_gateway(),
        actor_id=g.actor_id,
        section_id=section_id,
    )
    # positions after the removed one shifted, reload rather than patch
    homepage_cache.mutate()

    return jsonify({"message": "Section deleted and order re-compacted"}), 200


@homepage_bp.route("/homepage-sections/<section_id>/reorder", methods=["PATCH"])
@editor_required
def move_section(section_id):
    data = parse_payload(MoveSectionRequest, _json_body())

    sections = section_service.move_section(
        gateway=_gateway(),
        actor_id=g.actor_id,
        section_id=section_id,
        position=data.position,
    )
    homepage_cache.mutate(sections)

    return jsonify({"sections": sections}), 200


# ------------------------
# Items
# ------------------------
@homepage_bp.route("/homepage-sections/<section_id>/items", methods=["GET"])
@editor_required
def list_items(section_id):
    items = item_service.list_items(gateway=_gateway(), section_id=section_id)
    return jsonify({"items": items}), 200


@homepage_bp.route("/homepage-sections/<section_id>/items", methods=["POST"])
@editor_required
def add_item(section_id):
    data = parse_payload(AddItemRequest, _json_body())

    item = item_service.add_item(
        gateway=_gateway(),
        actor_id=g.actor_id,
        section_id=section_id,
        data=data,
    )
    homepage_cache.mutate()

    return jsonify({"item": item}), 201


@homepage_bp.route("/homepage-sections/<section_id>/items/reorder", methods=["PATCH"])
@editor_required
def reorder_items(section_id):
    data = parse_payload(ReorderItemsRequest, _json_body())

    items = item_service.reorder_items(
        gateway=_gateway(),
        actor_id=g.actor_id,
        section_id=section_id,
        entries=data.items,
    )
    homepage_cache.mutate()

    return jsonify({"items": items}), 200


@homepage_bp.route("/homepage-sections/<section_id>/items/<item_id>", methods=["PATCH"])
@editor_required
def update_item(section_id, item_id):
    data = parse_payload(UpdateItemRequest, _json_body())

    item = item_service.update_item(
        gateway=_gateway(),
        actor_id=g.actor_id,
        section_id=section_id,
        item_id=item_id,
        data=data,
    )
    homepage_cache.mutate()

    return jsonify({"item": item}), 200


@homepage_bp.route("/homepage-sections/<section_id>/items/<item_id>", methods=["DELETE"])
@editor_required
def remove_item(section_id, item_id):
    item_service.remove_item(
        gateway=_gateway(),
        actor_id=g.actor_id,
        section_id=section_id,
        item_id=item_id,
    )
    homepage_cache.mutate()

    return jsonify({"message": "Item removed and order re-compacted"}), 200


# ------------------------
# Cache control
# ------------------------
@homepage_bp.route("/homepage-cache", methods=["GET"])
@editor_required
def cache_state():
    return jsonify(_cache_body(homepage_cache.view())), 200


@homepage_bp.route("/homepage-cache", methods=["POST"])
@editor_required
def refresh_cache():
    homepage_cache.refresh()
    return jsonify(_cache_body(homepage_cache.view())), 200


@homepage_bp.route("/homepage-cache", methods=["DELETE"])
@editor_required
def invalidate_cache():
    homepage_cache.mutate(None)
    return jsonify(_cache_body(homepage_cache.view())), 200
