# tests/test_sections_api.py
from conftest import API, section_body

from catalog_admin.extensions import homepage_cache
from catalog_admin.models.activity_log import ActivityLog

SECTIONS = f"{API}/homepage-sections"


def _positions(client, headers):
    response = client.get(f"{SECTIONS}?refresh=1", headers=headers)
    return [(s["id"], s["position"]) for s in response.get_json()["sections"]]


# ------------------------
# Capability
# ------------------------
def test_requires_login(client):
    response = client.get(SECTIONS)

    assert response.status_code == 403
    assert response.get_json()["error"] == "CapabilityError"


def test_requires_editor_role(client, viewer_headers):
    response = client.post(SECTIONS, json=section_body("Ofertas"), headers=viewer_headers)

    assert response.status_code == 403
    assert response.get_json()["message"] == "Editor permissions required"


def test_health_and_openapi_are_public(client):
    assert client.get("/api/v1/health").status_code == 200
    assert client.get("/openapi/homepage.yaml").status_code == 200


# ------------------------
# Create
# ------------------------
def test_create_section_slugs_title(create_section):
    section = create_section("Promoções de Verão")

    assert section["id"] == "promocoes-de-verao"
    assert section["position"] == 1
    assert section["visible_item_count"] == 3
    assert section["items"] == []
    assert section["active"] is True


def test_create_section_with_explicit_id(create_section):
    section = create_section("Mais vendidos", id="top-vendas")
    assert section["id"] == "top-vendas"


def test_create_appends_at_end(create_section, client, editor_headers):
    create_section("Alpha")
    create_section("Bravo")
    create_section("Charlie")

    assert _positions(client, editor_headers) == [("alpha", 1), ("bravo", 2), ("charlie", 3)]


def test_create_at_position(create_section, client, editor_headers):
    create_section("Alpha")
    create_section("Bravo")

    first = create_section("Charlie", position=1)
    last = create_section("Delta", position=500)

    assert first["position"] == 1
    assert last["position"] == 4
    assert _positions(client, editor_headers) == [
        ("charlie", 1), ("alpha", 2), ("bravo", 3), ("delta", 4),
    ]


def test_create_duplicate_id_is_conflict(create_section, client, editor_headers):
    create_section("Alpha")

    response = client.post(SECTIONS, json=section_body("Alpha"), headers=editor_headers)

    assert response.status_code == 409
    assert _positions(client, editor_headers) == [("alpha", 1)]


def test_create_with_unsluggable_title(client, editor_headers):
    response = client.post(SECTIONS, json=section_body("!!!"), headers=editor_headers)

    assert response.status_code == 400
    assert response.get_json()["details"][0]["field"] == "id"


def test_create_validation_details(client, editor_headers):
    response = client.post(
        SECTIONS,
        json=section_body("Ok", layout_kind="carousel"),
        headers=editor_headers,
    )

    body = response.get_json()
    assert response.status_code == 400
    assert body["error"] == "ValidationError"
    assert {issue["field"] for issue in body["details"]} == {"title", "layout_kind"}


def test_create_rejects_script_href(client, editor_headers):
    response = client.post(
        SECTIONS,
        json=section_body("Ofertas", cta_href="javascript:alert(1)"),
        headers=editor_headers,
    )

    assert response.status_code == 400
    assert response.get_json()["details"][0]["field"] == "cta_href"


def test_create_sanitizes_config(create_section):
    section = create_section("Ofertas", config={"badgeLabel": "Novo", "style": "x"})
    assert section["config"] == {"badgeLabel": "Novo"}


def test_create_without_body(client, editor_headers):
    response = client.post(SECTIONS, headers=editor_headers)
    assert response.status_code == 400


def test_create_records_activity(create_section):
    create_section("Alpha")

    log = ActivityLog.query.filter_by(action="homepage_section_created").one()
    assert log.actor_id == "user-1"
    assert log.resource_id == "alpha"
    assert log.new_values["position"] == 1


# ------------------------
# Read / list / cache
# ------------------------
def test_get_section(create_section, client, editor_headers):
    create_section("Alpha")

    response = client.get(f"{SECTIONS}/alpha", headers=editor_headers)

    assert response.status_code == 200
    assert response.get_json()["section"]["title"] == "Alpha"


def test_get_unknown_section(client, editor_headers):
    response = client.get(f"{SECTIONS}/nope", headers=editor_headers)
    assert response.status_code == 404


def test_list_is_served_from_cache(create_section, client, editor_headers, monkeypatch):
    create_section("Alpha")
    client.get(SECTIONS, headers=editor_headers)

    loads = []
    original = homepage_cache._loader
    monkeypatch.setattr(homepage_cache, "_loader", lambda: loads.append(1) or original())

    # appended to the cached list without a reload
    create_section("Bravo")
    body = client.get(SECTIONS, headers=editor_headers).get_json()

    assert [s["id"] for s in body["sections"]] == ["alpha", "bravo"]
    assert body["is_loading"] is False
    assert body["error"] is None
    assert loads == []


def test_list_returns_503_when_first_load_fails(client, editor_headers, monkeypatch):
    def broken():
        raise RuntimeError("database down")

    monkeypatch.setattr(homepage_cache, "_loader", broken)

    response = client.get(SECTIONS, headers=editor_headers)

    assert response.status_code == 503
    assert response.get_json()["error"] == "GatewayError"


def test_stale_sections_survive_failed_refresh(create_section, client, editor_headers, monkeypatch):
    create_section("Alpha")
    client.get(SECTIONS, headers=editor_headers)

    def broken():
        raise RuntimeError("database down")

    monkeypatch.setattr(homepage_cache, "_loader", broken)

    response = client.get(f"{SECTIONS}?refresh=1", headers=editor_headers)
    body = response.get_json()

    assert response.status_code == 200
    assert [s["id"] for s in body["sections"]] == ["alpha"]
    assert body["error"] == "database down"


def test_cache_control(create_section, client, editor_headers):
    create_section("Alpha")
    cache_url = f"{API}/homepage-cache"

    refreshed = client.post(cache_url, headers=editor_headers).get_json()
    assert [s["id"] for s in refreshed["sections"]] == ["alpha"]

    client.delete(cache_url, headers=editor_headers)
    assert homepage_cache.state.sections is None

    view = client.get(cache_url, headers=editor_headers).get_json()
    assert view["sections"] == []
    assert view["is_fetching"] is False


# ------------------------
# Update
# ------------------------
def test_update_section(create_section, client, editor_headers):
    create_section("Alpha")

    response = client.put(
        f"{SECTIONS}/alpha",
        json=section_body("Alpha renovado", background="gray", cta_href="/a b"),
        headers=editor_headers,
    )

    section = response.get_json()["section"]
    assert response.status_code == 200
    assert section["title"] == "Alpha renovado"
    assert section["background"] == "gray"
    assert section["cta_href"] == "/ab"
    assert section["position"] == 1


def test_update_position_goes_through_engine(create_section, client, editor_headers):
    for title in ("Alpha", "Bravo", "Charlie"):
        create_section(title)

    response = client.put(
        f"{SECTIONS}/alpha",
        json=section_body("Alpha", position=3),
        headers=editor_headers,
    )

    assert response.get_json()["section"]["position"] == 3
    assert _positions(client, editor_headers) == [("bravo", 1), ("charlie", 2), ("alpha", 3)]


def test_update_with_stale_if_unmodified_since(create_section, client, editor_headers):
    create_section("Alpha")

    response = client.put(
        f"{SECTIONS}/alpha",
        json=section_body("Alpha 2"),
        headers={**editor_headers, "If-Unmodified-Since": "Mon, 01 Jan 2001 00:00:00 GMT"},
    )

    assert response.status_code == 409


def test_update_with_fresh_if_unmodified_since(create_section, client, editor_headers):
    create_section("Alpha")

    response = client.put(
        f"{SECTIONS}/alpha",
        json=section_body("Alpha 2"),
        headers={**editor_headers, "If-Unmodified-Since": "Fri, 01 Jan 2100 00:00:00 GMT"},
    )

    assert response.status_code == 200


def test_update_with_malformed_if_unmodified_since(create_section, client, editor_headers):
    create_section("Alpha")

    response = client.put(
        f"{SECTIONS}/alpha",
        json=section_body("Alpha 2"),
        headers={**editor_headers, "If-Unmodified-Since": "not a date"},
    )

    assert response.status_code == 400
    assert response.get_json()["details"][0]["field"] == "If-Unmodified-Since"


def test_update_unknown_section(client, editor_headers):
    response = client.put(f"{SECTIONS}/nope", json=section_body("Alpha"), headers=editor_headers)
    assert response.status_code == 404


# ------------------------
# Move / reorder / delete
# ------------------------
def test_move_scenario(create_section, client, editor_headers):
    for title in ("Alpha", "Bravo", "Charlie"):
        create_section(title)

    response = client.patch(f"{SECTIONS}/charlie/reorder", json={"position": 1}, headers=editor_headers)
    assert response.status_code == 200
    assert [s["id"] for s in response.get_json()["sections"]] == ["charlie", "alpha", "bravo"]

    response = client.patch(f"{SECTIONS}/alpha/reorder", json={"position": 99}, headers=editor_headers)
    assert [(s["id"], s["position"]) for s in response.get_json()["sections"]] == [
        ("charlie", 1), ("bravo", 2), ("alpha", 3),
    ]

    # the cache was replaced with the returned list
    cached = [s["id"] for s in homepage_cache.view().sections]
    assert cached == ["charlie", "bravo", "alpha"]


def test_move_is_idempotent(create_section, client, editor_headers):
    create_section("Alpha")
    create_section("Bravo")

    for _ in range(2):
        client.patch(f"{SECTIONS}/bravo/reorder", json={"position": 1}, headers=editor_headers)

    assert _positions(client, editor_headers) == [("bravo", 1), ("alpha", 2)]


def test_move_unknown_section(client, editor_headers):
    response = client.patch(f"{SECTIONS}/nope/reorder", json={"position": 1}, headers=editor_headers)
    assert response.status_code == 404


def test_move_rejects_position_zero(create_section, client, editor_headers):
    create_section("Alpha")

    response = client.patch(f"{SECTIONS}/alpha/reorder", json={"position": 0}, headers=editor_headers)

    assert response.status_code == 400


def test_bulk_reorder(create_section, client, editor_headers):
    for title in ("Alpha", "Bravo", "Charlie"):
        create_section(title)

    response = client.post(
        f"{SECTIONS}/reorder",
        json={"moves": [{"id": "charlie", "position": 1}, {"id": "alpha", "position": 3}]},
        headers=editor_headers,
    )

    assert response.status_code == 200
    assert [s["id"] for s in response.get_json()["sections"]] == ["charlie", "bravo", "alpha"]


def test_bulk_reorder_with_unknown_id(create_section, client, editor_headers):
    create_section("Alpha")

    response = client.post(
        f"{SECTIONS}/reorder",
        json={"moves": [{"id": "ghost", "position": 1}]},
        headers=editor_headers,
    )

    assert response.status_code == 400
    assert _positions(client, editor_headers) == [("alpha", 1)]


def test_delete_closes_gap(create_section, client, editor_headers):
    for title in ("Alpha", "Bravo", "Charlie"):
        create_section(title)

    response = client.delete(f"{SECTIONS}/bravo", headers=editor_headers)

    assert response.status_code == 200
    assert _positions(client, editor_headers) == [("alpha", 1), ("charlie", 2)]


def test_delete_unknown_section(client, editor_headers):
    assert client.delete(f"{SECTIONS}/nope", headers=editor_headers).status_code == 404
