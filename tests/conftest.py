# tests/conftest.py
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from flask_jwt_extended import create_access_token

from catalog_admin import create_app
from catalog_admin.extensions import db, homepage_cache
from catalog_admin.gateway.base import PersistenceGateway
from catalog_admin.models.product import Product

API = "/api/v1/admin/content"


@pytest.fixture(scope="function")
def app():
    """Fresh app with an in-memory database for every test."""
    app = create_app("testing")

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

    homepage_cache.reset()


@pytest.fixture
def client(app):
    return app.test_client()


def _headers(role, identity="user-1"):
    token = create_access_token(identity=identity, additional_claims={"role": role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def editor_headers(app):
    return _headers("editor")


@pytest.fixture
def viewer_headers(app):
    return _headers("viewer", identity="user-2")


@pytest.fixture
def make_product(app):
    """Builds and commits a product; fields can be overridden."""
    counter = {"n": 0}

    def factory(**overrides):
        counter["n"] += 1
        product = Product()
        product.name = overrides.get("name", f"Cartao de visita {counter['n']}")
        product.slug = overrides.get("slug", f"cartao-{counter['n']}")
        product.price = overrides.get("price", Decimal("49.90"))
        product.unit = overrides.get("unit", "cento")
        product.image_url = overrides.get("image_url")
        product.category = overrides.get("category", "cartoes")

        db.session.add(product)
        db.session.commit()
        return product.id

    return factory


def section_body(title, **overrides):
    body = {
        "title": title,
        "layout_kind": "grid",
        "background": "white",
        "cta_label": "Ver todos",
        "cta_href": "/produtos",
    }
    body.update(overrides)
    return body


@pytest.fixture
def create_section(client, editor_headers):
    """POST a section through the API and return its JSON."""

    def factory(title, **overrides):
        response = client.post(
            f"{API}/homepage-sections",
            json=section_body(title, **overrides),
            headers=editor_headers,
        )
        assert response.status_code == 201, response.get_json()
        return response.get_json()["section"]

    return factory


@pytest.fixture
def section_ids(client, editor_headers):
    """Current section ids in display order."""

    def read():
        response = client.get(
            f"{API}/homepage-sections?refresh=1",
            headers=editor_headers,
        )
        return [section["id"] for section in response.get_json()["sections"]]

    return read


@pytest.fixture
def mock_gateway():
    """A gateway double with nothing stored."""
    gateway = MagicMock(spec=PersistenceGateway)
    gateway.list_sections.return_value = []
    gateway.get_section.return_value = None
    gateway.list_items.return_value = []
    gateway.find_product_by_id.return_value = None
    return gateway
