from catalog_admin.domain.exceptions import InvariantViolation, ValidationError
from .section import assert_positions


def assert_item_order(items):
    assert_positions(
        (item["position"] for item in items),
        label="Item positions",
    )


def assert_unique_products(items):
    seen = set()
    for item in items:
        product_id = item["product_id"]
        if product_id in seen:
            raise InvariantViolation(
                f"Product {product_id} is linked more than once in the same section"
            )
        seen.add(product_id)


def assert_product_linkable(product):
    """
    A product needs a name, a price and a unit before it can appear on the
    homepage.
    """
    missing = []
    if not product.get("name"):
        missing.append("name")
    for field in ("price", "unit"):
        if product.get(field) is None:
            missing.append(field)

    if missing:
        raise ValidationError(
            "Product needs a name, price and unit before it can be added",
            details=[
                {"field": f"product.{field}", "message": "Required"}
                for field in missing
            ],
        )
