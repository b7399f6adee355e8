from catalog_admin.extensions import db
from .base import BaseModel


class Product(BaseModel):
    """Catalog product. Only read here, to embed a summary in section items."""

    __tablename__ = "products"

    name = db.Column(db.String(200), nullable=True)
    slug = db.Column(db.String(200), nullable=False, unique=True, index=True)
    price = db.Column(db.Numeric(10, 2), nullable=True)
    unit = db.Column(db.String(40), nullable=True)
    image_url = db.Column(db.String(512), nullable=True)
    category = db.Column(db.String(80), nullable=True, index=True)

    def to_summary(self):
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "price": self.price,
            "unit": self.unit,
            "image_url": self.image_url,
            "category": self.category,
        }
