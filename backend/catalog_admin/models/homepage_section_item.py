from catalog_admin.extensions import db
from catalog_admin.utils.timestamps import isoformat
from .base import BaseModel


class HomepageSectionItem(BaseModel):
    __tablename__ = "homepage_section_items"

    section_id = db.Column(
        db.String(60),
        db.ForeignKey("homepage_sections.id", ondelete="CASCADE"),
        nullable=False,
    )
    product_id = db.Column(db.String(36), db.ForeignKey("products.id"), nullable=False)
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    # "metadata" is reserved on declarative classes
    item_metadata = db.Column("metadata", db.JSON, default=dict)

    section = db.relationship("HomepageSection", back_populates="items")
    product = db.relationship("Product", lazy="joined")

    __table_args__ = (
        db.UniqueConstraint("section_id", "product_id", name="uq_section_item_product"),
        db.Index("idx_section_item_order", "section_id", "sort_order"),
    )

    def to_record(self):
        return {
            "id": self.id,
            "section_id": self.section_id,
            "product_id": self.product_id,
            "sort_order": self.sort_order,
            "metadata": self.item_metadata,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
            "updated_by": self.updated_by,
            "product": self.product.to_summary() if self.product else None,
        }
