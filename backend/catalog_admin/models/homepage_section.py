from catalog_admin.extensions import db
from catalog_admin.utils.timestamps import isoformat
from .base import TimestampMixin


class HomepageSection(TimestampMixin, db.Model):
    __tablename__ = "homepage_sections"

    # slug generated from the title or supplied by the editor
    id = db.Column(db.String(60), primary_key=True)
    title = db.Column(db.String(120), nullable=False)
    subtitle = db.Column(db.String(200), nullable=True)
    layout_type = db.Column(db.String(20), nullable=False, default="grid")  # featured, grid
    bg_color = db.Column(db.String(20), nullable=False, default="white")  # white, gray
    item_limit = db.Column(db.Integer, nullable=False, default=3)
    view_all_label = db.Column(db.String(80), nullable=False)
    view_all_href = db.Column(db.String(200), nullable=False, default="/produtos")
    category_id = db.Column(db.String(80), nullable=True)
    sort_order = db.Column(db.Integer, nullable=False, default=0, index=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    config = db.Column(db.JSON, default=dict)

    items = db.relationship(
        "HomepageSectionItem",
        back_populates="section",
        order_by="HomepageSectionItem.sort_order",
        cascade="all, delete-orphan",
    )

    def __init__(self, **kwargs):
        super().__init__(**kwargs)

    def to_record(self):
        return {
            "id": self.id,
            "title": self.title,
            "subtitle": self.subtitle,
            "layout_type": self.layout_type,
            "bg_color": self.bg_color,
            "item_limit": self.item_limit,
            "view_all_label": self.view_all_label,
            "view_all_href": self.view_all_href,
            "category_id": self.category_id,
            "sort_order": self.sort_order,
            "is_active": self.is_active,
            "config": self.config,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
            "updated_by": self.updated_by,
            "items": [item.to_record() for item in self.items],
        }
