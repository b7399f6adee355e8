from functools import wraps
from typing import Optional, Sequence

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import joinedload, selectinload

from catalog_admin.domain.exceptions import ConflictError, GatewayError, NotFoundError
from catalog_admin.domain.ordering import PositionWrite
from catalog_admin.extensions import db
from catalog_admin.models.homepage_section import HomepageSection
from catalog_admin.models.homepage_section_item import HomepageSectionItem
from catalog_admin.models.product import Product
from catalog_admin.utils.timestamps import utc_now
from catalog_admin.utils.transaction import transactional
from .base import PersistenceGateway, Record

SECTION_COLUMNS = (
    "id",
    "title",
    "subtitle",
    "layout_type",
    "bg_color",
    "item_limit",
    "view_all_label",
    "view_all_href",
    "category_id",
    "sort_order",
    "is_active",
    "config",
    "updated_by",
)

# persisted key -> model attribute
ITEM_COLUMNS = {
    "product_id": "product_id",
    "sort_order": "sort_order",
    "metadata": "item_metadata",
    "updated_by": "updated_by",
}


def translate_errors(fn):
    """Map SQLAlchemy failures onto the homepage error taxonomy."""

    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except IntegrityError as exc:
            db.session.rollback()
            raise ConflictError("The record conflicts with an existing one") from exc
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.error(f"Homepage gateway call {fn.__name__} failed: {exc}")
            raise GatewayError("Storage is unavailable, try again later") from exc

    return wrapper


class SqlAlchemyGateway(PersistenceGateway):

    # ------------------------
    # Sections
    # ------------------------
    @translate_errors
    def list_sections(self):
        sections = (
            HomepageSection.query
            .options(
                selectinload(HomepageSection.items).joinedload(HomepageSectionItem.product)
            )
            .order_by(HomepageSection.sort_order.asc())
            .all()
        )
        return [section.to_record() for section in sections]

    @translate_errors
    def get_section(self, section_id: str) -> Optional[Record]:
        section = db.session.get(HomepageSection, section_id)
        return section.to_record() if section else None

    @translate_errors
    def insert_section(self, payload: Record) -> Record:
        section = HomepageSection()
        self._assign_section(section, payload)

        now = utc_now()
        section.created_at = now
        section.updated_at = now

        with transactional():
            db.session.add(section)
            db.session.flush()

        return section.to_record()

    @translate_errors
    def update_section(self, section_id: str, payload: Record) -> Record:
        section = self._require_section(section_id)

        with transactional():
            self._assign_section(section, {k: v for k, v in payload.items() if k != "id"})
            section.updated_at = utc_now()

        return section.to_record()

    @translate_errors
    def delete_section(self, section_id: str) -> None:
        section = self._require_section(section_id)

        with transactional():
            # items go with it (delete-orphan cascade)
            db.session.delete(section)

    @translate_errors
    def rewrite_section_positions(self, writes: Sequence[PositionWrite]) -> None:
        with transactional():
            for write in writes:
                section = db.session.get(HomepageSection, write.id)
                if section is None:
                    raise NotFoundError(f"Section {write.id} not found")

                section.sort_order = write.position
                section.updated_at = write.updated_at
                section.updated_by = write.updated_by

    # ------------------------
    # Items
    # ------------------------
    @translate_errors
    def list_items(self, section_id: str):
        items = (
            HomepageSectionItem.query
            .options(joinedload(HomepageSectionItem.product))
            .filter_by(section_id=section_id)
            .order_by(
                HomepageSectionItem.sort_order.asc(),
                HomepageSectionItem.created_at.asc(),
            )
            .all()
        )
        return [item.to_record() for item in items]

    @translate_errors
    def get_item(self, section_id: str, item_id: str) -> Optional[Record]:
        item = self._find_item(section_id, item_id)
        return item.to_record() if item else None

    @translate_errors
    def insert_item(self, section_id: str, payload: Record) -> Record:
        item = HomepageSectionItem()
        item.section_id = section_id
        self._assign_item(item, payload)
        if item.item_metadata is None:
            item.item_metadata = {}

        now = utc_now()
        item.created_at = now
        item.updated_at = now

        with transactional():
            db.session.add(item)
            db.session.flush()

        return item.to_record()

    @translate_errors
    def update_item(self, section_id: str, item_id: str, payload: Record) -> Record:
        item = self._require_item(section_id, item_id)

        with transactional():
            self._assign_item(item, payload)
            item.updated_at = utc_now()

        return item.to_record()

    @translate_errors
    def delete_item(self, section_id: str, item_id: str) -> None:
        item = self._require_item(section_id, item_id)

        with transactional():
            db.session.delete(item)

    @translate_errors
    def rewrite_item_positions(self, section_id: str, writes: Sequence[PositionWrite]) -> None:
        with transactional():
            for write in writes:
                item = self._find_item(section_id, write.id)
                if item is None:
                    raise NotFoundError(f"Item {write.id} not found in section {section_id}")

                item.sort_order = write.position
                item.updated_at = write.updated_at
                item.updated_by = write.updated_by

    # ------------------------
    # Products
    # ------------------------
    @translate_errors
    def find_product_by_id(self, product_id: str) -> Optional[Record]:
        product = db.session.get(Product, product_id)
        return product.to_summary() if product else None

    # ------------------------
    # Helpers
    # ------------------------
    @staticmethod
    def _assign_section(section, payload):
        for column in SECTION_COLUMNS:
            if column in payload:
                setattr(section, column, payload[column])

    @staticmethod
    def _assign_item(item, payload):
        for key, attribute in ITEM_COLUMNS.items():
            if key in payload:
                setattr(item, attribute, payload[key])

    @staticmethod
    def _find_item(section_id, item_id):
        return HomepageSectionItem.query.filter_by(
            section_id=section_id,
            id=item_id,
        ).first()

    def _require_section(self, section_id):
        section = db.session.get(HomepageSection, section_id)
        if section is None:
            raise NotFoundError(f"Section {section_id} not found")
        return section

    def _require_item(self, section_id, item_id):
        item = self._find_item(section_id, item_id)
        if item is None:
            raise NotFoundError(f"Item {item_id} not found in section {section_id}")
        return item
