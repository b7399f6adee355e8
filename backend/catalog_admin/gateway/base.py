"""
Persistence gateway interface.

The homepage core never talks to storage directly. Gateways hand back plain
dict records using the persisted field names (``sort_order``, ``layout_type``
...); the normalizers turn those into view models.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from catalog_admin.domain.ordering import PositionWrite

Record = Dict[str, Any]


class PersistenceGateway(ABC):

    # ------------------------
    # Sections
    # ------------------------
    @abstractmethod
    def list_sections(self) -> List[Record]:
        """All sections ordered by position, items and products embedded."""
        raise NotImplementedError

    @abstractmethod
    def get_section(self, section_id: str) -> Optional[Record]:
        raise NotImplementedError

    @abstractmethod
    def insert_section(self, payload: Record) -> Record:
        """May raise ConflictError if the id is already taken."""
        raise NotImplementedError

    @abstractmethod
    def update_section(self, section_id: str, payload: Record) -> Record:
        raise NotImplementedError

    @abstractmethod
    def delete_section(self, section_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def rewrite_section_positions(self, writes: Sequence[PositionWrite]) -> None:
        """All-or-nothing."""
        raise NotImplementedError

    # ------------------------
    # Items
    # ------------------------
    @abstractmethod
    def list_items(self, section_id: str) -> List[Record]:
        """Items of one section ordered by position, then creation time."""
        raise NotImplementedError

    @abstractmethod
    def get_item(self, section_id: str, item_id: str) -> Optional[Record]:
        raise NotImplementedError

    @abstractmethod
    def insert_item(self, section_id: str, payload: Record) -> Record:
        raise NotImplementedError

    @abstractmethod
    def update_item(self, section_id: str, item_id: str, payload: Record) -> Record:
        raise NotImplementedError

    @abstractmethod
    def delete_item(self, section_id: str, item_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def rewrite_item_positions(self, section_id: str, writes: Sequence[PositionWrite]) -> None:
        """All-or-nothing, scoped to ``section_id``."""
        raise NotImplementedError

    # ------------------------
    # Products
    # ------------------------
    @abstractmethod
    def find_product_by_id(self, product_id: str) -> Optional[Record]:
        raise NotImplementedError
