"""
Record repository for Company Manager.

Every operation reloads the collection from the slot storage and writes
the whole collection back when it changes. Nothing is cached between
calls, so all mutations must come from one thread of control.
"""

import logging
from typing import List, Optional, Sequence, Set

from .errors import RecordNotFoundError
from .models import Record
from .storage import SlotStorage

logger = logging.getLogger(__name__)

# Record attributes matched by the list view search box
SEARCH_FIELDS = ("company_name", "company_email", "company_phone")


class RecordRepository:
    """Find, insert, replace, remove and search records."""

    def __init__(self, storage: SlotStorage):
        self.storage = storage

    def list_all(self) -> List[Record]:
        return self.storage.load_all()

    def existing_ids(self) -> Set[str]:
        return {r.id for r in self.storage.load_all()}

    def find_by_id(self, record_id: str) -> Optional[Record]:
        """Return the first record with ``record_id``, or None."""
        for record in self.storage.load_all():
            if record.id == record_id:
                return record
        return None

    def insert(self, record: Record) -> None:
        records = self.storage.load_all()
        records.append(record)
        self.storage.save_all(records)
        logger.info(f"Inserted record {record.id} ({record.company_name})")

    def replace(self, record_id: str, record: Record) -> None:
        """
        Overwrite the record with ``record_id`` in place.

        Raises:
            RecordNotFoundError: If no record has that id.
        """
        records = self.storage.load_all()
        for idx, existing in enumerate(records):
            if existing.id == record_id:
                records[idx] = record
                self.storage.save_all(records)
                logger.info(f"Replaced record {record_id}")
                return
        raise RecordNotFoundError(record_id)

    def remove(self, record_id: str) -> bool:
        """
        Remove the record with ``record_id``.

        Returns:
            True if a record was removed, False if none matched.
        """
        records = self.storage.load_all()
        kept = [r for r in records if r.id != record_id]
        if len(kept) == len(records):
            logger.debug(f"Remove ignored, no record {record_id}")
            return False
        self.storage.save_all(kept)
        logger.info(f"Removed record {record_id}")
        return True

    def search(self, query: str, fields: Sequence[str] = SEARCH_FIELDS) -> List[Record]:
        """
        Case-insensitive substring search over ``fields``.

        An empty (or all-whitespace) query returns every record. Order is
        the stored order.
        """
        records = self.storage.load_all()
        q = (query or "").strip().lower()
        if not q:
            return records
        return [
            r for r in records
            if any(q in str(getattr(r, f, "") or "").lower() for f in fields)
        ]
