"""
SQLite slot storage for Company Manager.

The whole record collection lives as one JSON array under a single
string key (the "slot") in a ``slot`` table. Reads fail soft: an absent,
empty or malformed slot is an empty collection. Writes replace the whole
slot.
"""

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional

from .config import DEFAULT_SLOT
from .errors import StorageError, ValidationError
from .models import Record

logger = logging.getLogger(__name__)


def _utcnow() -> str:
    """Return current UTC time as ISO format string."""
    return datetime.now(timezone.utc).isoformat()


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS slot (
    key TEXT PRIMARY KEY,
    value TEXT,
    updated_at TEXT NOT NULL
);
"""


def init_db(db_path: Path) -> Path:
    """
    Create the database file and schema if missing.

    Args:
        db_path: Path to the database file.

    Returns:
        Path to the database.

    Raises:
        StorageError: If the database cannot be created.
    """
    db_path = Path(db_path)
    try:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(db_path))
        try:
            conn.executescript(SCHEMA_SQL)
            conn.commit()
        finally:
            conn.close()
    except (OSError, sqlite3.Error) as e:
        raise StorageError(f"Cannot initialize database {db_path}: {e}")
    logger.debug(f"Database ready at {db_path}")
    return db_path


class SlotStorage:
    """Reads and writes the record collection held in one slot."""

    def __init__(self, db_path: Path, slot: str = DEFAULT_SLOT):
        self.db_path = Path(db_path)
        self.slot = slot

    def read_raw(self) -> Optional[str]:
        """
        Return the raw slot text, or None when the slot is absent.

        Raises:
            StorageError: If the database cannot be read.
        """
        if not self.db_path.exists():
            return None
        try:
            conn = sqlite3.connect(str(self.db_path))
            try:
                row = conn.execute(
                    "SELECT value FROM slot WHERE key = ?", (self.slot,)
                ).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError(f"Cannot read slot '{self.slot}' from {self.db_path}: {e}")
        return row[0] if row else None

    def write_raw(self, text: str) -> None:
        """
        Overwrite the slot with raw text.

        Raises:
            StorageError: If the database cannot be written.
        """
        init_db(self.db_path)
        try:
            conn = sqlite3.connect(str(self.db_path))
            try:
                conn.execute(
                    "INSERT OR REPLACE INTO slot (key, value, updated_at) VALUES (?, ?, ?)",
                    (self.slot, text, _utcnow()),
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError(f"Cannot write slot '{self.slot}' to {self.db_path}: {e}")

    def load_all(self) -> List[Record]:
        """
        Load the persisted collection.

        Returns an empty list when the slot is absent, empty or not a JSON
        array, or when the database cannot be read. Entries that do not
        parse as records are skipped with a warning. Never raises.
        """
        try:
            raw = self.read_raw()
        except StorageError as e:
            logger.warning(f"{e}; treating as empty")
            return []

        if not raw:
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Slot '{self.slot}' holds invalid JSON ({e}); treating as empty")
            return []

        if data is None:
            return []
        if not isinstance(data, list):
            logger.warning(f"Slot '{self.slot}' is not a JSON array; treating as empty")
            return []

        records: List[Record] = []
        for position, item in enumerate(data):
            try:
                records.append(Record.from_dict(item))
            except ValidationError as e:
                logger.warning(f"Slot '{self.slot}' entry {position} skipped: {e}")
        return records

    def save_all(self, records: Iterable[Record]) -> None:
        """Replace the persisted collection with ``records``."""
        payload = [r.to_dict() for r in records]
        self.write_raw(json.dumps(payload, ensure_ascii=False))
        logger.debug(f"Saved {len(payload)} record(s) to slot '{self.slot}'")
