"""
List view logic: search and confirmed deletion.

The confirmation prompt is passed in, so the web UI can use a
confirmation page, the CLI an interactive prompt, and tests a plain
function.
"""

import logging
from typing import Callable, List

from .models import Record
from .repository import RecordRepository

logger = logging.getLogger(__name__)

DELETE_PROMPT = "Are you sure you want to delete this company?"

Confirm = Callable[[Record], bool]


class ListView:
    def __init__(self, repository: RecordRepository, confirm: Confirm):
        self.repository = repository
        self.confirm = confirm

    def show(self, query: str = "") -> List[Record]:
        """Records matching ``query`` by company name, email or phone."""
        return self.repository.search(query)

    def delete(self, record_id: str) -> bool:
        """
        Delete a record once the user confirms.

        Returns:
            True if the record was deleted; False if it does not exist or
            the user declined.
        """
        record = self.repository.find_by_id(record_id)
        if record is None:
            return False
        if not self.confirm(record):
            logger.debug(f"Deletion of {record_id} declined")
            return False
        return self.repository.remove(record_id)
