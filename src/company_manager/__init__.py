"""
Company Manager - local records of companies and their employees.

This package provides:
- A typed record model with skills and education entries
- Slot storage of the whole collection in a local SQLite file
- Form validation and a create/edit form controller
- A Flask web UI and a `cmgr` command line
"""

__version__ = "1.0.0"
__author__ = "Company Manager Contributors"

from .models import Education, Record, Skill
from .repository import RecordRepository
from .storage import SlotStorage, init_db
from .validator import validate_form

__all__ = [
    # Models
    "Record",
    "Skill",
    "Education",
    # Storage
    "SlotStorage",
    "RecordRepository",
    "init_db",
    # Validation
    "validate_form",
    # Version
    "__version__",
]
