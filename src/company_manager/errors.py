"""
Custom error types and exit codes for Company Manager.
"""

from typing import List, Optional


class CompanyManagerError(Exception):
    """Base exception for Company Manager errors."""

    exit_code = 1

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigurationError(CompanyManagerError):
    """Configuration or path-related errors."""

    exit_code = 2


class StorageError(CompanyManagerError):
    """Persisted slot could not be written."""

    exit_code = 3


class ValidationError(CompanyManagerError):
    """Record or form validation errors."""

    exit_code = 5

    def __init__(self, message: str, messages: Optional[List[str]] = None):
        super().__init__(message)
        self.messages = list(messages) if messages else [message]


class SubEntryError(ValidationError):
    """
    Rejected skill or education entry.

    Shown as a short-lived message; it never blocks the rest of the form.
    """


class RecordNotFoundError(CompanyManagerError):
    """No record with the requested id exists."""

    exit_code = 6

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Record not found: {record_id}")


# Exit codes
EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_CONFIG_ERROR = 2
EXIT_STORAGE_ERROR = 3
EXIT_VALIDATION_ERROR = 5
EXIT_NOT_FOUND = 6

