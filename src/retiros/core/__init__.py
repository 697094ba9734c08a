"""
Core functionality for the retreat ledger.
"""

from retiros.core.database import Database
from retiros.core.exceptions import (
    DataIntegrityError,
    DateFormatError,
    InputValidationError,
    NotFoundError,
    RetirosError,
    StorageError,
)

__all__ = [
    "Database",
    "RetirosError",
    "InputValidationError",
    "StorageError",
    "DataIntegrityError",
    "DateFormatError",
    "NotFoundError",
]
