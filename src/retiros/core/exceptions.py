"""
Custom exceptions for the retreat finance ledger.
"""


class RetirosError(Exception):
    """Base exception for retreat ledger errors."""
    pass


class InputValidationError(RetirosError):
    """Raised when input data fails field constraints."""
    pass


class StorageError(RetirosError):
    """Raised when the database engine fails to run a query."""
    pass


class DataIntegrityError(RetirosError):
    """Raised when a stored row holds an unparseable id or unknown enum label."""
    pass


class DateFormatError(RetirosError):
    """Raised when a stored timestamp matches none of the known formats."""
    pass


class NotFoundError(RetirosError):
    """Raised by callers when a requested record does not exist."""

    def __init__(self, entity: str, identifier: object = None):
        self.entity = entity
        self.identifier = identifier
        message = f"{entity} not found"
        if identifier is not None:
            message = f"{message}: {identifier}"
        super().__init__(message)
