"""
Exception types raised by the data store layer.

Errors coming from SQLAlchemy itself (IntegrityError, OperationalError, ...)
are propagated unchanged; these cover misuse of the store API.
"""


class DataStoreError(Exception):
    """Base class for data store errors."""


class UpdateBuilderError(DataStoreError, ValueError):
    """Raised when a bulk update assignment cannot be translated."""


class TransactionError(DataStoreError):
    """Raised when a transaction scope is used incorrectly."""
