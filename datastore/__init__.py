"""
Unified read/write store over SQLAlchemy sessions.

Application code depends on ``ReadStore`` / ``DataStore``; ``DataStoreBase``
forwards every operation to a SQLAlchemy ``Session``.
"""
from datastore.abstractions import DataStore, ReadStore, SaveHandle, UpdateBuilder
from datastore.exceptions import DataStoreError, TransactionError, UpdateBuilderError
from datastore.execution import ExecutionStrategy, RetryingExecutionStrategy
from datastore.save_handle import DelegatingSaveHandle
from datastore.store import DataStoreBase
from datastore.update_builder import SqlAlchemyUpdateBuilder

__all__ = [
    "DataStore",
    "DataStoreBase",
    "DataStoreError",
    "DelegatingSaveHandle",
    "ExecutionStrategy",
    "ReadStore",
    "RetryingExecutionStrategy",
    "SaveHandle",
    "SqlAlchemyUpdateBuilder",
    "TransactionError",
    "UpdateBuilder",
    "UpdateBuilderError",
]
