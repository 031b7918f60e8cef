"""
Store interfaces consumed by application code.

``ReadStore`` exposes untracked queries, ``DataStore`` adds tracked queries,
unit-of-work writes, set-based statements and transaction scoping. Services
depend on these rather than on a concrete ``Session`` so they can be
exercised with ``unittest.mock`` doubles.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, List, Optional, Type, TypeVar

from sqlalchemy.orm import Query

T = TypeVar("T")
R = TypeVar("R")

Shape = Callable[[Query], Query]


class SaveHandle(ABC):
    """Deferred-commit token returned by write operations."""

    @abstractmethod
    def save(self) -> int:
        """Persist pending changes; return the number of entities written."""


class UpdateBuilder(ABC):
    """Fluent collector of column assignments for a set-based UPDATE."""

    @abstractmethod
    def set(self, column: Any, expression: Any) -> "UpdateBuilder":
        """Assign a SQL expression evaluated by the database (``stock = stock + 1``)."""

    @abstractmethod
    def set_const(self, column: Any, value: Any) -> "UpdateBuilder":
        """Assign a constant value."""


class ReadStore(ABC):
    """Read-only access; returned instances are not tracked for changes."""

    @abstractmethod
    def query(self, model: Type[T]) -> Query:
        ...

    @abstractmethod
    def query_as(self, model: Type[T], *columns: Any) -> Query:
        """Untracked query selecting ``columns`` from ``model``."""

    @abstractmethod
    def list_all(self, model: Type[T], shape: Optional[Shape] = None) -> List[T]:
        """Materialise ``query(model)``, optionally reshaped first."""

    @abstractmethod
    def list_projected(self, model: Type[T], shape: Shape) -> List[Any]:
        """Materialise a reshaped query whose selected entities may differ from ``model``."""


class DataStore(ReadStore):
    """Read store plus change tracking, writes and transactions."""

    @abstractmethod
    def query_tracked(self, model: Type[T]) -> Query:
        ...

    @abstractmethod
    def add(self, entity: Any) -> SaveHandle:
        ...

    @abstractmethod
    def add_all(self, entities: Iterable[Any]) -> SaveHandle:
        ...

    @abstractmethod
    def update(self, entity: Any) -> SaveHandle:
        ...

    @abstractmethod
    def remove(self, entity: Any) -> SaveHandle:
        ...

    @abstractmethod
    def execute_delete(self, model: Type[T], predicate: Any) -> int:
        """Delete every row matching ``predicate``; return the affected row count."""

    @abstractmethod
    def execute_update(
        self,
        model: Type[T],
        predicate: Any,
        build: Callable[[UpdateBuilder], Any],
    ) -> int:
        """Update every row matching ``predicate`` with the assignments ``build`` records."""

    @abstractmethod
    def save_changes(self) -> int:
        ...

    @abstractmethod
    def in_transaction(self, work: Callable[["DataStore"], R]) -> R:
        """Run ``work(store)`` in one transaction; commit on success, roll back on error."""
