"""
SQLAlchemy-backed data store.

``DataStoreBase`` implements ``DataStore`` on top of a single ``Session``:
queries, unit-of-work writes and commits are forwarded to the session, and
set-based statements are issued as ORM-enabled ``update()`` / ``delete()``.

Untracked reads carry the ``datastore_untracked`` execution option. A
``do_orm_execute`` hook runs them in a throwaway session on the store's
connection and buffers the result. The instances come back detached, so they
never take part in a later flush, even when the store's own session already
tracks the same rows.
"""
from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterable, Iterator, List, Optional, Type, TypeVar

from sqlalchemy import delete, event, inspect as sa_inspect, update
from sqlalchemy.orm import ORMExecuteState, Query, Session

from datastore.abstractions import DataStore, SaveHandle, Shape, UpdateBuilder
from datastore.exceptions import DataStoreError, TransactionError
from datastore.execution import ExecutionStrategy, strategy_from_settings
from datastore.save_handle import DelegatingSaveHandle
from datastore.update_builder import SqlAlchemyUpdateBuilder

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

UNTRACKED_OPTION = "datastore_untracked"


def _detach_untracked_results(orm_execute_state: ORMExecuteState):
    if (
        not orm_execute_state.is_select
        or orm_execute_state.is_column_load
        or orm_execute_state.is_relationship_load
        or not orm_execute_state.execution_options.get(UNTRACKED_OPTION, False)
    ):
        return None
    session = orm_execute_state.session
    # same connection, so the read sees the open transaction
    connection = session.connection(bind_arguments=orm_execute_state.bind_arguments)
    scratch = Session(bind=connection, autoflush=False)
    try:
        frozen = scratch.execute(
            orm_execute_state.statement,
            orm_execute_state.parameters,
            execution_options=orm_execute_state.local_execution_options,
        ).freeze()
    finally:
        scratch.close()
    return frozen()


def install_untracked_reads(session: Session) -> None:
    """Register the untracked-read hook on ``session`` (idempotent)."""
    if not event.contains(session, "do_orm_execute", _detach_untracked_results):
        event.listen(session, "do_orm_execute", _detach_untracked_results)


class DataStoreBase(DataStore):
    """Generic store operations over a SQLAlchemy session.

    Subclasses typically only bind a session (see ``samples.store``); they may
    override ``get_execution_strategy`` to control how transactional units
    of work are retried.
    """

    def __init__(self, session: Session, execution_strategy: Optional[ExecutionStrategy] = None):
        self.session = session
        self._execution_strategy = execution_strategy
        self._transaction_depth = 0
        install_untracked_reads(session)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} session={self.session!r} depth={self._transaction_depth}>"

    @property
    def in_transaction_scope(self) -> bool:
        return self._transaction_depth > 0

    def get_execution_strategy(self) -> ExecutionStrategy:
        if self._execution_strategy is None:
            self._execution_strategy = strategy_from_settings()
        return self._execution_strategy

    # Reads (untracked)

    def query(self, model: Type[T]) -> Query:
        return self.session.query(model).execution_options(**{UNTRACKED_OPTION: True})

    def query_as(self, model: Type[T], *columns: Any) -> Query:
        if not columns:
            raise DataStoreError("query_as() needs at least one column to select")
        return (
            self.session.query(*columns)
            .select_from(model)
            .execution_options(**{UNTRACKED_OPTION: True})
        )

    def list_all(self, model: Type[T], shape: Optional[Shape] = None) -> List[T]:
        q = self.query(model)
        if shape is not None:
            q = shape(q)
        return q.all()

    def list_projected(self, model: Type[T], shape: Shape) -> List[Any]:
        return shape(self.query(model)).all()

    # Reads (tracked)

    def query_tracked(self, model: Type[T]) -> Query:
        return self.session.query(model)

    # Writes (instance based)

    def _save_handle(self) -> SaveHandle:
        return DelegatingSaveHandle(self.save_changes)

    def _tracked_twin(self, entity: Any) -> Optional[Any]:
        """Return another instance with the same identity already in the session."""
        key = sa_inspect(entity).key
        if key is None:
            return None
        twin = self.session.identity_map.get(key)
        if twin is None or twin is entity:
            return None
        return twin

    def add(self, entity: Any) -> SaveHandle:
        self.session.add(entity)
        return self._save_handle()

    def add_all(self, entities: Iterable[Any]) -> SaveHandle:
        self.session.add_all(list(entities))
        return self._save_handle()

    def _has_full_key(self, entity: Any) -> bool:
        _, ident, _ = sa_inspect(entity).mapper.identity_key_from_instance(entity)
        return None not in ident

    def update(self, entity: Any) -> SaveHandle:
        # a transient instance with its key set stands for an existing row
        if (sa_inspect(entity).transient and self._has_full_key(entity)) or self._tracked_twin(entity) is not None:
            self.session.merge(entity)
        else:
            self.session.add(entity)
        return self._save_handle()

    def remove(self, entity: Any) -> SaveHandle:
        state = sa_inspect(entity)
        if state.transient:
            raise DataStoreError(f"Cannot remove {type(entity).__name__}: instance was never persisted")
        if state.pending:
            # never flushed; dropping it cancels the insert
            self.session.expunge(entity)
            return self._save_handle()
        twin = self._tracked_twin(entity)
        self.session.delete(twin if twin is not None else entity)
        return self._save_handle()

    # Set-based server operations

    def _execute_set_based(self, statement, verb: str, model: type) -> int:
        try:
            result = self.session.execute(statement)
            if not self.in_transaction_scope:
                self.session.commit()
        except Exception:
            if not self.in_transaction_scope:
                self.session.rollback()
            raise
        affected = result.rowcount
        logger.debug("bulk %s on %s affected %d row(s)", verb, model.__name__, affected)
        return affected

    def execute_delete(self, model: Type[T], predicate: Any) -> int:
        return self._execute_set_based(delete(model).where(predicate), "delete", model)

    def execute_update(
        self,
        model: Type[T],
        predicate: Any,
        build: Callable[[UpdateBuilder], Any],
    ) -> int:
        builder = SqlAlchemyUpdateBuilder(model)
        build(builder)
        statement = update(model).where(predicate).values(builder.build())
        return self._execute_set_based(statement, "update", model)

    # Unit of work / transactions

    def _pending_count(self) -> int:
        session = self.session
        modified = sum(1 for obj in session.dirty if session.is_modified(obj))
        return len(session.new) + len(session.deleted) + modified

    def save_changes(self) -> int:
        written = self._pending_count()
        if self.in_transaction_scope:
            self.session.flush()
            return written
        try:
            self.session.commit()
        except Exception:
            logger.warning("save_changes failed; rolling back session")
            self.session.rollback()
            raise
        logger.debug("committed %d change(s)", written)
        return written

    @contextmanager
    def transaction(self) -> Iterator["DataStoreBase"]:
        """Scope a block in one transaction.

        Nested scopes join the outermost one. Unlike ``in_transaction`` the
        block is never retried.
        """
        outermost = not self.in_transaction_scope
        self._transaction_depth += 1
        try:
            yield self
            if outermost:
                self.session.flush()
                self.session.commit()
                logger.debug("transaction committed")
        except BaseException:
            if outermost:
                logger.warning("transaction rolled back")
                self.session.rollback()
            raise
        finally:
            self._transaction_depth -= 1

    def _invoke(self, work: Callable[["DataStoreBase"], R]) -> R:
        result = work(self)
        if asyncio.iscoroutine(result):
            result.close()
            raise TransactionError("in_transaction() needs a synchronous callable; work returned a coroutine")
        return result

    def in_transaction(self, work: Callable[["DataStoreBase"], R]) -> R:
        if self.in_transaction_scope:
            return self._invoke(work)

        def attempt() -> R:
            logger.debug("starting transactional unit of work")
            with self.transaction():
                return self._invoke(work)

        return self.get_execution_strategy().execute(attempt)
