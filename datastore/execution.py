"""
Execution strategies for transactional units of work.

A strategy decides whether a whole unit of work is run again after a
failure. The default runs it exactly once; ``RetryingExecutionStrategy``
re-runs it when the database reports a transient (connection level) error.
"""
from __future__ import annotations

import logging
import time
from typing import Callable, Optional, TypeVar

from sqlalchemy.exc import DBAPIError, OperationalError

from datastore.config import Settings, get_settings

logger = logging.getLogger(__name__)

R = TypeVar("R")


class ExecutionStrategy:
    """Runs an operation once."""

    def execute(self, operation: Callable[[], R]) -> R:
        return operation()


class RetryingExecutionStrategy(ExecutionStrategy):
    """Re-runs an operation after transient database errors.

    The operation must be safe to repeat from scratch: the data store rolls
    back the failed attempt before the strategy calls it again.
    """

    def __init__(
        self,
        max_retries: int = 3,
        retry_delay: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_retries < 0:
            raise ValueError("max_retries must not be negative")
        if retry_delay < 0:
            raise ValueError("retry_delay must not be negative")
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._sleep = sleep

    def is_transient(self, error: BaseException) -> bool:
        if isinstance(error, DBAPIError) and error.connection_invalidated:
            return True
        return isinstance(error, OperationalError)

    def execute(self, operation: Callable[[], R]) -> R:
        attempt = 0
        while True:
            try:
                return operation()
            except DBAPIError as exc:
                if attempt >= self.max_retries or not self.is_transient(exc):
                    raise
                attempt += 1
                logger.warning(
                    "Transient database error, retrying unit of work (%d/%d): %s",
                    attempt,
                    self.max_retries,
                    exc.orig if exc.orig is not None else exc,
                )
                if self.retry_delay:
                    self._sleep(self.retry_delay)


def strategy_from_settings(settings: Optional[Settings] = None) -> ExecutionStrategy:
    settings = settings or get_settings()
    if settings.max_retries > 0:
        return RetryingExecutionStrategy(settings.max_retries, settings.retry_delay)
    return ExecutionStrategy()
