"""
Bulk update builder.

Collects ``(column, value)`` assignments and turns them into the values
mapping accepted by ``sqlalchemy.update(Model).values(...)``.
"""
from __future__ import annotations

from typing import Any, Dict, List, Tuple

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm.attributes import QueryableAttribute
from sqlalchemy.sql.elements import ClauseElement

from datastore.abstractions import UpdateBuilder
from datastore.exceptions import UpdateBuilderError


def _is_sql_expression(value: Any) -> bool:
    return isinstance(value, ClauseElement) or hasattr(value, "__clause_element__")


class SqlAlchemyUpdateBuilder(UpdateBuilder):
    """Update builder bound to one mapped class."""

    def __init__(self, model: type):
        self.model = model
        self._mapper = sa_inspect(model)
        self._assignments: List[Tuple[QueryableAttribute, Any]] = []

    def __len__(self) -> int:
        return len(self._assignments)

    def _resolve_column(self, column: Any) -> QueryableAttribute:
        if isinstance(column, str):
            key = column
        elif isinstance(column, QueryableAttribute):
            owner = column.class_
            if not (owner is self.model or issubclass(self.model, owner)):
                raise UpdateBuilderError(
                    f"{owner.__name__}.{column.key} is not a column of {self.model.__name__}"
                )
            key = column.key
        else:
            raise UpdateBuilderError(
                f"Update target must be a mapped attribute or attribute name, got {column!r}"
            )
        if key not in self._mapper.column_attrs:
            raise UpdateBuilderError(f"{self.model.__name__} has no mapped column '{key}'")
        attr = getattr(self.model, key)
        if any(existing.key == key for existing, _ in self._assignments):
            raise UpdateBuilderError(f"Column '{key}' is assigned more than once")
        return attr

    def set(self, column: Any, expression: Any) -> "SqlAlchemyUpdateBuilder":
        if not _is_sql_expression(expression):
            raise UpdateBuilderError(
                f"set() expects a SQL expression, got {type(expression).__name__}; use set_const() for constants"
            )
        self._assignments.append((self._resolve_column(column), expression))
        return self

    def set_const(self, column: Any, value: Any) -> "SqlAlchemyUpdateBuilder":
        if _is_sql_expression(value):
            raise UpdateBuilderError("set_const() expects a constant value; use set() for SQL expressions")
        self._assignments.append((self._resolve_column(column), value))
        return self

    def build(self) -> Dict[QueryableAttribute, Any]:
        """Return the ``.values()`` mapping for the recorded assignments."""
        if not self._assignments:
            raise UpdateBuilderError(f"No columns assigned for bulk update of {self.model.__name__}")
        return {attr: value for attr, value in self._assignments}
