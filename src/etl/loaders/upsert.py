"""Dialect-aware upsert statements.

PostgreSQL and SQLite use ``INSERT ... ON CONFLICT``; MySQL uses
``INSERT ... ON DUPLICATE KEY UPDATE``.
"""

from collections.abc import Sequence
from typing import Any

from sqlalchemy.dialects import mysql, postgresql, sqlite

from src.database.models import Base
from src.etl.errors import ConfigurationError

_ON_CONFLICT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def build_upsert(
    dialect: str,
    model: type[Base],
    values: dict[str, Any],
    key_columns: Sequence[str],
    update_columns: Sequence[str] = (),
):
    """Build an insert that updates or ignores on key conflict.

    Args:
        dialect: Engine dialect name.
        model: Target ORM model.
        values: Column values for one row.
        key_columns: Primary key columns.
        update_columns: Columns overwritten on conflict. Empty means
            insert-or-ignore.

    Returns:
        Executable insert statement.

    Raises:
        ConfigurationError: For dialects without a known upsert form.
    """
    if dialect in _ON_CONFLICT_INSERTS:
        stmt = _ON_CONFLICT_INSERTS[dialect](model).values(**values)
        if not update_columns:
            return stmt.on_conflict_do_nothing(index_elements=list(key_columns))
        return stmt.on_conflict_do_update(
            index_elements=list(key_columns),
            set_={column: stmt.excluded[column] for column in update_columns},
        )

    if dialect == "mysql":
        stmt = mysql.insert(model).values(**values)
        # Reassigning a key column to itself is MySQL's insert-or-ignore
        columns = update_columns or key_columns[:1]
        return stmt.on_duplicate_key_update(
            {column: stmt.inserted[column] for column in columns}
        )

    raise ConfigurationError(f"No upsert statement available for dialect '{dialect}'")
