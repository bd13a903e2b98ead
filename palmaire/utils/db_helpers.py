"""
Database Helper Utilities for Concurrency Control

Provides:
- Database dialect detection (PostgreSQL vs SQLite)
- Row locking for check-then-insert sequences (holds, bookings)
"""

import logging
from typing import Optional, TypeVar, Type
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

T = TypeVar('T')


def dialect_name(db: Session) -> str:
    bind = db.get_bind()
    return bind.dialect.name if bind is not None else ""


def is_postgres(db: Session) -> bool:
    """Check if the database is PostgreSQL"""
    return dialect_name(db) == 'postgresql'


def is_sqlite(db: Session) -> bool:
    """Check if the database is SQLite"""
    return dialect_name(db) == 'sqlite'


def acquire_row_lock(
    db: Session,
    model: Type[T],
    filter_condition,
    nowait: bool = False
) -> Optional[T]:
    """
    Acquire a row-level lock on a database record.

    On PostgreSQL this issues SELECT ... FOR UPDATE and holds the lock until
    the surrounding transaction commits or rolls back. SQLite has no row
    locks, so the row is simply loaded.

    Args:
        db: Database session
        model: SQLAlchemy model class
        filter_condition: Filter to find the row
        nowait: If True, raise immediately if the lock is unavailable (PostgreSQL only)

    Returns:
        The locked model instance, or None if not found

    Example:
        unit = acquire_row_lock(db, Unit, Unit.id == unit_id)
    """
    query = db.query(model).filter(filter_condition)

    if is_postgres(db):
        query = query.with_for_update(nowait=nowait)
    else:
        logger.debug("Row locking not supported on %s, loading %s unlocked", dialect_name(db), model.__name__)

    return query.first()
