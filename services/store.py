"""
Storage Helpers

Atomic insert-or-replace primitives on top of the dialect's
INSERT ... ON CONFLICT, plus translation of storage errors.
"""

import logging
from contextlib import contextmanager

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError

from models import db
from .errors import UpstreamFailure

logger = logging.getLogger(__name__)

_DIALECT_INSERTS = {
    'postgresql': postgresql.insert,
    'sqlite': sqlite.insert,
}


def _insert_for(model):
    dialect = db.session.get_bind().dialect.name
    try:
        return _DIALECT_INSERTS[dialect](model)
    except KeyError:
        raise UpstreamFailure(f'Upsert is not supported on {dialect}') from None


def upsert(model, values, conflict_columns, update_columns):
    """
    Insert a row or, if the unique key already exists, overwrite update_columns.

    Runs as a single INSERT ... ON CONFLICT DO UPDATE statement so concurrent
    writers for the same key resolve last-writer-wins in the database.
    """
    stmt = _insert_for(model).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=conflict_columns,
        set_={col: stmt.excluded[col] for col in update_columns},
    )
    db.session.execute(stmt)


def insert_ignore(model, values, conflict_columns):
    """
    Insert a row unless one with the same unique key already exists.

    Returns True when this call inserted the row.
    """
    stmt = _insert_for(model).values(**values)
    stmt = stmt.on_conflict_do_nothing(index_elements=conflict_columns)
    return db.session.execute(stmt).rowcount > 0


@contextmanager
def storage_errors(action):
    """Commit on success; roll back and raise UpstreamFailure on storage errors."""
    try:
        yield
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Storage error while %s", action)
        raise UpstreamFailure(f'Could not {action}') from e
