# Overview: Transaction and row-locking helpers shared by the ledger services.

from __future__ import annotations

from contextlib import contextmanager

from ..extensions import db


def lock_for_update(query):
    """
    Apply row-level locking for check-then-write sequences.

    NOTE: SQLite ignores SELECT ... FOR UPDATE (it serializes writers at the
    database level instead); PostgreSQL honors it.
    """
    return query.with_for_update()


@contextmanager
def unit_of_work():
    """
    One all-or-nothing transaction around a mutating service call.

    Commits when the block exits normally; on any exception every write made
    in the block is rolled back and the exception propagates. There are no
    automatic retries: a transient failure surfaces to the caller.
    """
    session = db.session
    try:
        yield session
        session.commit()
    except BaseException:
        session.rollback()
        raise
