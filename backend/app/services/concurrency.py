# Overview: Service-layer operations for concurrency; encapsulates business logic and database work.

from __future__ import annotations


def lock_for_update(query):
    """
    Apply row-level locking for ledger writes.

    NOTE: SQLite ignores SELECT ... FOR UPDATE and serializes writers at the
    database level instead; PostgreSQL honors it.
    """
    return query.with_for_update()
