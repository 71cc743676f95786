"""Idempotent schema bootstrap.

Runs once at process start (and from the initial Alembic revision). Every
step inspects the live schema before touching it, so running the routine
against an already-correct database is a no-op.
"""

from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Connection, Engine

from boardwatch.db.session import Base

logger = logging.getLogger(__name__)


def ensure_schema(bind: Engine | Connection) -> list[str]:
    """Create missing tables and indexes.

    Args:
        bind: Engine or connection to bootstrap.

    Returns:
        Human-readable descriptions of the steps that changed the schema; an
        empty list when the schema was already complete.
    """
    applied: list[str] = []
    for table in Base.metadata.sorted_tables:
        inspector = inspect(bind)
        if not inspector.has_table(table.name):
            table.create(bind=bind)
            applied.append(f"create table {table.name}")
            logger.info("Created table %s", table.name)
            continue

        existing = {index["name"] for index in inspector.get_indexes(table.name)}
        for index in sorted(table.indexes, key=lambda idx: idx.name or ""):
            if index.name in existing:
                continue
            index.create(bind=bind)
            applied.append(f"create index {index.name}")
            logger.info("Created index %s on %s", index.name, table.name)

    if not applied:
        logger.debug("Schema already up to date")
    return applied
