"""Dialect-aware INSERT ... ON CONFLICT construction."""

from __future__ import annotations

from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def insert_for(db: Session, model: Any) -> Any:
    """Return an insert construct supporting ``on_conflict_do_*`` for the session's backend."""
    dialect = db.get_bind().dialect.name
    try:
        factory = _INSERTS[dialect]
    except KeyError as err:
        raise NotImplementedError(f"Upsert is not supported on {dialect!r}") from err
    return factory(model)
