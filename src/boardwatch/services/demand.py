"""Per-line confirmed-boarding counters."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from boardwatch.core.errors import InvalidInputError
from boardwatch.db.upsert import insert_for
from boardwatch.models import LineDemandCounter
from boardwatch.services.geo import normalize_line

__all__ = ["DemandCounter"]

logger = logging.getLogger(__name__)


class DemandCounter:
    """Atomic upsert-based access to ``line_demand``.

    Methods only stage statements on the session; the caller owns the
    transaction so that counter changes commit together with the write that
    caused them.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    @staticmethod
    def _key(line_id: str) -> str:
        key = normalize_line(line_id)
        if key is None:
            raise InvalidInputError("line_id must not be blank")
        return key

    def ensure(self, line_id: str) -> None:
        """Register ``line_id`` at zero unless a counter already exists."""
        stmt = (
            insert_for(self.session, LineDemandCounter)
            .values(line_id=self._key(line_id), total_confirmations=0)
            .on_conflict_do_nothing(index_elements=["line_id"])
        )
        self.session.execute(stmt)

    def increment(self, line_id: str) -> None:
        """Add one confirmation, creating the counter at zero first if needed."""
        stmt = insert_for(self.session, LineDemandCounter).values(
            line_id=self._key(line_id), total_confirmations=1
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["line_id"],
            set_={"total_confirmations": LineDemandCounter.total_confirmations + 1},
        )
        self.session.execute(stmt)
        logger.debug("Incremented demand for line %s", line_id)

    def get(self, line_id: str) -> int:
        """Return the confirmation count for ``line_id`` (zero when unseen)."""
        total = self.session.scalar(
            select(LineDemandCounter.total_confirmations).where(
                LineDemandCounter.line_id == self._key(line_id)
            )
        )
        return int(total or 0)

    def all(self) -> list[LineDemandCounter]:
        """Return every counter ordered by line."""
        return list(
            self.session.scalars(select(LineDemandCounter).order_by(LineDemandCounter.line_id))
        )
