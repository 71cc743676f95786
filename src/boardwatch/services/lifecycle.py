"""Per-user boarding request state machine.

States run ``NoRequest -> Requested -> Confirmed``. Each user owns a single
row in ``requests``; the unique index on ``user_id`` is what enforces that,
through an upsert on conflict rather than application-level locking.

Confirmation is a compare-and-swap on ``requested`` followed by the demand
increment, both inside one transaction. A concurrent second confirmation
either sees the row already confirmed (duplicate success, no increment) or
hits a serialization failure, which is retried once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import select, update
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from boardwatch.core.errors import (
    ConflictError,
    InvalidInputError,
    NoActiveRequestError,
    NotFoundError,
)
from boardwatch.db.time import utcnow
from boardwatch.db.upsert import insert_for
from boardwatch.models import BoardingRequest
from boardwatch.services.demand import DemandCounter

__all__ = ["ConfirmationResult", "RequestLifecycleManager"]

logger = logging.getLogger(__name__)

# SQLSTATE serialization_failure and deadlock_detected.
_RETRYABLE_SQLSTATES = frozenset({"40001", "40P01"})


def _is_serialization_failure(exc: DBAPIError) -> bool:
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code in _RETRYABLE_SQLSTATES:
        return True
    return "database is locked" in str(orig).lower()


def _required(name: str, value: str | None) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise InvalidInputError(f"{name} is required")
    return cleaned


@dataclass(frozen=True)
class ConfirmationResult:
    """Outcome of :meth:`RequestLifecycleManager.confirm`."""

    request: BoardingRequest
    # False when the row was already confirmed and nothing changed.
    newly_confirmed: bool


class RequestLifecycleManager:
    """Create, read and confirm the single boarding request of each user."""

    def __init__(self, session: Session, demand: DemandCounter | None = None) -> None:
        self.session = session
        self.demand = demand or DemandCounter(session)

    def create_or_replace(self, user_id: str, origin: str, line_id: str) -> int:
        """Upsert the user's request row and force it back to ``Requested``.

        An existing row, confirmed or not, is overwritten in place. Replacing
        an unconfirmed request is silent.

        Returns:
            The id of the user's row.
        """
        origin = _required("origin", origin)
        line_id = _required("line_id", line_id)
        now = utcnow()

        stmt = insert_for(self.session, BoardingRequest).values(
            user_id=user_id,
            origin=origin,
            line_id=line_id,
            requested=True,
            created_at=now,
            confirmed_at=None,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id"],
            set_={
                "origin": stmt.excluded.origin,
                "line_id": stmt.excluded.line_id,
                "requested": True,
                "created_at": stmt.excluded.created_at,
                "confirmed_at": None,
            },
        )
        try:
            self.session.execute(stmt)
            request_id = self.session.scalar(
                select(BoardingRequest.id).where(BoardingRequest.user_id == user_id)
            )
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        # The upsert bypasses the identity map; drop any cached copy of the row.
        self.session.expire_all()
        logger.info("Boarding request %s recorded for user %s on line %s", request_id, user_id, line_id)
        return int(request_id)

    def get_current(self, user_id: str) -> BoardingRequest:
        """Return the user's row, whether requested or confirmed.

        Raises:
            NotFoundError: If the user has no row.
        """
        request = self.session.scalar(
            select(BoardingRequest).where(BoardingRequest.user_id == user_id)
        )
        if request is None:
            raise NotFoundError("No boarding request found")
        return request

    def confirm(self, user_id: str, line_id: str) -> ConfirmationResult:
        """Mark the user's request confirmed and count one boarding on ``line_id``.

        Both effects commit together or not at all. A serialization failure is
        retried once before surfacing as :class:`ConflictError`.

        Raises:
            InvalidInputError: If ``line_id`` is blank.
            NoActiveRequestError: If the user has no request row.
            ConflictError: If the transaction could not be serialized twice in a row.
        """
        line_id = _required("line_id", line_id)
        for attempt in (1, 2):
            try:
                return self._confirm_once(user_id, line_id)
            except DBAPIError as exc:
                if not _is_serialization_failure(exc):
                    raise
                if attempt == 2:
                    raise ConflictError("Confirmation conflicted with a concurrent update") from exc
                logger.warning(
                    "Serialization failure confirming request for user %s; retrying once",
                    user_id,
                )
        raise AssertionError("unreachable")  # pragma: no cover

    def _confirm_once(self, user_id: str, line_id: str) -> ConfirmationResult:
        try:
            swapped = self.session.execute(
                update(BoardingRequest)
                .where(
                    BoardingRequest.user_id == user_id,
                    BoardingRequest.requested.is_(True),
                )
                .values(requested=False, confirmed_at=utcnow())
                .execution_options(synchronize_session=False)
            ).rowcount
            if swapped:
                self.demand.increment(line_id)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        self.session.expire_all()
        request = self.session.scalar(
            select(BoardingRequest).where(BoardingRequest.user_id == user_id)
        )
        if request is None:
            raise NoActiveRequestError("No active boarding request to confirm")
        if swapped:
            logger.info("Boarding confirmed for user %s on line %s", user_id, line_id)
        else:
            logger.info("Duplicate confirmation for user %s ignored", user_id)
        return ConfirmationResult(request=request, newly_confirmed=bool(swapped))
