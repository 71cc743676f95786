"""SQLAlchemy model for per-user boarding requests."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from boardwatch.db.session import Base
from boardwatch.db.time import utcnow


class RequestState(str, enum.Enum):
    """Lifecycle states persisted for a boarding request."""

    REQUESTED = "Requested"
    CONFIRMED = "Confirmed"


class BoardingRequest(Base):
    """A rider's declared intent to board a vehicle of a line from a stop.

    At most one row exists per user. The unique index on ``user_id`` is the
    conflict target of the upsert that creates or replaces the row.
    """

    __tablename__ = "requests"
    __table_args__ = (Index("uq_requests_user_id", "user_id", unique=True),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    origin: Mapped[str] = mapped_column(Text, nullable=False)
    line_id: Mapped[str] = mapped_column(Text, nullable=False)
    # True while waiting for the rider to board; false once confirmed.
    requested: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def state(self) -> RequestState:
        return RequestState.REQUESTED if self.requested else RequestState.CONFIRMED
