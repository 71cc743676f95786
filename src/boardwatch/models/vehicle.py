"""SQLAlchemy model for the append-only vehicle position log."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Float, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from boardwatch.db.session import Base
from boardwatch.db.time import utcnow


class VehiclePosition(Base):
    """One GPS fix reported by a tracked vehicle.

    Rows are never updated. The current position of a vehicle is the row
    with the greatest ``recorded_at`` for its ``vehicle_id``.
    """

    __tablename__ = "vehicle_positions"
    __table_args__ = (
        Index("ix_vehicle_positions_vehicle_recorded", "vehicle_id", "recorded_at"),
        Index("ix_vehicle_positions_recorded_at", "recorded_at"),
    )

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    vehicle_id: Mapped[str] = mapped_column(Text, nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    speed_mps: Mapped[float | None] = mapped_column(Float, nullable=True)
    line_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
