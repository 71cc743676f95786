"""SQLAlchemy model for rider accounts."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from boardwatch.db.session import Base
from boardwatch.db.time import utcnow


def _new_user_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    """Rider identity; exists only to issue and validate bearer credentials."""

    __tablename__ = "users"
    __table_args__ = (Index("uq_users_cpf", "cpf", unique=True),)

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_user_id)
    # Eleven digits, formatting stripped.
    cpf: Mapped[str] = mapped_column(String(11), nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    @property
    def masked_cpf(self) -> str:
        """Return the CPF with all but the last two digits hidden."""
        return "*" * (len(self.cpf) - 2) + self.cpf[-2:]
