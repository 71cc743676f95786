"""Per-line tally of confirmed boardings."""

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from boardwatch.db.session import Base


class LineDemandCounter(Base):
    """Confirmed-boarding count for one line.

    Created lazily at zero and only ever changed by an atomic increment.
    """

    __tablename__ = "line_demand"

    line_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    total_confirmations: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
