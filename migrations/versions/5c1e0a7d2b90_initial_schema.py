"""initial schema

Revision ID: 5c1e0a7d2b90
Revises:
Create Date: 2026-10-19 09:12:44.318204

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op

from boardwatch.db.bootstrap import ensure_schema

# revision identifiers, used by Alembic.
revision: str = "5c1e0a7d2b90"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users, requests, vehicle_positions and line_demand.

    Delegates to the startup bootstrap so databases already shaped by it
    upgrade cleanly.
    """
    ensure_schema(op.get_bind())


def downgrade() -> None:
    """Drop every table created by :func:`upgrade`."""
    for table in ("requests", "vehicle_positions", "line_demand", "users"):
        op.drop_table(table)
