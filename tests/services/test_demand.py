"""Tests for per-line demand counters."""

import pytest

from boardwatch.core.errors import InvalidInputError
from boardwatch.services.demand import DemandCounter


def test_increment_creates_and_counts(db_session) -> None:
    counter = DemandCounter(db_session)

    counter.increment("Centro")
    counter.increment(" centro ")
    db_session.commit()

    assert counter.get("CENTRO") == 2
    assert [(row.line_id, row.total_confirmations) for row in counter.all()] == [("centro", 2)]


def test_ensure_does_not_reset_existing_counter(db_session) -> None:
    counter = DemandCounter(db_session)
    counter.increment("A")
    counter.ensure("A")
    counter.ensure("B")
    db_session.commit()

    assert counter.get("A") == 1
    assert counter.get("B") == 0
    assert counter.get("never-seen") == 0


def test_uncommitted_increment_is_discarded_on_rollback(db_session) -> None:
    counter = DemandCounter(db_session)
    counter.increment("A")
    db_session.rollback()

    assert counter.get("A") == 0


def test_blank_line_is_rejected(db_session) -> None:
    with pytest.raises(InvalidInputError):
        DemandCounter(db_session).increment("   ")
