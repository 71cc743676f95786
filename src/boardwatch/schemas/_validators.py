"""Reusable field validators."""

from __future__ import annotations


def non_blank(value: str | None) -> str | None:
    """Strip surrounding whitespace and reject strings that end up empty."""
    if value is None:
        return None
    stripped = value.strip()
    if not stripped:
        raise ValueError("must not be blank")
    return stripped
