"""Boarding request tracking and vehicle proximity service."""

__version__ = "0.1.0"
