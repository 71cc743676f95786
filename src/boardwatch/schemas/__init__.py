"""Pydantic schemas for the Boardwatch API."""
