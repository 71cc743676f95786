"""Service layer for position ingestion, proximity queries and boarding requests."""
