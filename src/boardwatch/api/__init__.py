"""HTTP API for Boardwatch."""
