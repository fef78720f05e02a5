"""Integration tests over an in-memory SQLite database."""
