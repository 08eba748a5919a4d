"""Database layer for the storage kernel."""
