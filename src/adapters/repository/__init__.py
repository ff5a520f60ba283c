"""Repository adapters - Database and in-memory implementations."""

from .memory import InMemoryUserDirectory
from .postgres import PostgresUserDirectory, run_migrations

__all__ = ["InMemoryUserDirectory", "PostgresUserDirectory", "run_migrations"]
