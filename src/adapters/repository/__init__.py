"""Repository adapters - Database and in-memory implementations."""

from .memory import InMemoryQuestionStore, InMemoryUserDirectory
from .postgres import PostgresQuestionStore, PostgresUserDirectory, run_migrations

__all__ = [
    "InMemoryQuestionStore",
    "InMemoryUserDirectory",
    "PostgresQuestionStore",
    "PostgresUserDirectory",
    "run_migrations",
]
