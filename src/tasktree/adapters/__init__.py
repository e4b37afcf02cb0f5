"""Adapters module - Repository implementations for different storage backends.

This package contains concrete implementations (adapters) for the repository interface:
- memory: Process-local storage
- sqlite: Local SQLite database storage
- rest_api: Remote PostgREST/Supabase backend
"""

from .memory import InMemoryTaskRepository
from .rest_api import RestApiTaskRepository
from .sqlite import SqliteTaskRepository

__all__ = [
    "InMemoryTaskRepository",
    "SqliteTaskRepository",
    "RestApiTaskRepository",
]
