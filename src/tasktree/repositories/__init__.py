"""Repository interfaces for tasktree.

This package contains the abstract base class that defines the contract for
task persistence. This is the "Port" in the Hexagonal Architecture.

Implementations (Adapters) are in:
- tasktree.adapters.memory (in-process)
- tasktree.adapters.sqlite (local storage)
- tasktree.adapters.rest_api (remote PostgREST/Supabase)
"""

from .repository import TaskRepository

__all__ = ["TaskRepository"]
