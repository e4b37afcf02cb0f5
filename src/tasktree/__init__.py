"""tasktree - personal hierarchical task manager."""

__version__ = "0.3.0"
