"""Configuration service for tasktree.

This module provides the ConfigService class, the single source of truth for
configuration. It handles:

- Loading and saving config.json
- Context management (list, add, remove, switch)
- Config file initialization with sensible defaults
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import pydantic
from platformdirs import user_config_dir, user_data_dir

from tasktree.models.config_models import AppConfig, Context

APP_NAME = "tasktree"


class ConfigService:
    """Service for managing application configuration.

    The configuration lives in ``config.json`` under the platform config
    directory. It is read lazily and written back after every change.
    """

    def __init__(self):
        """Initialize the config service."""
        self.config_dir = Path(user_config_dir(APP_NAME))
        self.config_path = self.config_dir / "config.json"
        self.data_dir = Path(user_data_dir(APP_NAME))

        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> AppConfig:
        """Load configuration from disk, creating the default file on first run."""
        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._config = AppConfig.model_validate_json(f.read())
        except FileNotFoundError:
            # Expected on first run
            self._config = self.create_default_config()
        except (OSError, pydantic.ValidationError) as e:
            raise RuntimeError(f"Failed to load config {self.config_path}: {e}") from e

        return self._config

    def save_config(self):
        """Save the current configuration to disk."""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                f.write(self.config.model_dump_json(indent=4))

            # May hold API keys
            self.config_path.chmod(0o600)
        except OSError as e:
            raise RuntimeError(f"Failed to save config: {e}") from e

    def reset_config(self) -> AppConfig:
        """Reset configuration to defaults."""
        self._config = None
        if self.config_path.exists():
            self.config_path.unlink()
        return self.create_default_config()

    def create_default_config(self) -> AppConfig:
        """Create and save a configuration with one local SQLite context."""
        local_context = Context(
            name="local",
            type="local",
            source=str(self.data_dir / "tasktree.db"),
            description="Local SQLite storage",
        )
        self._config = AppConfig(
            current_context_name=local_context.name,
            contexts=[local_context],
        )
        self.save_config()
        return self._config

    def list_contexts(self) -> list[Context]:
        """List all available contexts."""
        return self.config.contexts

    def get_current_context(self) -> Context:
        """Get the currently active context.

        Raises:
            ValueError: If the current context is not configured
        """
        return self.config.get_current_context()

    def use_context(self, name: str) -> Context:
        """Set the current context by name."""
        context = self.config.get_context(name)
        self.config.current_context_name = context.name
        self.save_config()
        return context

    def add_context(self, context: Context):
        """Add a new context to the configuration."""
        self.config.add_context(context)
        self.save_config()

    def remove_context(self, name: str):
        """Remove a context from the configuration.

        Raises:
            ValueError: If the context is missing or currently active
        """
        if name == self.config.current_context_name:
            raise ValueError(f"Context '{name}' is active; switch to another context first")
        self.config.remove_context(name)
        self.save_config()


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Get a cached ConfigService instance."""
    config_service = ConfigService()
    config_service.load_config()
    return config_service
