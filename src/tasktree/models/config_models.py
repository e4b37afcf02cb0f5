"""Configuration models for the context system.

A context names one storage backend (in-memory, local SQLite file or a
remote PostgREST/Supabase endpoint). The active context is resolved once at
startup and the matching repository is injected into services.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator


class APIConfig(BaseModel):
    """Remote backend configuration."""

    timeout: float = Field(default=30.0, gt=0)
    retry: int = Field(default=3, ge=0)


class ExportConfig(BaseModel):
    """Default export options used by the CLI."""

    include_completed: bool = True
    include_description: bool = True
    include_labels: bool = True


class Context(BaseModel):
    """Context configuration for a storage backend."""

    name: str = Field(..., description="Unique context name")
    type: Literal["memory", "local", "remote"] = Field(..., description="Context type")
    source: str = Field(default="", description="Database path or API URL")
    api_key: str | None = Field(default=None, description="API key (remote only)")
    description: str = Field(default="", description="Human-readable description")

    @field_validator("source")
    @classmethod
    def validate_source(cls, v: str) -> str:
        return v.strip()

    @model_validator(mode="after")
    def _source_required(self) -> Context:
        if self.type != "memory" and not self.source:
            raise ValueError(f"source cannot be empty for a {self.type} context")
        return self


class AppConfig(BaseModel):
    """Main tasktree configuration."""

    current_context_name: str = Field(
        default="local", description="Active context name"
    )
    contexts: list[Context] = Field(
        default_factory=list, description="Available contexts"
    )

    api: APIConfig = Field(default_factory=APIConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)

    def get_context(self, name: str) -> Context:
        """Get context by name."""
        for ctx in self.contexts:
            if ctx.name == name:
                return ctx
        raise ValueError(f"Context '{name}' not found")

    def get_current_context(self) -> Context:
        """Get the currently active context."""
        return self.get_context(self.current_context_name)

    def add_context(self, context: Context):
        """Add a new context.

        Raises:
            ValueError: If context with the same name already exists
        """
        if any(ctx.name == context.name for ctx in self.contexts):
            raise ValueError(
                f"Context '{context.name}' already exists."
                " Use a different name or remove the existing context first."
            )
        self.contexts.append(context)

    def remove_context(self, name: str):
        """Remove a context by name."""
        original_len = len(self.contexts)
        self.contexts = [ctx for ctx in self.contexts if ctx.name != name]
        if len(self.contexts) == original_len:
            raise ValueError(f"Context '{name}' not found")
        return True
