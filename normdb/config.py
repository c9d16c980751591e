"""
Configuration for normdb.

Uses pydantic-settings for environment variable loading. Every setting has a
default suitable for library use; environment variables prefixed with
NORMDB_ override them (e.g. NORMDB_DEFAULT_DEPTH=3).

Invariants:
    - default_depth is never negative
    - Settings are read once per process unless reset_settings() is called
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Store configuration loaded from environment."""

    # Deep resolution
    default_depth: int = Field(
        default=10, ge=0, description="Cross-table hops followed when no depth is given"
    )
    warn_unresolved: bool = Field(
        default=True, description="Log a warning for each reference that cannot be resolved"
    )

    # Materialization
    validate_population: bool = Field(
        default=True, description="Validate population entries against table definitions"
    )

    # Ad-hoc records
    label_template: str = Field(
        default="{table}_{id}", description="Default label for records built with create"
    )

    model_config = {"env_prefix": "NORMDB_"}

    def default_label(self, table: str, record_id: str) -> str:
        """Label used when a created record has no explicit one."""
        return self.label_template.format(table=table, id=record_id)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the process-wide settings."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset the process-wide settings (for testing only)."""
    global _settings
    _settings = None
