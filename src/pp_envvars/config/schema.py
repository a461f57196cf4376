"""Configuration models for YAML-based reconciliation."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, PositiveFloat
from pydantic_settings import BaseSettings, SettingsConfigDict

from pp_envvars.core.auth import DEFAULT_AUTHORITY_HOST
from pp_envvars.core.client import DEFAULT_TIMEOUT


class ProviderConfig(BaseSettings):
    """Dataverse connection settings.

    Fields can be set via YAML (constructor kwargs) or environment variables
    with the ``PP_`` prefix.  Constructor kwargs take precedence.

    ``client_secret`` is typically provided via the ``PP_CLIENT_SECRET``
    environment variable rather than YAML to avoid committing secrets to
    version control.
    """

    model_config = SettingsConfigDict(env_prefix="PP_")

    environment_url: str | None = None
    tenant_id: str | None = None
    client_id: str | None = None
    client_secret: str | None = None
    authority_host: str = DEFAULT_AUTHORITY_HOST
    timeout: PositiveFloat = DEFAULT_TIMEOUT


class Config(BaseModel):
    """Reconciliation configuration for one target environment."""

    model_config = ConfigDict(extra="forbid")

    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    values: Path | None = None
    config_dir: Path = Path()

    @property
    def values_path(self) -> Path | None:
        """The desired-state file, resolved against the config directory."""
        if self.values is None:
            return None
        return self.values if self.values.is_absolute() else self.config_dir / self.values
