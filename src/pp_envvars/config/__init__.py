"""YAML configuration loading and convenience plan/apply API."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import SecretStr

from pp_envvars.config.loader import ConfigError, load_config, load_desired_state
from pp_envvars.config.schema import Config, ProviderConfig
from pp_envvars.core.provider import ClientCredentialsAuth, DataverseProvider
from pp_envvars.engine.reconciler import ProgressCallback, reconcile
from pp_envvars.engine.types import ReconciliationReport

if TYPE_CHECKING:
    from pathlib import Path

__all__ = [
    "Config",
    "ConfigError",
    "ProviderConfig",
    "apply",
    "connect",
    "desired_state",
    "load",
    "load_config",
    "load_desired_state",
    "plan",
]

_REQUIRED_PROVIDER_FIELDS: dict[str, str] = {
    "environment_url": "PP_ENVIRONMENT_URL",
    "tenant_id": "PP_TENANT_ID",
    "client_id": "PP_CLIENT_ID",
    "client_secret": "PP_CLIENT_SECRET",
}


def load(path: Path | str) -> Config:
    """Load a YAML configuration file."""
    return load_config(path)


def desired_state(config: Config, values: Path | None = None) -> dict[str, str]:
    """Load the desired-state file named by *values* or by the config."""
    path = values if values is not None else config.values_path
    if path is None:
        raise ConfigError("No values file given (set 'values' in YAML or pass --values)")
    return load_desired_state(path)


def _provider_from_config(config: Config) -> DataverseProvider:
    """Build a ``DataverseProvider`` from a ``Config`` instance."""
    p = config.provider
    for field, env_key in _REQUIRED_PROVIDER_FIELDS.items():
        if not getattr(p, field):
            raise ConfigError(f"provider.{field} is required (set in YAML or {env_key} env var)")
    auth = ClientCredentialsAuth(
        tenant_id=p.tenant_id,
        client_id=p.client_id,
        client_secret=SecretStr(p.client_secret),
        authority_host=p.authority_host,
    )
    return DataverseProvider(environment_url=p.environment_url, auth=auth, timeout=p.timeout)


def connect(config: Config) -> DataverseProvider:
    """Build a provider that can be shared by several ``plan``/``apply`` calls.

    No token is requested until the first run needs one. The caller owns the
    provider and should ``close()`` it when done.
    """
    return _provider_from_config(config)


def _run(
    config: Config,
    values: Path | None,
    *,
    dry_run: bool,
    provider: DataverseProvider | None = None,
    progress: ProgressCallback | None = None,
) -> ReconciliationReport:
    desired = desired_state(config, values)
    owned = provider is None
    if provider is None:
        provider = _provider_from_config(config)
    try:
        if not desired:
            return ReconciliationReport(dry_run=dry_run)
        return reconcile(desired, provider.client, dry_run=dry_run, progress=progress)
    finally:
        if owned:
            provider.close()


def plan(
    config: Config,
    values: Path | None = None,
    *,
    provider: DataverseProvider | None = None,
) -> ReconciliationReport:
    """Classify every desired variable without writing anything.

    Without *provider* a new one is built from *config* and closed afterwards.
    """
    return _run(config, values, dry_run=True, provider=provider)


def apply(
    config: Config,
    values: Path | None = None,
    *,
    provider: DataverseProvider | None = None,
    progress: ProgressCallback | None = None,
) -> ReconciliationReport:
    """Reconcile the remote environment to the desired values."""
    return _run(config, values, dry_run=False, provider=provider, progress=progress)
