"""YAML configuration and desired-state file loaders."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from dotenv import dotenv_values
from pydantic import StrictStr, TypeAdapter, ValidationError
from ruamel.yaml import YAML

from pp_envvars.config.schema import Config

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised for configuration loading / validation errors."""


# Field name → environment variable.
_PROVIDER_ENV_MAP: dict[str, str] = {
    "environment_url": "PP_ENVIRONMENT_URL",
    "tenant_id": "PP_TENANT_ID",
    "client_id": "PP_CLIENT_ID",
    "client_secret": "PP_CLIENT_SECRET",
    "authority_host": "PP_AUTHORITY_HOST",
    "timeout": "PP_TIMEOUT",
}

_DESIRED_STATE = TypeAdapter(dict[StrictStr, StrictStr])


def _resolve_provider(raw_provider: dict[str, Any], config_dir: Path) -> dict[str, Any]:
    """Resolve provider fields from YAML, env vars, and ``.env`` file.

    Priority (highest wins): YAML value > env var > ``.env`` file.
    """
    env_file = config_dir / ".env"
    dotenv_vals = dotenv_values(env_file, encoding="utf-8-sig") if env_file.is_file() else {}

    resolved: dict[str, Any] = {}
    for field, env_key in _PROVIDER_ENV_MAP.items():
        val = raw_provider.get(field)
        if val is None:
            val = os.environ.get(env_key)
        if val is None:
            val = dotenv_vals.get(env_key)
        if val is not None:
            resolved[field] = val

    unknown = set(raw_provider) - set(_PROVIDER_ENV_MAP)
    if unknown:
        raise ConfigError(f"Unknown provider field(s): {', '.join(sorted(unknown))}")
    return resolved


def load_config(path: Path | str) -> Config:
    """Load a YAML configuration file and return a ``Config`` object.

    Raises:
        ConfigError: On YAML parse errors or validation failures.
    """
    path = Path(path)

    try:
        raw = YAML(typ="safe").load(path)
    except Exception as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")

    raw_provider = raw.get("provider") or {}
    if not isinstance(raw_provider, dict):
        raise ConfigError(f"{path}: 'provider' must be a mapping")

    try:
        raw["provider"] = _resolve_provider(raw_provider, path.parent)
        config = Config.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc

    config.config_dir = path.parent
    logger.info("Loaded config from %s", path)
    return config


def _reject_duplicate_keys(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in pairs:
        if key in result:
            raise ConfigError(f"Duplicate key '{key}'")
        result[key] = value
    return result


def load_desired_state(path: Path | str) -> dict[str, str]:
    """Load a flat JSON object of schema name → value.

    Every value must already be a JSON string; nothing is coerced.

    Raises:
        ConfigError: If the file is unreadable, is not a JSON object, has
            duplicate keys, or holds a non-string value.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc

    try:
        raw = json.loads(text, object_pairs_hook=_reject_duplicate_keys)
    except ConfigError as exc:
        raise ConfigError(f"{path}: {exc}") from exc
    except ValueError as exc:
        raise ConfigError(f"{path}: invalid JSON: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: expected a JSON object of variable names to string values")

    try:
        desired = _DESIRED_STATE.validate_python(raw)
    except ValidationError as exc:
        bad = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
        raise ConfigError(
            f"{path}: values must be strings (offending keys: {', '.join(bad)})"
        ) from exc

    logger.info("Loaded %d desired variable(s) from %s", len(desired), path)
    return desired
