"""Core infrastructure components for pp-envvars."""

from pp_envvars.core.auth import acquire_token
from pp_envvars.core.client import DataverseClient
from pp_envvars.core.provider import ClientCredentialsAuth, DataverseProvider

__all__ = ["ClientCredentialsAuth", "DataverseClient", "DataverseProvider", "acquire_token"]
