"""Dataverse Provider - Connection configuration for a Power Platform environment."""

from functools import cached_property
from typing import Self

from pydantic import BaseModel, ConfigDict, SecretStr

from pp_envvars.core.auth import DEFAULT_AUTHORITY_HOST, acquire_token
from pp_envvars.core.client import DEFAULT_TIMEOUT, DataverseClient
from pp_envvars.engine.handlers import RemoteStoreClient


class ClientCredentialsAuth(BaseModel):
    """Service principal (app registration) credentials."""

    tenant_id: str
    client_id: str
    client_secret: SecretStr
    authority_host: str = DEFAULT_AUTHORITY_HOST


class DataverseProvider(BaseModel):
    """Connection configuration for a Dataverse environment.

    Provide an environment URL and client-credentials auth, or inject a
    ready client with `from_client` (tests, pre-authenticated sessions).

    Examples:
        # Service principal
        provider = DataverseProvider(
            environment_url="https://contoso-uat.crm.dynamics.com",
            auth=ClientCredentialsAuth(
                tenant_id="...", client_id="...", client_secret="..."
            ),
        )

        # Injected client
        provider = DataverseProvider.from_client(fake_store)
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    environment_url: str | None = None
    auth: ClientCredentialsAuth | None = None
    timeout: float = DEFAULT_TIMEOUT

    # Injected client (for testing)
    _injected_client: RemoteStoreClient | None = None

    @classmethod
    def from_client(cls, client: RemoteStoreClient) -> Self:
        """Create a provider with an injected client.

        Args:
            client: Any object implementing ``RemoteStoreClient``
        """
        provider = cls.model_construct()
        provider._injected_client = client
        return provider

    @cached_property
    def client(self) -> RemoteStoreClient:
        """Get an authenticated client.

        The token is acquired on first access, so an ``AuthenticationError``
        surfaces before any variable is processed.
        """
        if self._injected_client is not None:
            return self._injected_client

        if self.environment_url is None or self.auth is None:
            raise ValueError(
                "Either provide environment_url+auth, or use DataverseProvider.from_client() "
                "to inject a client"
            )

        token = acquire_token(
            environment_url=self.environment_url,
            tenant_id=self.auth.tenant_id,
            client_id=self.auth.client_id,
            client_secret=self.auth.client_secret.get_secret_value(),
            authority_host=self.auth.authority_host,
        )
        return DataverseClient(self.environment_url, token, timeout=self.timeout)

    def close(self) -> None:
        """Close the client built by this provider, if one was built.

        An injected client belongs to the caller and is left open.
        """
        client = self.__dict__.get("client")
        if client is None or client is self._injected_client:
            return
        client.close()
