"""OAuth2 client-credentials token acquisition for Dataverse."""

from __future__ import annotations

import logging

import msal

from pp_envvars.engine.errors import AuthenticationError

logger = logging.getLogger(__name__)

DEFAULT_AUTHORITY_HOST = "https://login.microsoftonline.com"


def scope_for(environment_url: str) -> str:
    """Return the ``.default`` scope for a Dataverse environment URL."""
    return f"{environment_url.rstrip('/')}/.default"


def acquire_token(
    *,
    environment_url: str,
    tenant_id: str,
    client_id: str,
    client_secret: str,
    authority_host: str = DEFAULT_AUTHORITY_HOST,
) -> str:
    """Acquire a bearer token for *environment_url* with the client-credentials grant.

    Raises:
        AuthenticationError: If the identity provider rejects the request or
            cannot be reached.
    """
    authority = f"{authority_host.rstrip('/')}/{tenant_id}"
    scope = scope_for(environment_url)
    logger.debug("Acquiring token for client %s (scope %s)", client_id, scope)
    try:
        app = msal.ConfidentialClientApplication(
            client_id,
            authority=authority,
            client_credential=client_secret,
        )
        result = app.acquire_token_for_client(scopes=[scope])
    except Exception as exc:
        raise AuthenticationError(f"Token request failed: {exc}") from exc

    token = result.get("access_token") if result else None
    if not token:
        error = (result or {}).get("error", "unknown_error")
        desc = (result or {}).get("error_description", "No description")
        raise AuthenticationError(f"{error}: {desc}")

    logger.info("Acquired access token for %s", environment_url)
    return token
