import logging
from typing import Optional

import msal

from . import config
from .errors import AuthenticationError, ConfigurationError

logger = logging.getLogger(__name__)


def acquire_token(
    client_id: Optional[str] = None,
    client_secret: Optional[str] = None,
    authority: Optional[str] = None,
) -> str:
    """
    Get a Graph access token for this run.

    - client secret configured → app-only token (client credentials)
    - otherwise → operator signs in with the device code flow

    Tokens are not cached; one run, one token.
    """
    client_id = client_id or config.CLIENT_ID
    client_secret = client_secret if client_secret is not None else config.CLIENT_SECRET
    authority = authority or config.AUTHORITY

    if not client_id:
        raise ConfigurationError("AZ_CLIENT_ID is not set")

    try:
        if client_secret:
            result = _acquire_for_client(client_id, client_secret, authority)
        else:
            result = _acquire_by_device_flow(client_id, authority)
    except AuthenticationError:
        raise
    except Exception as e:
        raise AuthenticationError(f"Failed to reach the identity provider: {e}") from e

    if "access_token" not in result:
        raise AuthenticationError(
            f"Failed to acquire token: {result.get('error')}: {result.get('error_description')}"
        )
    logger.info("Connected to Microsoft Graph")
    return result["access_token"]


def _acquire_for_client(client_id: str, client_secret: str, authority: str) -> dict:
    app = msal.ConfidentialClientApplication(
        client_id,
        authority=authority,
        client_credential=client_secret,
    )
    return app.acquire_token_for_client(scopes=config.GRAPH_DEFAULT_SCOPE)


def _acquire_by_device_flow(client_id: str, authority: str) -> dict:
    app = msal.PublicClientApplication(client_id, authority=authority)
    flow = app.initiate_device_flow(scopes=config.OPERATOR_SCOPES)
    if "message" not in flow:
        raise AuthenticationError(f"Device flow init failed: {flow}")
    print(flow["message"])
    return app.acquire_token_by_device_flow(flow)
