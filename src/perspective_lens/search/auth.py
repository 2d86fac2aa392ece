"""OAuth2 access tokens for Google service-account credentials."""

import asyncio
import json
import logging
from typing import Any

import google.auth.transport.requests
from google.oauth2 import service_account

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"

logger = logging.getLogger(__name__)

_credentials_cache: dict[str, service_account.Credentials] = {}


def load_credential_info(raw: str | dict[str, Any]) -> dict[str, Any]:
    """Parse a service-account credential from a JSON string or mapping.

    Raises:
        ValueError: If the credential is not valid JSON or lacks required keys.
    """
    info = json.loads(raw) if isinstance(raw, str) else dict(raw)
    missing = [k for k in ("client_email", "private_key", "token_uri") if not info.get(k)]
    if missing:
        raise ValueError(f"Service account credential missing keys: {', '.join(missing)}")
    return info


async def get_access_token(
    credential_info: dict[str, Any],
    *,
    scopes: tuple[str, ...] = (CLOUD_PLATFORM_SCOPE,),
) -> str:
    """Exchange a service-account credential for a bearer token.

    Uses the JWT-bearer grant through ``google-auth``. Tokens are cached per
    client email and refreshed once they expire.
    """
    key = f"{credential_info['client_email']}|{' '.join(scopes)}"
    credentials = _credentials_cache.get(key)
    if credentials is None:
        credentials = service_account.Credentials.from_service_account_info(
            credential_info, scopes=list(scopes)
        )
        _credentials_cache[key] = credentials

    if not credentials.valid:
        logger.debug(f"Refreshing access token for {credential_info['client_email']}")
        # google-auth refreshes synchronously over requests
        await asyncio.to_thread(credentials.refresh, google.auth.transport.requests.Request())
    return str(credentials.token)
