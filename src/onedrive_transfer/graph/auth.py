"""Bearer token acquisition for Microsoft Graph via MSAL."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, Protocol

import msal

if TYPE_CHECKING:
    from onedrive_transfer.config import AppConfig

logger = logging.getLogger(__name__)

GRAPH_SCOPES = ["https://graph.microsoft.com/.default"]

# Re-acquire this many seconds before the token actually expires.
REFRESH_MARGIN_SECONDS = 300


class GraphAuthError(Exception):
    """Raised when MSAL token acquisition fails."""


class TokenProvider(Protocol):
    """Supplies a currently valid bearer token."""

    def get_bearer_token(self) -> str: ...

    def refresh_if_needed(self) -> None: ...


class MsalTokenProvider:
    """Client credentials token provider backed by an MSAL confidential client."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        tenant_id: str,
        authority_base_url: str = "https://login.microsoftonline.com",
    ) -> None:
        """Initialise the MSAL confidential client application.

        Args:
            client_id: Azure AD application (client) ID.
            client_secret: Azure AD application client secret.
            tenant_id: Azure AD tenant ID.
            authority_base_url: Identity platform root URL.
        """
        authority = f"{authority_base_url}/{tenant_id}"
        self._app = msal.ConfidentialClientApplication(
            client_id=client_id,
            client_credential=client_secret,
            authority=authority,
        )
        self._token: str | None = None
        self._expires_at = 0.0

    def get_bearer_token(self) -> str:
        """Return a bearer token, acquiring a fresh one when needed.

        Raises:
            GraphAuthError: If MSAL cannot acquire a token.
        """
        if self._token is not None and self._is_fresh():
            return self._token
        return self._acquire_token()

    def refresh_if_needed(self) -> None:
        """Acquire a new token if none is held or the held one is about to expire."""
        if self._token is None or not self._is_fresh():
            self._acquire_token()

    def _is_fresh(self) -> bool:
        return time.monotonic() < self._expires_at - REFRESH_MARGIN_SECONDS

    def _acquire_token(self) -> str:
        """Acquire a Bearer token using client credentials flow.

        Returns:
            Access token string.

        Raises:
            GraphAuthError: If MSAL cannot acquire a token.
        """
        result: dict[str, Any] = self._app.acquire_token_for_client(scopes=GRAPH_SCOPES) or {}
        if "access_token" not in result:
            error = result.get("error", "unknown_error")
            description = result.get("error_description", "No description provided")
            logger.error("[_acquire_token] MSAL token acquisition failed; error:%s", error)
            raise GraphAuthError(f"Token acquisition failed: {error} ({description})")

        self._token = str(result["access_token"])
        self._expires_at = time.monotonic() + int(result.get("expires_in", 3600))
        logger.info(
            "[_acquire_token] acquired token; expires_in:%s", result.get("expires_in", 3600)
        )
        return self._token


def token_provider_from_config(config: AppConfig) -> MsalTokenProvider:
    """Construct an MsalTokenProvider from application configuration.

    Args:
        config: Application configuration instance.

    Returns:
        Configured MsalTokenProvider instance.
    """
    return MsalTokenProvider(
        client_id=config.client_id,
        client_secret=config.client_secret,
        tenant_id=config.tenant_id,
        authority_base_url=config.authority_base_url,
    )
