"""Unit tests for graph/auth.py — MSAL token provider."""

from unittest.mock import patch

import pytest

from onedrive_transfer.config import AppConfig
from onedrive_transfer.graph.auth import (
    GRAPH_SCOPES,
    GraphAuthError,
    MsalTokenProvider,
    token_provider_from_config,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_provider() -> MsalTokenProvider:
    """Return an MsalTokenProvider with a mocked MSAL app."""
    with patch("onedrive_transfer.graph.auth.msal.ConfidentialClientApplication"):
        provider = MsalTokenProvider(
            client_id="test-client-id",
            client_secret="test-secret",
            tenant_id="test-tenant-id",
        )
    return provider


def _mock_token_success(provider: MsalTokenProvider, token: str = "fake-token-abc") -> None:
    provider._app.acquire_token_for_client.return_value = {  # type: ignore[attr-defined]
        "access_token": token,
        "expires_in": 3599,
    }


def _mock_token_failure(provider: MsalTokenProvider) -> None:
    provider._app.acquire_token_for_client.return_value = {  # type: ignore[attr-defined]
        "error": "invalid_client",
        "error_description": "Client secret is wrong",
    }


# ---------------------------------------------------------------------------
# Constructor tests
# ---------------------------------------------------------------------------


class TestMsalTokenProviderInit:
    def test_msal_app_created_with_correct_authority(self) -> None:
        with patch("onedrive_transfer.graph.auth.msal.ConfidentialClientApplication") as mock_msal:
            MsalTokenProvider("cid", "csecret", "tid-001")
            mock_msal.assert_called_once_with(
                client_id="cid",
                client_credential="csecret",
                authority="https://login.microsoftonline.com/tid-001",
            )

    def test_custom_authority_base_url(self) -> None:
        with patch("onedrive_transfer.graph.auth.msal.ConfidentialClientApplication") as mock_msal:
            MsalTokenProvider("cid", "csecret", "tid", authority_base_url="https://login.example")
            assert mock_msal.call_args.kwargs["authority"] == "https://login.example/tid"

    def test_from_config(self) -> None:
        config = AppConfig(client_id="cid", client_secret="cs", tenant_id="tid")
        with patch("onedrive_transfer.graph.auth.msal.ConfidentialClientApplication") as mock_msal:
            token_provider_from_config(config)
        mock_msal.assert_called_once_with(
            client_id="cid",
            client_credential="cs",
            authority="https://login.microsoftonline.com/tid",
        )


# ---------------------------------------------------------------------------
# get_bearer_token / refresh_if_needed tests
# ---------------------------------------------------------------------------


class TestGetBearerToken:
    def test_returns_token_on_success(self) -> None:
        provider = _make_provider()
        _mock_token_success(provider)
        assert provider.get_bearer_token() == "fake-token-abc"
        provider._app.acquire_token_for_client.assert_called_once_with(  # type: ignore[attr-defined]
            scopes=GRAPH_SCOPES
        )

    def test_raises_auth_error_on_failure(self) -> None:
        provider = _make_provider()
        _mock_token_failure(provider)
        with pytest.raises(GraphAuthError, match="invalid_client"):
            provider.get_bearer_token()

    def test_raises_auth_error_when_msal_returns_none(self) -> None:
        provider = _make_provider()
        provider._app.acquire_token_for_client.return_value = None  # type: ignore[attr-defined]
        with pytest.raises(GraphAuthError, match="unknown_error"):
            provider.get_bearer_token()

    def test_reuses_token_while_valid(self) -> None:
        provider = _make_provider()
        _mock_token_success(provider)
        provider.get_bearer_token()
        provider.get_bearer_token()
        assert provider._app.acquire_token_for_client.call_count == 1  # type: ignore[attr-defined]

    def test_expired_token_is_replaced_on_next_call(self) -> None:
        provider = _make_provider()
        _mock_token_success(provider, token="first")
        with patch("onedrive_transfer.graph.auth.time.monotonic", return_value=1000.0):
            provider.get_bearer_token()

        _mock_token_success(provider, token="second")
        with patch("onedrive_transfer.graph.auth.time.monotonic", return_value=1000.0 + 3600.0):
            assert provider.get_bearer_token() == "second"

    def test_failed_reacquire_does_not_return_stale_token(self) -> None:
        provider = _make_provider()
        _mock_token_success(provider, token="first")
        with patch("onedrive_transfer.graph.auth.time.monotonic", return_value=1000.0):
            provider.get_bearer_token()

        _mock_token_failure(provider)
        with (
            patch("onedrive_transfer.graph.auth.time.monotonic", return_value=1000.0 + 3600.0),
            pytest.raises(GraphAuthError, match="invalid_client"),
        ):
            provider.get_bearer_token()


class TestRefreshIfNeeded:
    def test_reacquires_when_token_near_expiry(self) -> None:
        provider = _make_provider()
        _mock_token_success(provider, token="first")

        with patch("onedrive_transfer.graph.auth.time.monotonic", return_value=1000.0):
            assert provider.get_bearer_token() == "first"

        _mock_token_success(provider, token="second")
        # 3599s lifetime minus the 300s margin has elapsed.
        with patch("onedrive_transfer.graph.auth.time.monotonic", return_value=1000.0 + 3300.0):
            provider.refresh_if_needed()
            assert provider.get_bearer_token() == "second"

    def test_keeps_token_before_margin(self) -> None:
        provider = _make_provider()
        _mock_token_success(provider, token="first")

        with patch("onedrive_transfer.graph.auth.time.monotonic", return_value=1000.0):
            provider.get_bearer_token()
        with patch("onedrive_transfer.graph.auth.time.monotonic", return_value=1000.0 + 1000.0):
            provider.refresh_if_needed()

        assert provider._app.acquire_token_for_client.call_count == 1  # type: ignore[attr-defined]
