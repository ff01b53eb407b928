"""Microsoft Graph API client bound to one token provider and base URL."""

from __future__ import annotations

import json
import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any
from urllib import request as urllib_request
from urllib.error import HTTPError

from onedrive_transfer.graph.auth import TokenProvider, token_provider_from_config

if TYPE_CHECKING:
    from onedrive_transfer.config import AppConfig

logger = logging.getLogger(__name__)

GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"
DOWNLOAD_BLOCK_SIZE = 1024 * 1024


class GraphApiError(Exception):
    """Raised when the Graph API returns a non-2xx response."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"Graph API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class FetchFailed(GraphApiError):
    """A listing or download GET did not return the expected status."""

    def __init__(self, status_code: int, message: str, body: str = "") -> None:
        super().__init__(status_code, message)
        self.body = body


class SessionCreateFailed(GraphApiError):
    """The upload session could not be created."""


class ChunkUploadFailed(GraphApiError):
    """A chunk PUT against an upload session returned a non-2xx status."""

    def __init__(self, chunk_index: int, status_code: int, message: str) -> None:
        super().__init__(status_code, f"chunk {chunk_index}: {message}")
        self.chunk_index = chunk_index


@dataclass(frozen=True)
class GraphResponse:
    """Status code and raw body of one Graph HTTP exchange."""

    status: int
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> dict[str, Any]:
        """Parse the body as a JSON object; an empty body parses as ``{}``."""
        if not self.body:
            return {}
        return json.loads(self.body)  # type: ignore[no-any-return]

    def error_detail(self, fallback: str = "") -> str:
        """Return the Graph ``error.message`` from the body, or *fallback*."""
        try:
            detail = self.json().get("error", {}).get("message")
        except (ValueError, AttributeError):
            detail = None
        return str(detail) if detail else (fallback or self.text or f"HTTP {self.status}")


class GraphClient:
    """Authenticated client for Microsoft Graph API.

    One instance carries everything a call needs (token provider, base URL,
    timeout), so several tenants or sessions can be used side by side.
    """

    def __init__(
        self,
        token_provider: TokenProvider,
        base_url: str = GRAPH_BASE_URL,
        timeout: float = 60.0,
    ) -> None:
        """Initialise the client.

        Args:
            token_provider: Source of bearer tokens.
            base_url: Graph API root prepended to relative paths.
            timeout: Socket timeout in seconds for each request.
        """
        self._tokens = token_provider
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    @property
    def base_url(self) -> str:
        return self._base_url

    def url_for(self, path_or_url: str) -> str:
        """Resolve a path relative to the base URL; absolute URLs pass through."""
        if path_or_url.startswith(("https://", "http://")):
            return path_or_url
        return f"{self._base_url}{path_or_url}"

    def _build_request(
        self,
        method: str,
        url: str,
        data: bytes | None,
        headers: dict[str, str] | None,
        authenticated: bool,
    ) -> urllib_request.Request:
        all_headers = {"Accept": "application/json"}
        all_headers.update(headers or {})
        req = urllib_request.Request(
            self.url_for(url), data=data, headers=all_headers, method=method
        )
        if authenticated:
            # Unredirected: /content answers 302 to a pre-authenticated host
            # that must not receive the Graph token.
            req.add_unredirected_header(
                "Authorization", f"Bearer {self._tokens.get_bearer_token()}"
            )
        return req

    def send(
        self,
        method: str,
        url: str,
        data: bytes | None = None,
        headers: dict[str, str] | None = None,
        authenticated: bool = True,
    ) -> GraphResponse:
        """Perform one HTTP request and return its status and body.

        HTTP error statuses are returned, not raised, so callers can map them
        to the failure that fits their phase.

        Args:
            method: HTTP verb.
            url: Path relative to the base URL, or an absolute URL.
            data: Request body bytes.
            headers: Extra request headers.
            authenticated: Whether to attach the bearer token. Upload session
                URLs are pre-authenticated and must be sent without it.

        Returns:
            GraphResponse with the status code and raw body.

        Raises:
            GraphAuthError: If token acquisition fails.
        """
        req = self._build_request(method, url, data, headers, authenticated)
        try:
            with urllib_request.urlopen(req, timeout=self._timeout) as resp:
                return GraphResponse(status=resp.status, body=resp.read())
        except HTTPError as exc:
            logger.info(
                "[send] non-2xx response; method:%s;status:%d", method, exc.code
            )
            return GraphResponse(status=exc.code, body=exc.read() or b"")

    def get(self, path: str) -> dict[str, Any]:
        """Perform an authenticated GET request to the Graph API.

        Args:
            path: URL path relative to the base URL (must start with '/').

        Returns:
            Parsed JSON response body as a dict.

        Raises:
            GraphAuthError: If token acquisition fails.
            GraphApiError: If the API returns a non-2xx status code.
        """
        response = self.send("GET", path)
        if not response.ok:
            raise GraphApiError(response.status, response.error_detail())
        return response.json()

    def post_json(self, path: str, payload: dict[str, Any]) -> GraphResponse:
        """POST a JSON body and return the raw response."""
        return self.send(
            "POST",
            path,
            data=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )

    def download(
        self,
        url: str,
        destination: str | Path,
        authenticated: bool = True,
    ) -> int:
        """Stream a response body to a local file.

        Args:
            url: Path relative to the base URL, or an absolute URL.
            destination: Local file path; parent directories are created.
            authenticated: Whether to attach the bearer token.

        Returns:
            Number of bytes written.

        Raises:
            GraphAuthError: If token acquisition fails.
            FetchFailed: If the API returns a non-2xx status code.
        """
        req = self._build_request("GET", url, None, None, authenticated)
        dest = Path(destination)
        dest.parent.mkdir(parents=True, exist_ok=True)
        try:
            with urllib_request.urlopen(req, timeout=self._timeout) as resp:
                with open(dest, "wb") as fh:
                    shutil.copyfileobj(resp, fh, DOWNLOAD_BLOCK_SIZE)
        except HTTPError as exc:
            failed = GraphResponse(status=exc.code, body=exc.read() or b"")
            raise FetchFailed(exc.code, failed.error_detail(str(exc.reason)), failed.text) from exc
        return os.path.getsize(dest)


def graph_client_from_config(config: AppConfig) -> GraphClient:
    """Construct a GraphClient from application configuration.

    Args:
        config: Application configuration instance.

    Returns:
        Configured GraphClient instance.
    """
    return GraphClient(
        token_provider=token_provider_from_config(config),
        base_url=config.graph_base_url,
        timeout=config.http_timeout,
    )
