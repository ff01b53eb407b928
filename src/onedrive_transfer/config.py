"""Application configuration loaded from environment variables or a JSON file."""

import json
import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"
DEFAULT_AUTHORITY_BASE_URL = "https://login.microsoftonline.com"
DEFAULT_CHUNK_SIZE = 10 * 1024 * 1024  # 10 MiB, a multiple of 320 KiB
DEFAULT_HTTP_TIMEOUT = 60.0


@dataclass(frozen=True)
class AppConfig:
    """Centralized application configuration.

    Required fields have no defaults and will cause a KeyError at startup
    if the corresponding setting is missing. Transfer tuning has sensible
    defaults but can be overridden.
    """

    # Required, no defaults: fail at startup if missing
    client_id: str
    client_secret: str
    tenant_id: str

    # Defaults provided, overridable
    graph_base_url: str = DEFAULT_GRAPH_BASE_URL
    authority_base_url: str = DEFAULT_AUTHORITY_BASE_URL
    chunk_size: int = DEFAULT_CHUNK_SIZE
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    drive_id: str = ""


def load_config() -> AppConfig:
    """Construct an AppConfig from environment variables.

    Required environment variables:
        OT_CLIENT_ID: Azure AD application (client) ID.
        OT_CLIENT_SECRET: Azure AD application client secret.
        OT_TENANT_ID: Azure AD tenant ID.

    Optional environment variables (with defaults):
        OT_GRAPH_BASE_URL: Graph API root (default: https://graph.microsoft.com/v1.0).
        OT_AUTHORITY_BASE_URL: Identity platform root (default: https://login.microsoftonline.com).
        OT_CHUNK_SIZE: Upload chunk size in bytes (default: 10 MiB).
        OT_HTTP_TIMEOUT: Per-request timeout in seconds (default: 60).
        OT_DRIVE_ID: Default drive used by the HTTP listing endpoint.

    Returns:
        Configured AppConfig instance.
    """
    return AppConfig(
        client_id=os.environ["OT_CLIENT_ID"],
        client_secret=os.environ["OT_CLIENT_SECRET"],
        tenant_id=os.environ["OT_TENANT_ID"],
        graph_base_url=os.environ.get("OT_GRAPH_BASE_URL", DEFAULT_GRAPH_BASE_URL),
        authority_base_url=os.environ.get("OT_AUTHORITY_BASE_URL", DEFAULT_AUTHORITY_BASE_URL),
        chunk_size=int(os.environ.get("OT_CHUNK_SIZE", str(DEFAULT_CHUNK_SIZE))),
        http_timeout=float(os.environ.get("OT_HTTP_TIMEOUT", str(DEFAULT_HTTP_TIMEOUT))),
        drive_id=os.environ.get("OT_DRIVE_ID", ""),
    )


def load_config_file(path: str | Path) -> AppConfig:
    """Construct an AppConfig from a JSON configuration file.

    The file holds one object whose keys are the AppConfig field names,
    e.g. ``{"client_id": "...", "client_secret": "...", "tenant_id": "..."}``.
    Environment variables are not consulted.

    Args:
        path: Location of the JSON file.

    Returns:
        Configured AppConfig instance.

    Raises:
        KeyError: If a required key is missing.
        ValueError: If the file does not contain a JSON object.
    """
    with open(path, encoding="utf-8") as fh:
        raw = json.load(fh)
    if not isinstance(raw, dict):
        raise ValueError(f"Config file must contain a JSON object: {path}")

    return AppConfig(
        client_id=raw["client_id"],
        client_secret=raw["client_secret"],
        tenant_id=raw["tenant_id"],
        graph_base_url=raw.get("graph_base_url", DEFAULT_GRAPH_BASE_URL),
        authority_base_url=raw.get("authority_base_url", DEFAULT_AUTHORITY_BASE_URL),
        chunk_size=int(raw.get("chunk_size", DEFAULT_CHUNK_SIZE)),
        http_timeout=float(raw.get("http_timeout", DEFAULT_HTTP_TIMEOUT)),
        drive_id=raw.get("drive_id", ""),
    )
