"""File downloads from a drive to the local filesystem."""

from __future__ import annotations

import logging
from pathlib import Path

from onedrive_transfer.graph.client import GraphClient
from onedrive_transfer.graph.drives import content_url

logger = logging.getLogger(__name__)


def download_item(
    client: GraphClient, drive_id: str, item_id: str, destination: str | Path
) -> int:
    """Download a file's content by drive and item ID.

    Returns:
        Number of bytes written to *destination*.

    Raises:
        FetchFailed: If the content request does not succeed.
    """
    written = client.download(content_url(drive_id, item_id), destination)
    logger.info(
        "[download_item] downloaded file; item_id:%s;destination:%s;bytes:%d",
        item_id,
        destination,
        written,
    )
    return written


def download_from_url(client: GraphClient, download_url: str, destination: str | Path) -> int:
    """Download from a pre-authenticated ``@microsoft.graph.downloadUrl``.

    The URL carries its own short-lived credential, so no bearer token is sent.
    """
    written = client.download(download_url, destination, authenticated=False)
    logger.info("[download_from_url] downloaded file; destination:%s;bytes:%d", destination, written)
    return written
